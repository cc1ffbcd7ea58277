"""
PDI to Hop Converter
CLI principal para convertir archivos .ktr de Pentaho al formato .hpl de Hop
"""

import os
import sys
import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple
import logging

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import (
    load_rewrite_map,
    load_connection_types,
    PDI_TRANSFORMATION_EXTENSION,
    HOP_PIPELINE_EXTENSION,
    HOP_RDBMS_METADATA_SUBDIR,
)
from .engine import ConversionEngine
from .renderer import create_renderer
from .utils import setup_logging, create_output_directory, ConversionError

console = Console(legacy_windows=False)
logger = logging.getLogger('pdi-to-hop')

ENV_INPUT_DIR = 'PDI_TO_HOP_INPUT_DIR'
ENV_OUTPUT_DIR = 'PDI_TO_HOP_OUTPUT_DIR'
ENV_CONFIG_DIR = 'PDI_TO_HOP_CONFIG_DIR'


@dataclass
class BatchSummary:
    """Resultado de convertir un lote de archivos"""
    results: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def files_with_errors(self) -> int:
        return sum(1 for _, errors in self.results if errors > 0)

    @property
    def total_errors(self) -> int:
        return sum(errors for _, errors in self.results)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parsea argumentos de línea de comandos.

    Las carpetas pueden venir de variables de entorno (o de un archivo .env)
    cuando no se indican en la línea de comandos.

    Returns:
        Namespace con los argumentos parseados
    """
    parser = argparse.ArgumentParser(
        prog='pdi-to-hop',
        description='Convierte transformaciones de Pentaho PDI (.ktr) a pipelines de Hop (.hpl)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Las conexiones de base de datos embebidas se escriben como metadata en
<config>/metadata/rdbms. Los archivos existentes nunca se sobrescriben.

Ejemplos:
  # Convertir todos los .ktr de una carpeta
  %(prog)s -i /home/me/input -o /home/me/output -c /home/me/config

  # Convertir archivos concretos (se puede repetir -f)
  %(prog)s -i /home/me/input -o /home/me/output -f a.ktr -f b.ktr -c /home/me/config
        """
    )

    parser.add_argument(
        '-i', '--input-folder',
        default=os.getenv(ENV_INPUT_DIR),
        help=f'Carpeta con los archivos .ktr (default: ${ENV_INPUT_DIR})'
    )

    parser.add_argument(
        '-o', '--output-folder',
        default=os.getenv(ENV_OUTPUT_DIR),
        help=f'Carpeta de salida para los archivos .hpl (default: ${ENV_OUTPUT_DIR})'
    )

    parser.add_argument(
        '-c', '--config-folder',
        default=os.getenv(ENV_CONFIG_DIR),
        help=f'Directorio de configuración de Hop (default: ${ENV_CONFIG_DIR})'
    )

    parser.add_argument(
        '-f', '--file',
        dest='files',
        action='append',
        default=[],
        help='Archivo .ktr de la carpeta de entrada a convertir (repetible)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Activa modo verbose para debugging'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Archivo para guardar logs (opcional)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def collect_input_files(input_folder: str, file_names: List[str]) -> List[Path]:
    """
    Determina los archivos a procesar.

    Args:
        input_folder: Carpeta de entrada
        file_names: Nombres indicados con -f. Si está vacío se toman todos los .ktr

    Returns:
        Lista de archivos existentes y legibles
    """
    folder = Path(input_folder)

    if not file_names:
        if not folder.is_dir() or not os.access(folder, os.R_OK):
            logger.error(f"La carpeta de entrada no existe o no se puede leer: {folder}")
            return []
        files = sorted(
            p for p in folder.iterdir()
            if p.is_file() and p.suffix == PDI_TRANSFORMATION_EXTENSION
        )
        logger.info(f"Archivos a procesar: {len(files)}")
        return files

    files = []
    for name in file_names:
        path = folder / name
        if path.is_file() and os.access(path, os.R_OK):
            files.append(path)
        else:
            logger.info(f"El archivo no existe o no se puede leer: {path.name}")
    return files


def output_file_for(output_folder: Path, input_file: Path) -> Path:
    """Nombre del archivo Hop: misma base, extensión .hpl"""
    if input_file.suffix == PDI_TRANSFORMATION_EXTENSION:
        return output_folder / input_file.with_suffix(HOP_PIPELINE_EXTENSION).name
    return output_folder / f"{input_file.name}{HOP_PIPELINE_EXTENSION}"


def convert_files(engine: ConversionEngine, files: List[Path], output_folder: Path) -> BatchSummary:
    """
    Convierte los archivos uno a uno y acumula los errores.

    Un archivo con errores nunca detiene el lote.
    """
    summary = BatchSummary()

    for input_file in files:
        errors = engine.process_file(input_file, output_file_for(output_folder, input_file))
        summary.results.append((input_file.name, errors))

        if errors > 0:
            logger.error(f"Archivo no convertido: {input_file.name}, errores en el archivo: {errors}")
        else:
            logger.debug(f"Archivo convertido: {input_file.name}")

    return summary


def display_summary(summary: BatchSummary) -> None:
    """Muestra un resumen de la conversión"""
    table = Table(title="Conversión PDI -> Hop")
    table.add_column("Archivo", style="cyan")
    table.add_column("Errores", justify="right")
    table.add_column("Estado")

    for name, errors in summary.results:
        status = "[red]ERROR[/red]" if errors else "[green]OK[/green]"
        table.add_row(name, str(errors), status)

    console.print(table)
    console.print(f"Archivos con errores: {summary.files_with_errors}")
    console.print(f"Errores totales: {summary.total_errors}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Función principal del CLI.

    Returns:
        Código de salida (0 = éxito, 1 = archivos con errores, 2 = argumentos inválidos)
    """
    load_dotenv()
    args = parse_arguments(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    logger.info(f"=== PDI to Hop Converter {__version__} ===")

    if not (args.input_folder and args.output_folder and args.config_folder):
        logger.error("Se deben indicar la carpeta de entrada, la de salida y el directorio de configuración de Hop")
        return 2

    logger.info(f"Procesando archivos de: {args.input_folder}")
    logger.info(f"Salida en: {args.output_folder}")
    logger.info(f"Directorio de configuración: {args.config_folder}")

    try:
        rewrite_map = load_rewrite_map()
        connection_types = load_connection_types()
        renderer = create_renderer()
    except ConversionError as e:
        logger.error(f"Error de configuración: {e}")
        return 2

    output_folder = create_output_directory(args.output_folder)
    metadata_dir = create_output_directory(str(Path(args.config_folder) / HOP_RDBMS_METADATA_SUBDIR))

    engine = ConversionEngine(rewrite_map, connection_types, renderer, metadata_dir)
    files = collect_input_files(args.input_folder, args.files)
    summary = convert_files(engine, files, output_folder)

    display_summary(summary)
    logger.info(f"Archivos con errores: {summary.files_with_errors}")
    logger.info(f"Errores totales: {summary.total_errors}")
    logger.info("Procesamiento completo")

    return 1 if summary.files_with_errors else 0


if __name__ == '__main__':
    sys.exit(main())
