"""
Utilidades comunes para la herramienta de conversión
Funciones helper para logging, file I/O y excepciones
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Any, Optional
import json


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configura el sistema de logging para la aplicación.

    Args:
        verbose: Si True, activa nivel DEBUG. Si False, usa INFO
        log_file: Ruta opcional al archivo de log

    Returns:
        Logger configurado
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    # Formato del log
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt=date_format,
        handlers=handlers
    )

    logger = logging.getLogger('pdi-to-hop')
    logger.setLevel(log_level)

    return logger


def create_output_directory(output_dir: str) -> Path:
    """
    Crea el directorio de salida (y sus padres) si no existe.

    Args:
        output_dir: Ruta del directorio de salida

    Returns:
        Path object del directorio creado
    """
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_json(file_path: str) -> Dict[str, Any]:
    """
    Carga un archivo JSON.

    Args:
        file_path: Ruta del archivo JSON

    Returns:
        Diccionario con los datos cargados
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_new_file(file_path: Path, content: bytes) -> bool:
    """
    Escribe un archivo solo si todavía no existe.

    La creación es exclusiva ('xb'): comprobar y escribir es una única
    operación del sistema de archivos, así que dos procesos no pueden
    crear el mismo archivo a la vez.

    Args:
        file_path: Ruta del archivo a crear
        content: Contenido en bytes

    Returns:
        True si el archivo fue escrito, False si ya existía

    Raises:
        OSError: Si la escritura falla por otro motivo (permisos, disco lleno...)
    """
    try:
        with open(file_path, 'xb') as f:
            f.write(content)
    except FileExistsError:
        return False
    return True


class ConversionError(Exception):
    """Excepción base para errores de conversión"""
    pass


class ConfigurationError(ConversionError):
    """Excepción para recursos de configuración inválidos"""
    pass


class ParseError(ConversionError):
    """El archivo de entrada no es XML bien formado"""
    pass


class UnresolvedConnectionTypeError(ConversionError):
    """El tipo de conexión no existe en la referencia de tipos"""
    pass


class RenderError(ConversionError):
    """Fallo al renderizar el template de metadata"""
    pass


class InvalidConnectionNameError(ConversionError):
    """El nombre de la conexión no sirve como nombre de archivo"""
    pass
