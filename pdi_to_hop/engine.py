"""
Motor de conversión PDI -> Hop
Procesa un archivo .ktr completo: extrae conexiones, escribe su metadata,
reescribe el documento y retorna la cantidad de errores encontrados
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union
import logging

from lxml import etree

from .config import RewriteMap, ConnectionTypeReference, HOP_METADATA_EXTENSION
from .extractor import ConnectionExtractor, ConnectionDefinition
from .renderer import TemplateRenderer
from .rewriter import DocumentRewriter
from .utils import (
    write_new_file,
    ParseError,
    RenderError,
    UnresolvedConnectionTypeError,
    InvalidConnectionNameError,
)

logger = logging.getLogger('pdi-to-hop.engine')

PathLike = Union[str, Path]


@dataclass
class ConversionJob:
    """Estado de la conversión de un archivo"""
    input_file: Path
    output_file: Path
    error_count: int = 0


class ConversionEngine:
    """
    Orquesta la conversión de archivos PDI a Hop.

    Los archivos de metadata y los archivos de salida se escriben una sola
    vez: si ya existen se dejan intactos y no se cuenta como error. Procesar
    dos veces el mismo archivo no produce escrituras adicionales.
    """

    def __init__(
        self,
        rewrite_map: RewriteMap,
        connection_types: ConnectionTypeReference,
        renderer: TemplateRenderer,
        metadata_dir: PathLike
    ):
        """
        Inicializa el motor.

        Args:
            rewrite_map: Mapa de reemplazos de tags PDI -> Hop
            connection_types: Referencia de tipos de conexión
            renderer: Renderer ya inicializado para la metadata de conexiones
            metadata_dir: Carpeta donde se escriben los archivos de metadata
        """
        self.connection_types = connection_types
        self.renderer = renderer
        self.metadata_dir = Path(metadata_dir)
        self.extractor = ConnectionExtractor(connection_types)
        self.rewriter = DocumentRewriter(rewrite_map)

    def metadata_file(self, connection_name: str) -> Path:
        """
        Ruta del archivo de metadata de una conexión.

        Raises:
            InvalidConnectionNameError: Si el nombre saldría de la carpeta de metadata
        """
        if (
            not connection_name
            or connection_name in ('.', '..')
            or any(sep in connection_name for sep in ('/', '\\', '\0'))
        ):
            raise InvalidConnectionNameError(
                f"Nombre de conexión no válido como archivo: '{connection_name}'"
            )
        return self.metadata_dir / f"{connection_name}{HOP_METADATA_EXTENSION}"

    def process_file(self, input_file: PathLike, output_file: PathLike) -> int:
        """
        Convierte un archivo PDI.

        Nunca lanza excepciones por errores del archivo: todo se refleja
        en el contador retornado.

        Args:
            input_file: Archivo .ktr de entrada
            output_file: Archivo .hpl a generar

        Returns:
            Cantidad de errores (0 si la conversión fue completa)
        """
        job = ConversionJob(Path(input_file), Path(output_file))
        logger.info(f"Procesando archivo: {job.input_file}")

        try:
            tree = self._parse(job.input_file)
        except ParseError as e:
            logger.error(str(e))
            job.error_count += 1
            return job.error_count

        try:
            extraction = self.extractor.extract(tree.getroot())
            job.error_count += extraction.error_count

            for connection in extraction.connections:
                job.error_count += self._write_metadata(connection)

            hop_tree = self.rewriter.rewrite(tree)
            job.error_count += self._write_output(hop_tree, job.output_file)
        except OSError as e:
            logger.error(f"Error de E/S procesando {job.input_file}: {e}")
            job.error_count += 1

        logger.info(f"Archivo procesado: {job.input_file.name}, errores: {job.error_count}")
        return job.error_count

    def _parse(self, input_file: Path) -> etree._ElementTree:
        try:
            return etree.parse(str(input_file))
        except etree.XMLSyntaxError as e:
            raise ParseError(f"Error de sintaxis XML en {input_file}: {e}")
        except OSError as e:
            raise ParseError(f"No se pudo leer {input_file}: {e}")

    def _write_metadata(self, connection: ConnectionDefinition) -> int:
        """Renderiza y escribe la metadata de una conexión. Retorna los errores"""
        try:
            target = self.metadata_file(connection.name)
        except InvalidConnectionNameError as e:
            logger.error(str(e))
            return 1

        try:
            if target.exists():
                logger.debug(f"Metadata ya existe, se omite: {target}")
                return 0
        except OSError as e:
            logger.error(f"No se pudo comprobar la metadata {target}: {e}")
            return 1

        try:
            content = self.renderer.render(connection.to_context(self.connection_types))
        except (RenderError, UnresolvedConnectionTypeError) as e:
            logger.error(f"Conexión '{connection.name}': {e}")
            return 1

        try:
            written = write_new_file(target, content.encode('utf-8'))
        except OSError as e:
            logger.error(f"No se pudo escribir la metadata {target}: {e}")
            return 1

        if written:
            logger.info(f"Metadata de conexión generada: {target}")
        else:
            logger.debug(f"Metadata ya existe, se omite: {target}")
        return 0

    def _write_output(self, tree: etree._ElementTree, output_file: Path) -> int:
        """Escribe el documento Hop si no existe. Retorna los errores"""
        try:
            if output_file.exists():
                logger.debug(f"Archivo de salida ya existe, se omite: {output_file}")
                return 0
        except OSError as e:
            logger.error(f"No se pudo comprobar {output_file}: {e}")
            return 1

        content = etree.tostring(tree, xml_declaration=True, encoding='UTF-8')
        try:
            written = write_new_file(output_file, content)
        except OSError as e:
            logger.error(f"No se pudo escribir {output_file}: {e}")
            return 1

        if written:
            logger.info(f"Archivo generado: {output_file}")
        else:
            logger.debug(f"Archivo de salida ya existe, se omite: {output_file}")
        return 0
