"""
Extractor de conexiones de base de datos embebidas en archivos PDI
Cada bloque <connection> del .ktr se convierte en un ConnectionDefinition
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
import logging

from lxml import etree

from .config import ConnectionTypeReference
from .utils import UnresolvedConnectionTypeError

logger = logging.getLogger('pdi-to-hop.extractor')

CONNECTION_TAG = 'connection'

# Campos simples del bloque <connection> y su variable en el template
CONNECTION_FIELDS = {
    'server': 'hostname',
    'access': 'access',
    'database': 'database_name',
    'port': 'port',
    'username': 'username',
    'password': 'password',
    'servername': 'servername',
    'data_tablespace': 'data_tablespace',
    'index_tablespace': 'index_tablespace',
}


@dataclass
class ConnectionDefinition:
    """
    Conexión de base de datos extraída de un documento PDI.

    La identidad es el nombre: dos definiciones con el mismo nombre son
    iguales aunque sus atributos difieran.
    """
    name: str
    type: str
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)
    descriptor: Optional[str] = field(default=None, compare=False)

    def __hash__(self):
        return hash(self.name)

    def to_context(self, reference: ConnectionTypeReference) -> Dict[str, Any]:
        """
        Construye el contexto para el template de metadata.

        Solo se incluyen los campos presentes en el documento original; si
        el template necesita uno que falta, el renderizado falla.
        """
        context = {
            'name': self.name,
            'plugin_id': self.type,
            'plugin_name': self.descriptor or reference.require(self.type),
            'access_type': reference.access_type(self.attributes.get('access')),
        }
        for key, value in self.attributes.items():
            if key != 'access':
                context[key] = value
        return context


@dataclass
class ExtractionResult:
    """Resultado de extraer las conexiones de un documento"""
    connections: List[ConnectionDefinition] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)


def is_connection_block(elem: etree._Element) -> bool:
    """
    Indica si el elemento es un bloque de conexión embebido.

    Los transforms referencian la conexión con <connection>NOMBRE</connection>
    (solo texto); el bloque embebido siempre tiene elementos hijos.
    Comentarios e instrucciones de procesamiento no cuentan.
    """
    return elem.tag == CONNECTION_TAG and any(isinstance(child.tag, str) for child in elem)


def _text(elem: Optional[etree._Element]) -> Optional[str]:
    if elem is None:
        return None
    return (elem.text or '').strip()


class ConnectionExtractor:
    """
    Busca los bloques <connection> de un documento PDI.

    Las conexiones se deduplican por nombre dentro del documento: se
    conserva la primera aparición (orden del documento) y las siguientes
    se reportan en ExtractionResult.duplicates.
    """

    def __init__(self, connection_types: ConnectionTypeReference):
        """
        Inicializa el extractor.

        Args:
            connection_types: Referencia de tipos de conexión PDI -> Hop
        """
        self.connection_types = connection_types

    def extract(self, root: etree._Element) -> ExtractionResult:
        """
        Extrae todas las conexiones del documento.

        Args:
            root: Elemento raíz del documento PDI

        Returns:
            ExtractionResult con las conexiones válidas, duplicados y errores
        """
        result = ExtractionResult()
        seen: Dict[str, ConnectionDefinition] = {}

        for elem in root.iter(CONNECTION_TAG):
            if not is_connection_block(elem):
                continue

            connection = self._parse_connection(elem)
            if not connection.name:
                message = f"Conexión sin nombre en la línea {elem.sourceline}"
                logger.error(message)
                result.errors.append(message)
                continue

            if connection.name in seen:
                self._report_duplicate(seen[connection.name], connection)
                result.duplicates.append(connection.name)
                continue
            seen[connection.name] = connection

            try:
                connection.descriptor = self.connection_types.require(connection.type)
            except UnresolvedConnectionTypeError as e:
                message = f"Conexión '{connection.name}': {e}"
                logger.error(message)
                result.errors.append(message)
                continue

            result.connections.append(connection)

        logger.debug(
            f"Conexiones extraídas: {len(result.connections)}, "
            f"duplicadas: {len(result.duplicates)}, errores: {len(result.errors)}"
        )
        return result

    def _parse_connection(self, elem: etree._Element) -> ConnectionDefinition:
        """Lee un bloque <connection> y sus <attributes>"""
        attributes: Dict[str, Any] = {}
        for tag, key in CONNECTION_FIELDS.items():
            value = _text(elem.find(tag))
            if value is not None:
                attributes[key] = value

        extra = {}
        for attr in elem.findall('attributes/attribute'):
            code = _text(attr.find('code'))
            if code:
                extra[code] = _text(attr.find('attribute')) or ''
        attributes['extra'] = extra

        return ConnectionDefinition(
            name=_text(elem.find('name')) or '',
            type=_text(elem.find('type')) or '',
            attributes=attributes
        )

    def _report_duplicate(self, first: ConnectionDefinition, other: ConnectionDefinition) -> None:
        if first.type != other.type or first.attributes != other.attributes:
            logger.warning(
                f"Conexión '{other.name}' repetida con atributos distintos; "
                f"se conserva la primera definición"
            )
        else:
            logger.debug(f"Conexión '{other.name}' repetida, se ignora")
