"""
Configuración estática de la conversión
Mapa de reemplazos de tags PDI -> Hop y referencia de tipos de conexión
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union
import json
import logging

from jsonschema import validate, ValidationError as JsonSchemaValidationError

from .utils import load_json, ConfigurationError, UnresolvedConnectionTypeError

logger = logging.getLogger('pdi-to-hop.config')

RESOURCES_DIR = Path(__file__).parent / 'resources'
XML_REPLACEMENTS_FILE = RESOURCES_DIR / 'xml_replacements.json'
DATABASE_TYPES_FILE = RESOURCES_DIR / 'database_types.json'

PDI_TRANSFORMATION_EXTENSION = '.ktr'
HOP_PIPELINE_EXTENSION = '.hpl'
HOP_METADATA_EXTENSION = '.json'

# Subcarpeta del directorio de configuración de Hop para conexiones
HOP_RDBMS_METADATA_SUBDIR = Path('metadata') / 'rdbms'

XML_REPLACEMENTS_SCHEMA = {
    'type': 'object',
    'required': ['replacements'],
    'properties': {
        'description': {'type': 'string'},
        'replacements': {
            'type': 'object',
            'additionalProperties': {'type': 'string', 'minLength': 1}
        }
    }
}

DATABASE_TYPES_SCHEMA = {
    'type': 'object',
    'required': ['connection_types'],
    'properties': {
        'description': {'type': 'string'},
        'connection_types': {
            'type': 'object',
            'additionalProperties': {'type': 'string', 'minLength': 1}
        },
        'access_types': {
            'type': 'object',
            'additionalProperties': {'type': 'integer', 'minimum': 0}
        }
    }
}

# Valor de Hop para conexiones nativas (JDBC)
DEFAULT_ACCESS_TYPE = 0


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class RewriteMap:
    """Tabla de reemplazo de nombres de tags y atributos (solo lectura)"""
    replacements: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'replacements', _frozen(self.replacements))

    def rename(self, name: str) -> str:
        """Retorna el nombre destino, o el mismo nombre si no hay regla"""
        return self.replacements.get(name, name)

    def __contains__(self, name: str) -> bool:
        return name in self.replacements

    def __len__(self) -> int:
        return len(self.replacements)


@dataclass(frozen=True)
class ConnectionTypeReference:
    """
    Referencia de tipos de conexión.

    Traduce el identificador de tipo de PDI (p.ej. MYSQL) al nombre del
    plugin de base de datos de Hop, y el tipo de acceso (Native, JNDI...)
    al valor numérico que usa Hop.
    """
    connection_types: Mapping[str, str] = field(default_factory=dict)
    access_types: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'connection_types', _frozen(self.connection_types))
        object.__setattr__(self, 'access_types', _frozen(self.access_types))

    def resolve(self, type_id: Optional[str]) -> Optional[str]:
        """Retorna el descriptor Hop del tipo, o None si no existe"""
        if type_id is None:
            return None
        return self.connection_types.get(type_id)

    def require(self, type_id: Optional[str]) -> str:
        """
        Igual que resolve(), pero falla si el tipo no existe.

        Raises:
            UnresolvedConnectionTypeError: Si el tipo no está en la referencia
        """
        descriptor = self.resolve(type_id)
        if descriptor is None:
            raise UnresolvedConnectionTypeError(f"Tipo de conexión desconocido: {type_id}")
        return descriptor

    def access_type(self, access: Optional[str]) -> int:
        """Traduce el tipo de acceso de PDI; los desconocidos se tratan como nativos"""
        if access in self.access_types:
            return self.access_types[access]
        if access:
            logger.warning(f"Tipo de acceso desconocido '{access}', se usa acceso nativo")
        return DEFAULT_ACCESS_TYPE


def _load_resource(path: Union[str, Path], schema: dict) -> dict:
    try:
        data = load_json(str(path))
        validate(instance=data, schema=schema)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"No se pudo leer el recurso de configuración {path}: {e}")
    except JsonSchemaValidationError as e:
        raise ConfigurationError(f"Recurso de configuración inválido {path}: {e.message}")
    return data


def load_rewrite_map(path: Optional[Union[str, Path]] = None) -> RewriteMap:
    """
    Carga el mapa de reemplazos de tags.

    Args:
        path: Archivo JSON alternativo. Si es None se usa el incluido en el paquete

    Returns:
        RewriteMap con las reglas cargadas

    Raises:
        ConfigurationError: Si el archivo no existe o no cumple el esquema
    """
    path = path or XML_REPLACEMENTS_FILE
    data = _load_resource(path, XML_REPLACEMENTS_SCHEMA)
    rewrite_map = RewriteMap(data['replacements'])
    logger.debug(f"Reglas de reemplazo cargadas: {len(rewrite_map)} desde {path}")
    return rewrite_map


def load_connection_types(path: Optional[Union[str, Path]] = None) -> ConnectionTypeReference:
    """
    Carga la referencia de tipos de conexión.

    Args:
        path: Archivo JSON alternativo. Si es None se usa el incluido en el paquete

    Returns:
        ConnectionTypeReference con los tipos cargados

    Raises:
        ConfigurationError: Si el archivo no existe o no cumple el esquema
    """
    path = path or DATABASE_TYPES_FILE
    data = _load_resource(path, DATABASE_TYPES_SCHEMA)
    reference = ConnectionTypeReference(
        data['connection_types'],
        data.get('access_types', {})
    )
    logger.debug(f"Tipos de conexión cargados: {len(reference.connection_types)} desde {path}")
    return reference
