"""
Renderizado de archivos de metadata de Hop
Usa templates Jinja2 para generar un archivo por conexión de base de datos
"""

import json
import logging
from typing import Dict, Any, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    TemplateError,
    Undefined,
)
from jsonschema import validate, ValidationError as JsonSchemaValidationError

from .utils import RenderError

logger = logging.getLogger('pdi-to-hop.renderer')

DATABASE_METADATA_TEMPLATE = 'database_metadata.json.j2'

# Estructura mínima de un archivo rdbms de Hop
DATABASE_METADATA_SCHEMA = {
    'type': 'object',
    'required': ['rdbms', 'name'],
    'properties': {
        'name': {'type': 'string', 'minLength': 1},
        'rdbms': {
            'type': 'object',
            'minProperties': 1,
            'maxProperties': 1,
            'additionalProperties': {
                'type': 'object',
                'required': ['pluginId', 'pluginName', 'accessType'],
                'properties': {
                    'pluginId': {'type': 'string'},
                    'pluginName': {'type': 'string'},
                    'accessType': {'type': 'integer'}
                }
            }
        }
    }
}


def _json_default(value: Any) -> Any:
    """Serialización de valores no JSON para el filtro tojson"""
    if isinstance(value, Undefined):
        # StrictUndefined lanza UndefinedError al convertirse a texto
        return str(value)
    raise TypeError(f"Valor no serializable a JSON: {value!r}")


class TemplateRenderer:
    """
    Renderiza un template con un contexto de sustituciones.

    La instancia se crea una sola vez (ver create_renderer) y se comparte
    entre todos los archivos procesados; render() no modifica estado.
    """

    def __init__(self, environment: Environment, template_name: str,
                 schema: Optional[Dict[str, Any]] = None):
        """
        Inicializa el renderer.

        Args:
            environment: Entorno Jinja2 ya configurado
            template_name: Nombre del template dentro del loader
            schema: Esquema JSON opcional que debe cumplir la salida
        """
        self.environment = environment
        self.template = environment.get_template(template_name)
        self.template_name = template_name
        self.schema = schema

    def render(self, context: Dict[str, Any]) -> str:
        """
        Renderiza el template.

        Args:
            context: Valores a sustituir en el template

        Returns:
            Texto renderizado

        Raises:
            RenderError: Si falta una variable del template o la salida es inválida
        """
        try:
            text = self.template.render(**context)
        except (TemplateError, TypeError) as e:
            raise RenderError(f"Error renderizando {self.template_name}: {e}")

        if self.schema is not None:
            try:
                validate(instance=json.loads(text), schema=self.schema)
            except json.JSONDecodeError as e:
                raise RenderError(f"El template {self.template_name} no genera JSON válido: {e}")
            except JsonSchemaValidationError as e:
                raise RenderError(f"Metadata renderizada inválida: {e.message}")

        return text


def create_renderer(
    template_name: str = DATABASE_METADATA_TEMPLATE,
    search_path: Optional[str] = None,
    schema: Optional[Dict[str, Any]] = DATABASE_METADATA_SCHEMA
) -> TemplateRenderer:
    """
    Configura Jinja2 y crea el renderer (inicialización única del proceso).

    Args:
        template_name: Nombre del template
        search_path: Carpeta con templates propios. Si es None se usan los del paquete
        schema: Esquema JSON para validar la salida, o None para no validar

    Returns:
        TemplateRenderer listo para usar

    Raises:
        RenderError: Si el template no existe o tiene errores de sintaxis
    """
    if search_path:
        loader = FileSystemLoader(search_path)
    else:
        loader = PackageLoader('pdi_to_hop', 'templates')

    environment = Environment(
        loader=loader,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False
    )
    environment.policies['json.dumps_kwargs'] = {
        'sort_keys': True,
        'default': _json_default
    }

    try:
        renderer = TemplateRenderer(environment, template_name, schema)
    except TemplateError as e:
        raise RenderError(f"No se pudo cargar el template {template_name}: {e}")

    logger.info(f"Template cargado: {template_name}")
    return renderer
