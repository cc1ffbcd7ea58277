"""
PDI to Hop Converter
Herramienta CLI para convertir transformaciones de Pentaho PDI a pipelines de Apache Hop
"""

__version__ = "0.2.0"
__license__ = "MIT"

from .config import RewriteMap, ConnectionTypeReference, load_rewrite_map, load_connection_types
from .extractor import ConnectionExtractor, ConnectionDefinition
from .renderer import TemplateRenderer, create_renderer
from .rewriter import DocumentRewriter
from .engine import ConversionEngine, ConversionJob

__all__ = [
    'RewriteMap',
    'ConnectionTypeReference',
    'load_rewrite_map',
    'load_connection_types',
    'ConnectionExtractor',
    'ConnectionDefinition',
    'TemplateRenderer',
    'create_renderer',
    'DocumentRewriter',
    'ConversionEngine',
    'ConversionJob'
]
