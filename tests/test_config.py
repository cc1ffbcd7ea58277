"""
Tests unitarios para el módulo config
"""

import json
import pytest

from pdi_to_hop.config import (
    RewriteMap,
    ConnectionTypeReference,
    load_rewrite_map,
    load_connection_types,
)
from pdi_to_hop.utils import ConfigurationError, UnresolvedConnectionTypeError


class TestRewriteMap:
    """Tests para el mapa de reemplazos"""

    def test_rename_mapped_name(self):
        """Verifica que un nombre con regla se reemplaza"""
        rewrite_map = RewriteMap({'step': 'transform'})

        assert rewrite_map.rename('step') == 'transform'
        assert 'step' in rewrite_map

    def test_rename_unmapped_name(self):
        """Los nombres sin regla no cambian"""
        rewrite_map = RewriteMap({'step': 'transform'})

        assert rewrite_map.rename('hop') == 'hop'
        assert 'hop' not in rewrite_map

    def test_map_is_read_only(self):
        """El mapa no se puede modificar después de crearlo"""
        source = {'step': 'transform'}
        rewrite_map = RewriteMap(source)
        source['trans_type'] = 'pipeline_type'

        assert len(rewrite_map) == 1
        with pytest.raises(TypeError):
            rewrite_map.replacements['x'] = 'y'


class TestConnectionTypeReference:
    """Tests para la referencia de tipos de conexión"""

    @pytest.fixture
    def reference(self):
        return ConnectionTypeReference(
            {'MYSQL': 'MySQL', 'ORACLE': 'Oracle'},
            {'Native': 0, 'JNDI': 4}
        )

    def test_resolve_known_type(self, reference):
        assert reference.resolve('MYSQL') == 'MySQL'

    def test_resolve_unknown_type(self, reference):
        assert reference.resolve('DBASE') is None
        assert reference.resolve(None) is None

    def test_require_unknown_type_raises(self, reference):
        with pytest.raises(UnresolvedConnectionTypeError):
            reference.require('DBASE')

    def test_access_type(self, reference):
        """Verifica la traducción del tipo de acceso"""
        assert reference.access_type('JNDI') == 4
        assert reference.access_type('Native') == 0
        # Desconocido o vacío: acceso nativo
        assert reference.access_type('Carrier pigeon') == 0
        assert reference.access_type(None) == 0


class TestLoaders:
    """Tests para la carga de los recursos JSON"""

    def test_load_default_rewrite_map(self):
        """El recurso incluido tiene las reglas básicas PDI -> Hop"""
        rewrite_map = load_rewrite_map()

        assert rewrite_map.rename('transformation') == 'pipeline'
        assert rewrite_map.rename('step') == 'transform'
        assert rewrite_map.rename('trans_type') == 'pipeline_type'

    def test_load_default_connection_types(self):
        reference = load_connection_types()

        assert reference.resolve('MYSQL') == 'MySQL'
        assert reference.resolve('POSTGRESQL') == 'PostgreSQL'
        assert reference.access_type('JNDI') == 4

    def test_load_custom_rewrite_map(self, tmp_path):
        path = tmp_path / 'replacements.json'
        path.write_text(json.dumps({'replacements': {'a': 'b'}}))

        rewrite_map = load_rewrite_map(path)

        assert rewrite_map.rename('a') == 'b'
        assert rewrite_map.rename('step') == 'step'

    def test_load_invalid_resource(self, tmp_path):
        """Un recurso que no cumple el esquema es un error de configuración"""
        path = tmp_path / 'types.json'
        path.write_text(json.dumps({'connection_types': {'MYSQL': 3306}}))

        with pytest.raises(ConfigurationError):
            load_connection_types(path)

    def test_load_missing_resource(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_rewrite_map(tmp_path / 'missing.json')

    def test_load_malformed_json(self, tmp_path):
        path = tmp_path / 'replacements.json'
        path.write_text('{"replacements": ')

        with pytest.raises(ConfigurationError):
            load_rewrite_map(path)
