"""
Tests unitarios para el extractor de conexiones
"""

import pytest
from lxml import etree

from pdi_to_hop.config import ConnectionTypeReference
from pdi_to_hop.extractor import (
    ConnectionExtractor,
    ConnectionDefinition,
    is_connection_block,
)
from pdi_to_hop.utils import UnresolvedConnectionTypeError


def connection_xml(name, type_id='MYSQL', server='localhost', database='sales'):
    return f"""
    <connection>
        <name>{name}</name>
        <server>{server}</server>
        <type>{type_id}</type>
        <access>Native</access>
        <database>{database}</database>
        <port>3306</port>
        <username>etl</username>
        <password>Encrypted 2be98afc86aa7f2e4cb79ce10bec3fd89</password>
        <servername/>
        <data_tablespace/>
        <index_tablespace/>
        <attributes>
            <attribute><code>PORT_NUMBER</code><attribute>3306</attribute></attribute>
            <attribute><code>FORCE_IDENTIFIERS_TO_LOWERCASE</code><attribute>N</attribute></attribute>
        </attributes>
    </connection>
    """


def document(*connections):
    return etree.fromstring(f"""
    <transformation>
        <info><name>test</name></info>
        {''.join(connections)}
        <step>
            <name>Table input</name>
            <type>TableInput</type>
            <connection>SalesDB</connection>
        </step>
    </transformation>
    """)


class TestConnectionDefinition:
    """Tests para la clase ConnectionDefinition"""

    def test_equality_by_name(self):
        """Dos definiciones con el mismo nombre son iguales"""
        first = ConnectionDefinition('SalesDB', 'MYSQL', {'hostname': 'a'})
        second = ConnectionDefinition('SalesDB', 'ORACLE', {'hostname': 'b'})

        assert first == second
        assert len({first, second}) == 1

    def test_to_context(self):
        reference = ConnectionTypeReference({'MYSQL': 'MySQL'}, {'Native': 0, 'JNDI': 4})
        connection = ConnectionDefinition(
            'SalesDB', 'MYSQL', {'hostname': 'localhost', 'access': 'JNDI'}
        )

        context = connection.to_context(reference)

        assert context['name'] == 'SalesDB'
        assert context['plugin_id'] == 'MYSQL'
        assert context['plugin_name'] == 'MySQL'
        assert context['access_type'] == 4
        assert context['hostname'] == 'localhost'
        assert 'access' not in context
        # Los campos ausentes no se inventan
        assert 'port' not in context

    def test_to_context_unknown_type(self):
        reference = ConnectionTypeReference({'MYSQL': 'MySQL'})
        connection = ConnectionDefinition('Old', 'DBASE')

        with pytest.raises(UnresolvedConnectionTypeError):
            connection.to_context(reference)


class TestConnectionExtractor:
    """Tests para el extractor"""

    @pytest.fixture
    def extractor(self):
        return ConnectionExtractor(
            ConnectionTypeReference({'MYSQL': 'MySQL', 'ORACLE': 'Oracle'})
        )

    def test_is_connection_block(self):
        """Un <connection> con hijos es un bloque; solo texto es una referencia"""
        block = etree.fromstring(connection_xml('SalesDB'))
        reference = etree.fromstring('<connection>SalesDB</connection>')

        assert is_connection_block(block)
        assert not is_connection_block(reference)

    def test_reference_with_comment_is_not_a_block(self, extractor):
        """Un comentario dentro de la referencia no la convierte en bloque"""
        reference = etree.fromstring('<connection><!-- x -->SalesDB</connection>')
        root = etree.fromstring(
            '<transformation><step><connection><!-- x -->SalesDB</connection></step></transformation>'
        )

        result = extractor.extract(root)

        assert not is_connection_block(reference)
        assert result.connections == []
        assert result.error_count == 0

    def test_extract_single_connection(self, extractor):
        result = extractor.extract(document(connection_xml('SalesDB')))

        assert result.error_count == 0
        assert len(result.connections) == 1

        connection = result.connections[0]
        assert connection.name == 'SalesDB'
        assert connection.type == 'MYSQL'
        assert connection.descriptor == 'MySQL'
        assert connection.attributes['hostname'] == 'localhost'
        assert connection.attributes['database_name'] == 'sales'
        assert connection.attributes['port'] == '3306'
        assert connection.attributes['servername'] == ''
        assert connection.attributes['extra'] == {
            'PORT_NUMBER': '3306',
            'FORCE_IDENTIFIERS_TO_LOWERCASE': 'N'
        }

    def test_references_are_not_connections(self, extractor):
        """La referencia dentro del step no genera una conexión"""
        result = extractor.extract(document())

        assert result.connections == []
        assert result.error_count == 0

    def test_document_order(self, extractor):
        result = extractor.extract(document(
            connection_xml('SalesDB'),
            connection_xml('Warehouse', 'ORACLE')
        ))

        assert [c.name for c in result.connections] == ['SalesDB', 'Warehouse']

    def test_duplicate_keeps_first(self, extractor):
        """Con nombres repetidos se conserva la primera definición"""
        result = extractor.extract(document(
            connection_xml('SalesDB', server='first-host'),
            connection_xml('SalesDB', type_id='ORACLE', server='second-host')
        ))

        assert len(result.connections) == 1
        assert result.connections[0].attributes['hostname'] == 'first-host'
        assert result.connections[0].type == 'MYSQL'
        assert result.duplicates == ['SalesDB']
        assert result.error_count == 0

    def test_unresolved_type_does_not_block_others(self, extractor):
        """Un tipo desconocido es un error, pero el resto se extrae"""
        result = extractor.extract(document(
            connection_xml('Legacy', type_id='DBASE'),
            connection_xml('SalesDB'),
            connection_xml('Old', type_id='FOXPRO'),
        ))

        assert result.error_count == 2
        assert [c.name for c in result.connections] == ['SalesDB']

    def test_connection_without_name(self, extractor):
        result = extractor.extract(document(connection_xml('')))

        assert result.error_count == 1
        assert result.connections == []

    def test_missing_fields_are_absent(self, extractor):
        root = etree.fromstring("""
        <transformation>
            <connection><name>Bare</name><type>MYSQL</type></connection>
        </transformation>
        """)

        result = extractor.extract(root)

        attributes = result.connections[0].attributes
        assert 'hostname' not in attributes
        assert attributes['extra'] == {}
