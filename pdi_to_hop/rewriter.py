"""
Reescritura de documentos PDI al formato Hop
Renombra tags y atributos según el mapa de reemplazos y quita las
conexiones embebidas (Hop las guarda como metadata externa)
"""

import copy
import logging
from typing import List

from lxml import etree

from .config import RewriteMap
from .extractor import is_connection_block

logger = logging.getLogger('pdi-to-hop.rewriter')


class DocumentRewriter:
    """
    Aplica el mapa de reemplazos a un documento PDI.

    Solo cambian los nombres: valores de atributos, texto, orden y
    anidamiento se mantienen. Las referencias <connection>NOMBRE</connection>
    dentro de los transforms se conservan y apuntan a la metadata externa.
    """

    def __init__(self, rewrite_map: RewriteMap):
        """
        Inicializa el rewriter.

        Args:
            rewrite_map: Tabla de nombres PDI -> Hop
        """
        self.rewrite_map = rewrite_map

    def rewrite(self, tree: etree._ElementTree) -> etree._ElementTree:
        """
        Genera el documento en formato Hop.

        Args:
            tree: Documento PDI parseado (no se modifica)

        Returns:
            Nuevo ElementTree con los nombres reemplazados
        """
        new_tree = copy.deepcopy(tree)
        root = new_tree.getroot()

        removed = self._remove_connection_blocks(root)
        renamed = 0

        for elem in root.iter():
            # Comentarios e instrucciones de procesamiento no tienen nombre
            if not isinstance(elem.tag, str):
                continue

            new_tag = self.rewrite_map.rename(elem.tag)
            if new_tag != elem.tag:
                elem.tag = new_tag
                renamed += 1

            if any(name in self.rewrite_map for name in elem.attrib):
                self._rename_attributes(elem)
                renamed += 1

        logger.debug(f"Elementos renombrados: {renamed}, conexiones quitadas: {removed}")
        return new_tree

    def _rename_attributes(self, elem: etree._Element) -> None:
        """Renombra atributos conservando su orden y valores"""
        items = list(elem.attrib.items())
        elem.attrib.clear()
        for name, value in items:
            new_name = self.rewrite_map.rename(name)
            if new_name in elem.attrib:
                # Gana el último valor en orden del documento
                logger.warning(
                    f"Atributo '{new_name}' repetido en <{elem.tag}> (línea {elem.sourceline}) "
                    f"al procesar '{name}'; se descarta el valor '{elem.get(new_name)}'"
                )
            elem.set(new_name, value)

    def _remove_connection_blocks(self, root: etree._Element) -> int:
        blocks: List[etree._Element] = [
            elem for elem in root.iter('connection') if is_connection_block(elem)
        ]
        for elem in blocks:
            _remove_preserving_tail(elem)
        return len(blocks)


def _remove_preserving_tail(elem: etree._Element) -> None:
    """Quita un elemento sin perder el texto que lo sigue"""
    parent = elem.getparent()
    if parent is None:
        return

    tail = elem.tail
    previous = elem.getprevious()
    is_last = elem.getnext() is None
    parent.remove(elem)

    if not tail:
        return
    if not tail.strip():
        # Solo indentación: basta con la del último hijo restante
        if is_last and previous is not None:
            previous.tail = tail
        return
    if previous is not None:
        previous.tail = (previous.tail or '') + tail
    else:
        parent.text = (parent.text or '') + tail
