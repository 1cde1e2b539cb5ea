"""KML codec.

KML responses are a single ``<kml>`` root holding one ``<Document>`` whose
children are ``<Placemark>`` strikes. Parsing keeps the element tree plus the
framing needed to write it back unchanged: the XML declaration, any text
around the root element, and each namespace declaration on the element that
made it.
"""

from __future__ import annotations

import copy
import io
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, replace
from xml.sax.saxutils import XMLGenerator

from ..core.enums import StrikeFormat
from ..core.exceptions import ParseError
from .base import FormatCodec

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
EMPTY_KML = f'{XML_DECLARATION}<kml xmlns="{KML_NAMESPACE}"><Document/></kml>'

_DECLARATION_RE = re.compile(r"<\?xml[^>]*\?>")
_ROOT_START_RE = re.compile(r"<(?![?!])")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _namespace(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def _is_declaration(key: str) -> bool:
    return key == "xmlns" or key.startswith("xmlns:")


def _declare(element: ET.Element, declarations: list[tuple[str, str]]) -> None:
    # Declarations go first, ahead of the element's own attributes
    attributes = dict(element.attrib)
    element.attrib.clear()
    for prefix, uri in declarations:
        element.set(f"xmlns:{prefix}" if prefix else "xmlns", uri)
    element.attrib.update(attributes)


def _shallow_copy(element: ET.Element) -> ET.Element:
    clone = ET.Element(element.tag, dict(element.attrib))
    clone.text = element.text
    clone.tail = element.tail
    clone.extend(element)
    return clone


@dataclass(frozen=True)
class KMLDocument:
    """Parsed KML tree with its serialization framing.

    Namespace declarations are kept as ``xmlns``/``xmlns:prefix`` entries in
    the ``attrib`` of the declaring element, so a placemark that declares its
    own namespace carries the declaration into any document it is merged into.

    Attributes:
        root: The ``<kml>`` element
        declaration: Leading ``<?xml ...?>`` declaration, if any
        prolog: Raw text between the declaration and the root start tag
        epilog: Whitespace after the root end tag
    """

    root: ET.Element
    declaration: str | None = None
    prolog: str = ""
    epilog: str = ""

    @property
    def document(self) -> ET.Element | None:
        for child in self.root:
            if _local_name(child.tag) == "Document":
                return child
        return None

    @property
    def placemarks(self) -> list[ET.Element]:
        document = self.document
        if document is None:
            return []
        return [child for child in document if _local_name(child.tag) == "Placemark"]

    @property
    def namespaces(self) -> list[tuple[str, str]]:
        """``(prefix, uri)`` of every declaration in the tree, in document order."""
        return [
            (key.partition(":")[2], uri)
            for element in self.root.iter()
            for key, uri in element.attrib.items()
            if _is_declaration(key)
        ]


class KMLCodec(FormatCodec[KMLDocument]):
    name = "KML"

    def parse(self, raw: str) -> KMLDocument:
        declaration = None
        offset = 0
        match = _DECLARATION_RE.match(raw)
        if match:
            declaration = match.group(0)
            offset = match.end()
        root_start = _ROOT_START_RE.search(raw, offset)
        prolog = raw[offset : root_start.start()] if root_start else ""
        epilog = raw[len(raw.rstrip()) :]

        pending: list[tuple[str, str]] = []
        root: ET.Element | None = None
        try:
            for event, item in ET.iterparse(io.BytesIO(raw.encode("utf-8")), events=("start-ns", "start")):
                if event == "start-ns":
                    pending.append(item)
                    continue
                if pending:
                    _declare(item, pending)
                    pending = []
                if root is None:
                    root = item
        except ET.ParseError as e:
            raise ParseError(f"Failed to parse KML. {e}", StrikeFormat.KML.value) from e
        if root is None:
            raise ParseError("Failed to parse KML. Document has no root element", StrikeFormat.KML.value)
        return KMLDocument(root=root, declaration=declaration, prolog=prolog, epilog=epilog)

    def serialize(self, value: KMLDocument) -> str:
        buffer = io.StringIO()
        if value.declaration:
            buffer.write(value.declaration)
        buffer.write(value.prolog)
        generator = XMLGenerator(buffer, encoding="utf-8", short_empty_elements=True)
        self._write_element(generator, value.root, {})
        generator.endDocument()
        buffer.write(value.epilog)
        return buffer.getvalue()

    def _write_element(self, generator: XMLGenerator, element: ET.Element, prefixes: dict[str, str]) -> None:
        declared = {uri: key.partition(":")[2] for key, uri in element.attrib.items() if _is_declaration(key)}
        if declared:
            prefixes = {**prefixes, **declared}
        attributes = {
            key if _is_declaration(key) else self._qualified_name(key, prefixes): val
            for key, val in element.attrib.items()
        }

        name = self._qualified_name(element.tag, prefixes)
        generator.startElement(name, attributes)
        if element.text:
            generator.characters(element.text)
        for child in element:
            self._write_element(generator, child, prefixes)
            if child.tail:
                generator.characters(child.tail)
        generator.endElement(name)

    @staticmethod
    def _qualified_name(tag: str, prefixes: dict[str, str]) -> str:
        uri = _namespace(tag)
        local = _local_name(tag)
        prefix = prefixes.get(uri, "") if uri else ""
        if not prefix:
            return local
        return f"{prefix}:{local}"

    def merge(self, base: KMLDocument, incoming: KMLDocument) -> KMLDocument:
        """Append copies of ``incoming``'s placemarks to ``base``'s Document.

        Only the root and Document elements of ``base`` are copied; the merged
        tree shares every other element with ``base``. Merging page after
        page therefore deep-copies each placemark once.
        """
        incoming_placemarks = incoming.placemarks
        if not base.placemarks:
            if incoming_placemarks:
                return replace(incoming, root=copy.deepcopy(incoming.root))
            return self._with_empty_document(base)

        root = _shallow_copy(base.root)
        for index, child in enumerate(root):
            if _local_name(child.tag) == "Document":
                document = _shallow_copy(child)
                root[index] = document
                break
        document.extend(copy.deepcopy(placemark) for placemark in incoming_placemarks)
        return replace(base, root=root)

    def _with_empty_document(self, value: KMLDocument) -> KMLDocument:
        root = copy.deepcopy(value.root)
        if value.document is None:
            uri = _namespace(root.tag)
            ET.SubElement(root, f"{{{uri}}}Document" if uri else "Document")
        return replace(value, root=root)

    def empty(self) -> KMLDocument:
        return self.parse(EMPTY_KML)

    def count(self, value: KMLDocument) -> int:
        return len(value.placemarks)
