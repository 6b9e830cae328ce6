"""
Helpers for the XML documents exchanged with the gateway.

The service encodes "no value" as an element decorated with ``nil="true"``
rather than leaving the element out. Decoding such an element yields an
empty value where the caller expects an absent one, so every incoming
document goes through :func:`strip_nil_elements` before it is parsed.
"""

from __future__ import annotations

import io
from typing import Mapping, Union
from xml.etree.ElementTree import Element
from xml.etree import ElementTree
from xml.sax import SAXException
from xml.sax.handler import ContentHandler, property_lexical_handler
from xml.sax.saxutils import XMLGenerator

import defusedxml
import defusedxml.sax
from defusedxml import ElementTree as ET

from .exceptions import DocumentError

__all__ = [
    "is_nil",
    "child_text",
    "parse_document",
    "strip_nil_elements",
    "to_xml",
]

NIL_ATTRIBUTE = "nil"


def is_nil(attributes: Mapping[str, str]) -> bool:
    """Return ``True`` when a start tag's attributes mark an absent value."""
    return attributes.get(NIL_ATTRIBUTE) == "true"


class _NilStripper(ContentHandler):
    """
    Copy SAX tokens to a writer, dropping every subtree marked nil.

    Also registered as the lexical handler so comments are copied too.
    """

    def __init__(self, out: io.StringIO) -> None:
        super().__init__()
        self._out = out
        self._writer = XMLGenerator(out, encoding="utf-8")
        self._skip_depth = 0

    def startElement(self, name, attrs):  # noqa: N802 - SAX API
        if self._skip_depth:
            self._skip_depth += 1
            return
        if is_nil(attrs):
            self._skip_depth = 1
            return
        self._writer.startElement(name, attrs)

    def endElement(self, name):  # noqa: N802 - SAX API
        if self._skip_depth:
            self._skip_depth -= 1
            return
        self._writer.endElement(name)

    def characters(self, content):
        if not self._skip_depth:
            self._writer.characters(content)

    def ignorableWhitespace(self, whitespace):  # noqa: N802 - SAX API
        if not self._skip_depth:
            self._writer.ignorableWhitespace(whitespace)

    def processingInstruction(self, target, data):  # noqa: N802 - SAX API
        if not self._skip_depth:
            self._writer.processingInstruction(target, data)

    def comment(self, content):
        if not self._skip_depth:
            self._out.write(f"<!--{content}-->")

    def startCDATA(self):  # noqa: N802 - SAX API
        pass

    def endCDATA(self):  # noqa: N802 - SAX API
        pass

    def startDTD(self, name, public_id, system_id):  # noqa: N802 - SAX API
        pass

    def endDTD(self):  # noqa: N802 - SAX API
        pass


def strip_nil_elements(data: Union[bytes, str]) -> bytes:
    """
    Rewrite ``data`` without any element carrying ``nil="true"``.

    The whole subtree of a nil element is dropped; every other token is
    copied. The XML declaration is not reproduced. Malformed or
    unterminated input raises :class:`DocumentError`.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else data
    if not raw.strip():
        return raw

    out = io.StringIO()
    handler = _NilStripper(out)
    parser = defusedxml.sax.make_parser()
    parser.setContentHandler(handler)
    parser.setProperty(property_lexical_handler, handler)
    try:
        parser.parse(io.BytesIO(raw))
    except (SAXException, defusedxml.DefusedXmlException) as exc:
        raise DocumentError(f"malformed document: {exc}") from exc
    return out.getvalue().encode("utf-8")


def parse_document(data: Union[bytes, str]) -> Element:
    try:
        return ET.fromstring(data)
    except (ElementTree.ParseError, defusedxml.DefusedXmlException) as exc:
        raise DocumentError(f"malformed document: {exc}") from exc


def to_xml(element: Element) -> bytes:
    return ElementTree.tostring(element, encoding="unicode").encode("utf-8")


def child_text(element: Element, tag: str) -> Union[str, None]:
    """Text of the first ``tag`` child, ``""`` for an empty child, ``None`` if missing."""
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""
