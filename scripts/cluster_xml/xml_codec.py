"""Bidirectional mapping between cluster XML text and raw value trees.

The raw tree is the loosely-typed shape the typed document model is built
from (see document.py):

- an element with neither attributes nor child elements becomes its inferred
  text value (a scalar, or None when empty);
- any other element becomes a dict with ATTRS_KEY ("$") holding the attribute
  map, TEXT_KEY ("_") holding its own inner text, and one key per child tag.
  A tag seen once maps to its value, a tag seen several times to a list.

Every attribute value and text node goes through infer_value on the way in,
so hex codes arrive as HexString, booleans as bool and numbers as int/float.
On the way out, to_plain reverses that mapping (booleans become the literal
strings "true"/"false" so False is never mistaken for "absent").

Public API:
    XmlParseError        — malformed text or unexpected root element
    infer_value(text)    — hex → bool → number → str inference, "" → None
    infer_name(name)     — same inference for tag/attribute names, as str
    parse_xml(text)      — XML text → raw tree of the root element
    to_plain(value)      — raw tree → encoder-ready tree
    build_xml(raw)       — raw tree → pretty-printed XML text
    inline_text_elements — post-processing applied by build_xml
"""

from __future__ import annotations

import io
import logging
import re
import xml.etree.ElementTree as ET
from collections import defaultdict
from typing import Any

from cluster_xml.errors import XmlParseError
from cluster_xml.hex_string import HexString

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "configurator"
ATTRS_KEY = "$"
TEXT_KEY = "_"
INDENT = "  "

_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")


# ─── Type inference ───────────────────────────────────────────────────────────


def infer_value(text: str) -> HexString | bool | int | float | str | None:
    """Infer the typed value of an attribute value or element text.

    Precedence: empty → None; ``0x``/``0X`` prefix → HexString;
    ``true``/``false`` (any case) → bool; decimal literal → int (when
    integral) or float; otherwise the text unchanged. ``"0"`` and ``"1"`` are
    numbers, never booleans.
    """
    if text == "":
        return None
    if text.startswith(("0x", "0X")):
        return HexString.from_string(text)
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _NUMBER_RE.match(text):
        number = float(text)
        if number.is_integer() and "e" not in lowered and "." not in text:
            return int(text)
        if number.is_integer() and abs(number) < 2**53:
            return int(number)
        return number
    return text


def infer_name(name: str) -> str:
    """Run a tag or attribute name through infer_value and return its text form.

    Keys of the raw tree stay strings; only their spelling is canonicalized
    (``TRUE`` → ``true``, ``0X0A`` → ``0xa``).
    """
    return format_scalar(infer_value(name)) if name else name


def format_scalar(value: Any) -> str:
    """Text form of a typed scalar as written to XML."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ─── Parse ────────────────────────────────────────────────────────────────────


def _inner_text(elem: ET.Element) -> str:
    pieces = [elem.text or ""]
    for child in elem:
        pieces.append(child.tail or "")
    return "".join(pieces).strip()


def _element_to_raw(elem: ET.Element) -> Any:
    attrs = {infer_name(k): infer_value(v) for k, v in elem.attrib.items()}
    text = _inner_text(elem)

    grouped: dict[str, list[Any]] = defaultdict(list)
    for child in elem:
        if not isinstance(child.tag, str):
            continue
        grouped[infer_name(child.tag)].append(_element_to_raw(child))

    if not attrs and not grouped:
        return infer_value(text)

    raw: dict[str, Any] = {}
    if attrs:
        raw[ATTRS_KEY] = attrs
    if text:
        raw[TEXT_KEY] = infer_value(text)
    for tag, values in grouped.items():
        raw[tag] = values[0] if len(values) == 1 else values
    return raw


def parse_xml(text: str, root: str = ROOT_ELEMENT) -> dict[str, Any]:
    """Parse XML text into the raw tree of its root element.

    Args:
        text: Complete XML document.
        root: Required root element name.

    Returns:
        The root element's raw dict. A root without attributes or children
        yields an empty dict.

    Raises:
        XmlParseError: If text is not well-formed XML or its root element is
            not ``root``.
    """
    try:
        element = ET.fromstring(text)
    except ET.ParseError as e:
        raise XmlParseError(
            f"XML parse error: {e}. "
            f"The document is not well-formed XML. "
            f"Fix: correct the syntax error at the reported line/column."
        ) from e

    if element.tag != root:
        raise XmlParseError(
            f"Unexpected root element <{element.tag}>. "
            f"Expected <{root}>. "
            f"Fix: wrap the cluster definitions in a <{root}> element."
        )

    raw = _element_to_raw(element)
    if not isinstance(raw, dict):
        logger.debug("Root <%s> has no structured content", root)
        return {}
    return raw


# ─── Serialize ────────────────────────────────────────────────────────────────


def to_plain(value: Any) -> Any:
    """Convert a raw tree into the encoder-ready form.

    HexString → canonical str; bool → "true"/"false"; None and "" → None;
    lists and dicts are rebuilt recursively; every other scalar (including 0)
    passes through unchanged. The input is never modified.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, HexString):
        return str(value)
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    return value


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, list):
        for item in value:
            _append(parent, tag, item)
        return

    elem = ET.SubElement(parent, tag)
    if isinstance(value, dict):
        _fill(elem, value)
    else:
        elem.text = format_scalar(value)


def _fill(elem: ET.Element, raw: dict[str, Any]) -> None:
    for name, attr_value in (raw.get(ATTRS_KEY) or {}).items():
        if attr_value is not None:
            elem.set(name, format_scalar(attr_value))
    text = raw.get(TEXT_KEY)
    if text is not None:
        elem.text = format_scalar(text)
    for tag, child in raw.items():
        if tag in (ATTRS_KEY, TEXT_KEY):
            continue
        _append(elem, tag, child)


def _indent(elem: ET.Element, level: int = 0) -> None:
    """Add pretty-print indentation to an XML element tree in-place.

    Text of a mixed-content element is placed on its own line, the way a
    generic pretty-printer lays it out; inline_text_elements folds it back.
    """
    indent_str = "\n" + INDENT * level
    if len(elem):
        if not elem.text or not elem.text.strip():
            elem.text = indent_str + INDENT
        else:
            elem.text = indent_str + INDENT + elem.text.strip() + indent_str + INDENT
        if not elem.tail or not elem.tail.strip():
            elem.tail = indent_str
        for child in elem:
            _indent(child, level + 1)
        # Fix last child's tail
        child.tail = indent_str
    else:
        if not elem.tail or not elem.tail.strip():
            elem.tail = indent_str


def build_xml(raw: dict[str, Any], root: str = ROOT_ELEMENT) -> str:
    """Serialize a raw tree under a ``root`` element into indented XML text.

    None values are omitted. The result starts with an XML declaration,
    uses two-space indentation, and is post-processed by inline_text_elements.
    """
    plain = to_plain(raw) or {}
    root_elem = ET.Element(root)
    _fill(root_elem, plain)
    _indent(root_elem)
    root_elem.tail = None

    buf = io.BytesIO()
    ET.ElementTree(root_elem).write(buf, encoding="UTF-8", xml_declaration=True)
    content = buf.getvalue().decode("UTF-8")
    return inline_text_elements(content) + "\n"


# ─── Inlining pass ────────────────────────────────────────────────────────────
# Applied in this order: later passes only see candidates that earlier passes
# have already collapsed.

_TAG = r"[A-Za-z_][\w:.\-]*"
_OPEN_ATTRS = r"(?:\s[^<>]*?)?(?<!/)"

_TEXT_ONLY_RE = re.compile(
    rf"<(?P<tag>{_TAG})(?P<attrs>{_OPEN_ATTRS})>[ \t]*\n\s*"
    rf"(?P<text>[^<>\s](?:[^<>\n]*[^<>\s])?)[ \t]*\n\s*</(?P=tag)>"
)

_LEADING_TEXT_RE = re.compile(
    rf"<(?P<tag>{_TAG})(?P<attrs>{_OPEN_ATTRS})>[ \t]*\n\s*"
    rf"(?P<text>[^<>\s](?:[^<>\n]*[^<>\s])?)[ \t]*\n(?P<indent>[ \t]*)<(?=[^/])"
)

_SINGLE_TRAILING_CHILD_RE = re.compile(
    rf"(?P<head><(?P<tag>{_TAG}){_OPEN_ATTRS}>[^<>]*"
    rf"<{_TAG}(?:\s[^<>]*?)?/>)[ \t]*\n\s*(?P<close></(?P=tag)>)"
)


def inline_text_elements(xml: str) -> str:
    """Collapse whitespace the pretty-printer puts around element text.

    1. A text-only element spread over three lines (open tag, text, close
       tag) is written on one line.
    2. Text that precedes the first child of a mixed-content element moves
       onto the opening tag's line.
    3. An element whose content ends in exactly one self-closing child
       (optionally preceded by text) gets its closing tag on that child's line.

    Example::

        inline_text_elements("<description>\\n  Some text\\n</description>")
        # '<description>Some text</description>'
    """
    xml = _TEXT_ONLY_RE.sub(r"<\g<tag>\g<attrs>>\g<text></\g<tag>>", xml)
    xml = _LEADING_TEXT_RE.sub(r"<\g<tag>\g<attrs>>\g<text>\n\g<indent><", xml)
    xml = _SINGLE_TRAILING_CHILD_RE.sub(r"\g<head>\g<close>", xml)
    return xml
