"""Conversion between raw codec trees and the typed document model.

Public API:
    from_raw(cls, raw) → entity    — raw tree → typed entity (None stays None)
    to_raw(entity) → raw           — typed entity → raw tree
    parse(text) → ConfiguratorFile — XML text → typed document
    serialize(doc) → str           — typed document → XML text
    clone(entity)                  — independent deep copy

Design notes:
- Both directions are driven by the xml_* field declarations in types.py;
  there is no per-entity conversion code.
- A scalar raw value handed to an entity with a text field fills that field
  (``<domain>General</domain>``, ``<deviceId>0x0101</deviceId>``).
- A single raw value for a repeating field is wrapped into a one-item list.
  Several raw values for a non-repeating field raise DocumentShapeError.
- Content without a declared field is kept in the entity's extra_* bags and
  written back after the declared fields.
"""

from __future__ import annotations

import copy
from typing import Any, TypeVar

from cluster_xml.errors import DocumentShapeError
from cluster_xml.types import ConfiguratorFile, XmlEntity, XmlField, text_field, xml_fields
from cluster_xml.xml_codec import ATTRS_KEY, TEXT_KEY, build_xml, parse_xml

E = TypeVar("E", bound=XmlEntity)


# ─── Raw → typed ──────────────────────────────────────────────────────────────


def from_raw(cls: type[E], raw: Any) -> E | None:
    """Build an entity of type cls from a raw codec value.

    Args:
        cls: Entity class to build.
        raw: Raw value as produced by xml_codec.parse_xml (dict or scalar).

    Returns:
        The entity, or None when raw is None.

    Raises:
        DocumentShapeError: If raw is a list, or a non-repeating child
            element occurs more than once.
    """
    if raw is None:
        return None
    if isinstance(raw, list):
        raise DocumentShapeError(
            f"Expected one element for {cls.__name__}, found {len(raw)}. "
            f"Fix: keep a single element at this position."
        )
    if not isinstance(raw, dict):
        name = text_field(cls)
        if name is None:
            return cls(extra_text=raw)
        return cls(**{name: raw})

    attrs = dict(raw.get(ATTRS_KEY) or {})
    kwargs: dict[str, Any] = {}
    known_tags: set[str] = set()
    for f, spec in xml_fields(cls):
        if spec.kind == "attr":
            if spec.tag in attrs:
                kwargs[f.name] = attrs.pop(spec.tag)
        elif spec.kind == "text":
            kwargs[f.name] = raw.get(TEXT_KEY)
        else:
            known_tags.add(spec.tag)
            if spec.tag in raw:
                kwargs[f.name] = _child_from_raw(cls, spec, raw[spec.tag])

    extra_children = {
        tag: value
        for tag, value in raw.items()
        if tag not in (ATTRS_KEY, TEXT_KEY) and tag not in known_tags
    }
    extra_text = raw.get(TEXT_KEY) if text_field(cls) is None else None
    return cls(
        **kwargs,
        extra_attrs=attrs,
        extra_children=extra_children,
        extra_text=extra_text,
    )


def _child_from_raw(owner: type[XmlEntity], spec: XmlField, value: Any) -> Any:
    if spec.many:
        items = value if isinstance(value, list) else [value]
        if spec.entity is None:
            return list(items)
        # An empty repeated element (<access/>) is still an element.
        return [from_raw(spec.entity, item) or spec.entity() for item in items]

    if isinstance(value, list):
        raise DocumentShapeError(
            f"<{spec.tag}> occurs {len(value)} times in {owner.__name__}; "
            f"exactly one is allowed. "
            f"Fix: remove the duplicate <{spec.tag}> elements."
        )
    if spec.entity is None:
        return value
    return from_raw(spec.entity, value)


# ─── Typed → raw ──────────────────────────────────────────────────────────────


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    return isinstance(value, list) and not value


def _child_to_raw(spec: XmlField, value: Any) -> Any:
    if value is None:
        return None
    if spec.many:
        return [to_raw(item) if isinstance(item, XmlEntity) else item for item in value]
    return to_raw(value) if isinstance(value, XmlEntity) else value


def to_raw(entity: XmlEntity) -> Any:
    """Convert an entity back into a raw codec value.

    Returns a dict when the entity has any attribute or child content,
    otherwise its text (possibly None). Typed scalars (HexString, bool, int)
    are left for xml_codec.to_plain to encode.
    """
    attrs: dict[str, Any] = {}
    children: dict[str, Any] = {}
    text: Any = None
    for f, spec in xml_fields(type(entity)):
        value = getattr(entity, f.name)
        if spec.kind == "attr":
            attrs[spec.tag] = value
        elif spec.kind == "text":
            text = value
        else:
            children[spec.tag] = _child_to_raw(spec, value)

    for name, value in entity.extra_attrs.items():
        attrs.setdefault(name, value)
    for tag, value in entity.extra_children.items():
        children.setdefault(tag, value)
    if text is None:
        text = entity.extra_text

    attrs = {name: value for name, value in attrs.items() if not _is_empty(value)}
    children = {tag: value for tag, value in children.items() if not _is_empty(value)}
    if not attrs and not children:
        return text

    raw: dict[str, Any] = {}
    if attrs:
        raw[ATTRS_KEY] = attrs
    if not _is_empty(text):
        raw[TEXT_KEY] = text
    raw.update(children)
    return raw


# ─── Public API ───────────────────────────────────────────────────────────────


def parse(text: str) -> ConfiguratorFile:
    """Parse cluster XML text into a ConfiguratorFile.

    Raises:
        XmlParseError: If text is not well-formed or its root is not
            <configurator>.
        DocumentShapeError: If a single-valued element is repeated.
    """
    return from_raw(ConfiguratorFile, parse_xml(text)) or ConfiguratorFile()


def serialize(doc: XmlEntity) -> str:
    """Serialize a document (ConfiguratorFile or Configurator) to XML text.

    Absent fields are omitted; booleans are written as "true"/"false" and
    hex values in their canonical ``0x`` form.
    """
    raw = to_raw(doc)
    return build_xml(raw if isinstance(raw, dict) else {})


def clone(entity: E) -> E:
    """Deep copy of an entity; HexString values are copied too."""
    return copy.deepcopy(entity)
