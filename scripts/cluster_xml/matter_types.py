"""Matter atomic data types and the fixed option lists used by editors.

The atomic types come from a Matter ``types.xml`` file::

    <configurator>
      <atomic>
        <type id="0x20" name="int8u" size="1" description="Unsigned 8-bit integer" analog="true"/>
        ...
      </atomic>
    </configurator>

load_matter_types(path) reads it through the cluster XML codec and caches the
result per path. Lookups and value checks work on the returned list.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Iterable

from cluster_xml.errors import ClusterXmlError, DocumentShapeError
from cluster_xml.xml_codec import ATTRS_KEY, parse_xml

logger = logging.getLogger(__name__)


# ─── Option Lists ─────────────────────────────────────────────────────────────

CLIENT_SERVER_OPTIONS: tuple[str, ...] = ("client", "server")

PRIORITY_OPTIONS: tuple[str, ...] = ("critical", "info", "debug")

ACCESS_OPTIONS: tuple[str, ...] = ("read", "write", "invoke")

ROLE_OPTIONS: tuple[str, ...] = ("none", "view", "operate", "manage", "administer")

API_MATURITY_OPTIONS: tuple[str, ...] = ("provisional", "internal", "stable", "deprecated")

MATTER_DOMAINS: tuple[str, ...] = (
    "General",
    "CHIP",
    "Appliances",
    "Robots",
    "Measurement & Sensing",
    "HVAC",
    "Energy Measurement",
    "Closures",
    "Lighting",
    "Network Infrastructure",
    "Media",
)

DEVICE_TYPE_CLASSES: tuple[str, ...] = ("Utility", "Simple", "Dynamic")

DEVICE_TYPE_SCOPES: tuple[str, ...] = ("Node", "Endpoint")

NUMERIC_TYPE_NAMES: frozenset[str] = frozenset(
    [f"int{bits}{sign}" for bits in (8, 16, 24, 32, 40, 48, 56, 64) for sign in ("u", "s")]
    + ["single", "double"]
)


# ─── Atomic Types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MatterType:
    """One <type> entry of types.xml.

    size is in bytes (None when the type has no fixed size). The four flags
    default to False when their attribute is missing.
    """

    id: str
    name: str
    description: str
    size: int | None = None
    discrete: bool = False
    analog: bool = False
    signed: bool = False
    composite: bool = False


def _flag(value: Any) -> bool:
    return value is True or str(value).lower() == "true"


def _matter_type(attrs: dict[str, Any]) -> MatterType:
    size = attrs.get("size")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
        raise DocumentShapeError(
            f"Type {attrs.get('name', '?')!r} has size={size!r}; expected a byte count. "
            f"Fix: set size to a non-negative integer or remove it."
        )
    return MatterType(
        id=str(attrs.get("id", "")),
        name=str(attrs.get("name", "")),
        description=str(attrs.get("description", "")),
        size=size,
        discrete=_flag(attrs.get("discrete")),
        analog=_flag(attrs.get("analog")),
        signed=_flag(attrs.get("signed")),
        composite=_flag(attrs.get("composite")),
    )


def parse_matter_types(text: str) -> list[MatterType]:
    """Parse types.xml text.

    Raises:
        XmlParseError: If the text is not a <configurator> document.
        DocumentShapeError: If a <type> has a non-integer size.
    """
    raw = parse_xml(text)
    atomic = raw.get("atomic")
    if not isinstance(atomic, dict):
        return []
    entries = atomic.get("type") or []
    if not isinstance(entries, list):
        entries = [entries]
    return [
        _matter_type(entry.get(ATTRS_KEY) or {})
        for entry in entries
        if isinstance(entry, dict)
    ]


_cache: dict[str, list[MatterType]] = {}
_cache_lock = threading.Lock()


def load_matter_types(path: str | os.PathLike[str]) -> list[MatterType]:
    """Load atomic types from a types.xml file, cached per absolute path.

    Returns [] (and logs the reason) when the file cannot be read or parsed;
    failures are not cached, so a later call retries.
    """
    key = os.path.abspath(os.fspath(path))
    with _cache_lock:
        if key in _cache:
            return _cache[key]
    try:
        with open(key, encoding="utf-8") as fh:
            types = parse_matter_types(fh.read())
    except (OSError, ClusterXmlError) as exc:
        logger.error("Error loading Matter types from %s: %s", key, exc)
        return []
    with _cache_lock:
        _cache[key] = types
    logger.debug("Loaded %d Matter types from %s", len(types), key)
    return types


def clear_matter_types_cache() -> None:
    with _cache_lock:
        _cache.clear()


def get_matter_type_by_id(types: Iterable[MatterType], type_id: str) -> MatterType | None:
    wanted = str(type_id).lower()
    return next((t for t in types if t.id.lower() == wanted), None)


def get_matter_type_by_name(types: Iterable[MatterType], name: str) -> MatterType | None:
    return next((t for t in types if t.name == name), None)


def validate_value(matter_type: MatterType | None, value: Any) -> bool:
    """Check a value against an atomic type.

    composite: any str. discrete: any int. analog: a number within the range
    of a ``size``-byte integer, signed or unsigned (size defaults to 1).
    Everything else is rejected; bool never counts as a number.
    """
    if matter_type is None:
        return False
    if matter_type.composite:
        return isinstance(value, str)
    if isinstance(value, bool):
        return False
    if matter_type.discrete:
        return isinstance(value, int)
    if matter_type.analog:
        if not isinstance(value, (int, float)):
            return False
        bits = (matter_type.size or 1) * 8
        if matter_type.signed:
            return -(2 ** (bits - 1)) <= value <= 2 ** (bits - 1) - 1
        return 0 <= value <= 2**bits - 1
    return False


def is_type_numeric(name: str) -> bool:
    """True for the fixed-width integer types (int8u..int64s) and single/double."""
    return name in NUMERIC_TYPE_NAMES
