"""Typed document model for Matter cluster XML files.

Each entity is a mutable dataclass whose fields declare their XML role
explicitly through xml_attr / xml_child / xml_text. document.py walks those
declarations to convert between raw codec trees and entities, so the field
set of every entity is fixed here rather than discovered from parsed data.

Conventions:
- None means "absent from the XML". A collection field is None when the
  element never appeared and [] when it is present but empty; the diff engine
  treats the two differently.
- Unknown attributes, child elements and text are kept in the extra_* bags
  inherited from XmlEntity and written back unchanged.
- Python field names are snake_case; the XML spelling lives in the metadata
  (is_nullable ↔ isNullable, class_ ↔ class).
"""

from __future__ import annotations

from dataclasses import Field, dataclass, field, fields
from functools import lru_cache
from typing import Any, Literal

from cluster_xml.hex_string import HexString

# ─── Field declarations ───────────────────────────────────────────────────────

XML_METADATA_KEY = "xml"

FieldKind = Literal["attr", "child", "text"]


@dataclass(frozen=True)
class XmlField:
    """How one dataclass field maps onto XML.

    kind: "attr" (element attribute), "child" (child element) or "text"
        (the element's own inner text).
    tag: XML attribute or element name.
    entity: Entity class for structured child elements; None for scalar
        children such as <name>Foo</name>.
    many: True when the child element may repeat (stored as a list).
    """

    kind: FieldKind
    tag: str
    entity: type[XmlEntity] | None = None
    many: bool = False


def xml_attr(tag: str) -> Any:
    return field(default=None, metadata={XML_METADATA_KEY: XmlField("attr", tag)})


def xml_child(tag: str, entity: type[XmlEntity] | None = None, many: bool = False) -> Any:
    return field(
        default=None,
        metadata={XML_METADATA_KEY: XmlField("child", tag, entity=entity, many=many)},
    )


def xml_text() -> Any:
    return field(default=None, metadata={XML_METADATA_KEY: XmlField("text", "_")})


@lru_cache(maxsize=None)
def xml_fields(cls: type[XmlEntity]) -> tuple[tuple[Field, XmlField], ...]:
    """Declared XML fields of an entity class, in declaration order."""
    return tuple(
        (f, f.metadata[XML_METADATA_KEY])
        for f in fields(cls)
        if XML_METADATA_KEY in f.metadata
    )


@lru_cache(maxsize=None)
def text_field(cls: type[XmlEntity]) -> str | None:
    """Python name of the entity's text field, if it declares one."""
    for f, spec in xml_fields(cls):
        if spec.kind == "text":
            return f.name
    return None


# ─── Base ─────────────────────────────────────────────────────────────────────


@dataclass
class XmlEntity:
    """Common base: bags for XML content the model does not name."""

    extra_attrs: dict[str, Any] = field(default_factory=dict, kw_only=True)
    extra_children: dict[str, Any] = field(default_factory=dict, kw_only=True)
    extra_text: Any = field(default=None, kw_only=True)


# ─── Shared leaf elements ─────────────────────────────────────────────────────


@dataclass
class Access(XmlEntity):
    """<access op="read" role="view" privilege="..."/>"""

    op: str | None = xml_attr("op")
    role: str | None = xml_attr("role")
    privilege: str | None = xml_attr("privilege")


@dataclass
class ClusterRef(XmlEntity):
    """Assignment of an enum or struct to a cluster: <cluster code="0x..."/>."""

    code: HexString | None = xml_attr("code")


# ─── Enums and structs ────────────────────────────────────────────────────────


@dataclass
class EnumItem(XmlEntity):
    name: str | None = xml_attr("name")
    value: Any = xml_attr("value")


@dataclass
class EnumDef(XmlEntity):
    """<enum name type> with its cluster assignments and items."""

    name: str | None = xml_attr("name")
    type: str | None = xml_attr("type")
    array: bool | None = xml_attr("array")
    cluster: list[ClusterRef] | None = xml_child("cluster", ClusterRef, many=True)
    item: list[EnumItem] | None = xml_child("item", EnumItem, many=True)

    @property
    def key(self) -> str | None:
        return _key_text(self.name)


@dataclass
class StructItem(XmlEntity):
    field_id: Any = xml_attr("fieldId")
    name: str | None = xml_attr("name")
    type: str | None = xml_attr("type")
    array: bool | None = xml_attr("array")
    length: int | None = xml_attr("length")
    min_length: int | None = xml_attr("minLength")
    min: Any = xml_attr("min")
    max: Any = xml_attr("max")
    is_nullable: bool | None = xml_attr("isNullable")
    is_fabric_sensitive: bool | None = xml_attr("isFabricSensitive")


@dataclass
class StructDef(XmlEntity):
    """<struct name isFabricScoped> with its cluster assignments and items."""

    name: str | None = xml_attr("name")
    is_fabric_scoped: bool | None = xml_attr("isFabricScoped")
    cluster: list[ClusterRef] | None = xml_child("cluster", ClusterRef, many=True)
    item: list[StructItem] | None = xml_child("item", StructItem, many=True)

    @property
    def key(self) -> str | None:
        return _key_text(self.name)


# ─── Cluster members ──────────────────────────────────────────────────────────


@dataclass
class Attribute(XmlEntity):
    """A cluster attribute.

    The element text (``text``) is the attribute's display name in the classic
    Matter format (``<attribute ...>UserLED</attribute>``); newer files carry
    a ``name`` attribute instead. ``key`` prefers ``name`` and falls back to
    the text.
    """

    name: str | None = xml_attr("name")
    side: str | None = xml_attr("side")
    code: HexString | None = xml_attr("code")
    define: str | None = xml_attr("define")
    type: str | None = xml_attr("type")
    array: bool | None = xml_attr("array")
    length: int | None = xml_attr("length")
    min: Any = xml_attr("min")
    max: Any = xml_attr("max")
    default: Any = xml_attr("default")
    is_nullable: bool | None = xml_attr("isNullable")
    reportable: bool | None = xml_attr("reportable")
    writable: bool | None = xml_attr("writable")
    optional: bool | None = xml_attr("optional")
    api_maturity: str | None = xml_attr("apiMaturity")
    description: str | None = xml_child("description")
    access: list[Access] | None = xml_child("access", Access, many=True)
    text: Any = xml_text()

    @property
    def key(self) -> str | None:
        return _key_text(self.name) or _key_text(self.text)


@dataclass
class Argument(XmlEntity):
    name: str | None = xml_attr("name")
    type: str | None = xml_attr("type")
    is_nullable: bool | None = xml_attr("isNullable")
    optional: bool | None = xml_attr("optional")
    array: bool | None = xml_attr("array")


@dataclass
class Command(XmlEntity):
    source: str | None = xml_attr("source")
    code: HexString | None = xml_attr("code")
    name: str | None = xml_attr("name")
    response: str | None = xml_attr("response")
    optional: bool | None = xml_attr("optional")
    disable_default_response: bool | None = xml_attr("disableDefaultResponse")
    description: str | None = xml_child("description")
    arg: list[Argument] | None = xml_child("arg", Argument, many=True)
    access: list[Access] | None = xml_child("access", Access, many=True)

    @property
    def key(self) -> str | None:
        return _key_text(self.name)


@dataclass
class EventField(XmlEntity):
    id: HexString | None = xml_attr("id")
    name: str | None = xml_attr("name")
    type: str | None = xml_attr("type")
    array: bool | None = xml_attr("array")


@dataclass
class Event(XmlEntity):
    code: HexString | None = xml_attr("code")
    side: str | None = xml_attr("side")
    name: str | None = xml_attr("name")
    priority: str | None = xml_attr("priority")
    optional: bool | None = xml_attr("optional")
    description: str | None = xml_child("description")
    field: list[EventField] | None = xml_child("field", EventField, many=True)
    access: list[Access] | None = xml_child("access", Access, many=True)

    @property
    def key(self) -> str | None:
        return _key_text(self.name)


@dataclass
class ClusterDomain(XmlEntity):
    """<domain>General</domain> or <domain name="CHIP"/>."""

    name: str | None = xml_attr("name")
    value: str | None = xml_text()

    def __str__(self) -> str:
        return str(self.value if self.value is not None else self.name or "")


@dataclass
class Cluster(XmlEntity):
    """A Matter cluster: identity children plus attribute/command/event lists."""

    domain: ClusterDomain | None = xml_child("domain", ClusterDomain)
    name: str | None = xml_child("name")
    code: HexString | None = xml_child("code")
    define: str | None = xml_child("define")
    description: str | None = xml_child("description")
    attribute: list[Attribute] | None = xml_child("attribute", Attribute, many=True)
    command: list[Command] | None = xml_child("command", Command, many=True)
    event: list[Event] | None = xml_child("event", Event, many=True)

    @property
    def key(self) -> tuple[str | None, str | None]:
        return _key_text(self.name), _key_text(self.code)


# ─── Device types ─────────────────────────────────────────────────────────────


@dataclass
class DeviceTypeId(XmlEntity):
    """<deviceId editable="false">0x0101</deviceId> (same shape for profileId)."""

    editable: bool | None = xml_attr("editable")
    value: HexString | None = xml_text()


@dataclass
class IncludeFeature(XmlEntity):
    code: Any = xml_attr("code")
    name: str | None = xml_attr("name")
    mandatory_conform: Any = xml_child("mandatoryConform")


@dataclass
class IncludeFeatures(XmlEntity):
    feature: list[IncludeFeature] | None = xml_child("feature", IncludeFeature, many=True)


@dataclass
class ClusterInclude(XmlEntity):
    """One <include cluster="..."> of a device type, with its requirements."""

    cluster: str | None = xml_attr("cluster")
    client: bool | None = xml_attr("client")
    server: bool | None = xml_attr("server")
    client_locked: bool | None = xml_attr("clientLocked")
    server_locked: bool | None = xml_attr("serverLocked")
    require_attribute: list[Any] | None = xml_child("requireAttribute", many=True)
    require_command: list[Any] | None = xml_child("requireCommand", many=True)
    require_event: list[Any] | None = xml_child("requireEvent", many=True)
    features: IncludeFeatures | None = xml_child("features", IncludeFeatures)


@dataclass
class DeviceClusters(XmlEntity):
    lock_others: bool | None = xml_attr("lockOthers")
    include: list[ClusterInclude] | None = xml_child("include", ClusterInclude, many=True)


@dataclass
class DeviceType(XmlEntity):
    """A named bundle of cluster inclusions describing a product category."""

    name: str | None = xml_child("name")
    domain: str | None = xml_child("domain")
    type_name: str | None = xml_child("typeName")
    profile_id: DeviceTypeId | None = xml_child("profileId", DeviceTypeId)
    device_id: DeviceTypeId | None = xml_child("deviceId", DeviceTypeId)
    class_: str | None = xml_child("class")
    scope: str | None = xml_child("scope")
    clusters: DeviceClusters | None = xml_child("clusters", DeviceClusters)

    @property
    def key(self) -> tuple[str | None, str | None]:
        return _key_text(self.name), _key_text(self.type_name)


# ─── Documents ────────────────────────────────────────────────────────────────


@dataclass
class ClusterExtension(XmlEntity):
    """Manufacturer additions to the cluster identified by ``code``."""

    code: HexString | None = xml_attr("code")
    attribute: list[Attribute] | None = xml_child("attribute", Attribute, many=True)
    command: list[Command] | None = xml_child("command", Command, many=True)
    event: list[Event] | None = xml_child("event", Event, many=True)
    device_type: DeviceType | None = xml_child("deviceType", DeviceType)


@dataclass
class ConfiguratorFile(XmlEntity):
    """A <configurator> document exactly as loaded: every collection is a list.

    Plain cluster files fill ``cluster`` (one or many); extension files fill
    ``cluster_extension``. Both may carry enums, structs and device types.
    """

    enum: list[EnumDef] | None = xml_child("enum", EnumDef, many=True)
    struct: list[StructDef] | None = xml_child("struct", StructDef, many=True)
    cluster: list[Cluster] | None = xml_child("cluster", Cluster, many=True)
    device_type: list[DeviceType] | None = xml_child("deviceType", DeviceType, many=True)
    cluster_extension: list[ClusterExtension] | None = xml_child(
        "clusterExtension", ClusterExtension, many=True
    )


@dataclass
class Configurator(XmlEntity):
    """Snapshot of the document being edited: exactly one cluster.

    This is the shape of the Base and Current snapshots held by ClusterFile.
    """

    enum: list[EnumDef] | None = xml_child("enum", EnumDef, many=True)
    struct: list[StructDef] | None = xml_child("struct", StructDef, many=True)
    cluster: Cluster | None = xml_child("cluster", Cluster)
    device_type: DeviceType | None = xml_child("deviceType", DeviceType)
    cluster_extension: list[ClusterExtension] | None = xml_child(
        "clusterExtension", ClusterExtension, many=True
    )


def _key_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
