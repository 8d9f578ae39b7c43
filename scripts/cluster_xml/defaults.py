"""Editor defaults for every cluster XML element.

A parsed element only carries the fields present in its XML. Editing code
needs the full field set (to offer a form entry for every optional field),
so each factory below returns a fresh, fully-populated element. Factories
return new objects on every call; callers may mutate the result freely.

merge_defaults(defaults, partial) fills the gaps of a partially populated
element from a defaults instance.
"""

from __future__ import annotations

import copy
from typing import TypeVar

from cluster_xml.hex_string import HexString
from cluster_xml.types import (
    Access,
    Argument,
    Attribute,
    Cluster,
    ClusterDomain,
    ClusterInclude,
    ClusterRef,
    Command,
    Configurator,
    ConfiguratorFile,
    DeviceClusters,
    DeviceType,
    DeviceTypeId,
    EnumDef,
    EnumItem,
    Event,
    EventField,
    IncludeFeature,
    StructDef,
    StructItem,
    XmlEntity,
    xml_fields,
)

E = TypeVar("E", bound=XmlEntity)


def default_access() -> Access:
    return Access(op="", role="")


def default_cluster_ref() -> ClusterRef:
    return ClusterRef(code=HexString(0))


def default_struct_item() -> StructItem:
    return StructItem(
        field_id="",
        name="",
        type="",
        length=0,
        min_length=0,
        min=0,
        max=0,
        is_nullable=False,
        is_fabric_sensitive=False,
    )


def default_argument() -> Argument:
    return Argument(name="", type="", is_nullable=False, optional=False)


def default_event_field() -> EventField:
    return EventField(id=HexString(0), name="", type="")


def default_enum_item() -> EnumItem:
    return EnumItem(name="", value="")


def default_attribute() -> Attribute:
    return Attribute(
        name="",
        side="",
        code=HexString(0),
        define="",
        type="",
        length=0,
        min=0,
        max=0,
        default=None,
        writable=False,
        reportable=False,
        is_nullable=False,
        optional=False,
        api_maturity="",
        access=[],
        description="",
        text="",
    )


def default_command() -> Command:
    return Command(
        name="",
        code=HexString(0),
        source="",
        response="",
        optional=False,
        disable_default_response=False,
        description="",
        arg=[],
        access=[],
    )


def default_event() -> Event:
    return Event(
        code=HexString(0),
        name="",
        side="",
        priority="",
        optional=False,
        description="",
        field=[],
    )


def default_enum() -> EnumDef:
    return EnumDef(name="", type="", cluster=[], item=[])


def default_struct() -> StructDef:
    return StructDef(name="", is_fabric_scoped=False, cluster=[], item=[])


def default_cluster() -> Cluster:
    return Cluster(
        domain=ClusterDomain(value=""),
        name="",
        code=HexString(0),
        define="",
        description="",
        attribute=[],
        command=[],
        event=[],
    )


def default_device_clusters() -> DeviceClusters:
    return DeviceClusters(lock_others=False, include=[])


def default_device_type() -> DeviceType:
    return DeviceType(
        name="",
        type_name="",
        domain="",
        class_="",
        scope="",
        profile_id=DeviceTypeId(editable=False, value=HexString(0)),
        device_id=DeviceTypeId(editable=False, value=HexString(0)),
        clusters=default_device_clusters(),
    )


def default_include_feature() -> IncludeFeature:
    return IncludeFeature(code="", name="", mandatory_conform=False)


def default_cluster_include() -> ClusterInclude:
    return ClusterInclude(
        cluster="",
        client=False,
        server=False,
        client_locked=False,
        server_locked=False,
        require_attribute=[],
        require_command=[],
        require_event=[],
    )


def default_configurator() -> Configurator:
    """Empty editing snapshot.

    No device type: a cluster-only file must not gain an empty <deviceType>
    when it is written back.
    """
    return Configurator(enum=[], struct=[], cluster=default_cluster())


def default_configurator_file() -> ConfiguratorFile:
    return ConfiguratorFile(enum=[], struct=[], cluster=[default_cluster()])


def merge_defaults(defaults: E, partial: E) -> E:
    """Return a copy of partial with every absent (None) field taken from defaults.

    The merge is one level deep: a field present on partial is kept as is,
    even if some of its own sub-fields are absent. Neither argument is
    modified.

    Raises:
        TypeError: If the two arguments are not instances of the same entity.
    """
    if type(defaults) is not type(partial):
        raise TypeError(
            f"merge_defaults needs two {type(defaults).__name__} instances, "
            f"got {type(partial).__name__}"
        )
    merged = copy.deepcopy(partial)
    for f, _spec in xml_fields(type(partial)):
        if getattr(merged, f.name) is None:
            setattr(merged, f.name, copy.deepcopy(getattr(defaults, f.name)))
    return merged
