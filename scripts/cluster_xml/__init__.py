"""Matter cluster XML engine — public API.

Reads, edits, diffs and writes Matter (ZAP-style) cluster definition files.
A loaded file is held as two typed snapshots (base and current); the
difference between them is written out as a <clusterExtension> document.

Public API (re-exported from submodules):

Hex values (from hex_string.py):
    HexString           — canonical 0x-prefixed lowercase hex identifier
    sanitize_hex_string — pure keystroke filter to a 0x hex string
    is_valid_hex_char   — single-character check

XML codec (from xml_codec.py):
    parse_xml(text)         — XML text → raw tree ("$" attrs, "_" text)
    build_xml(raw)          — raw tree → pretty-printed XML text
    infer_value(text)       — typed value inference (HexString/bool/number/str)
    inline_text_elements    — post-pass collapsing short elements onto one line

Document model (from types.py, defaults.py, document.py):
    ConfiguratorFile, Configurator, Cluster, Attribute, Command, Event,
    EnumDef, StructDef, DeviceType, ClusterExtension, ...
    default_*()                  — fresh editor defaults per element
    merge_defaults(defaults, p)  — fill absent fields of p from defaults
    parse(text) / serialize(doc) — XML text ↔ typed document
    clone(entity)                — independent deep copy

Engine (from cluster_file.py):
    ClusterFile         — load / initialize / edit / diff / serialize
    InstanceListener    — callback protocol for "instance changed" events

Validation and atomic types:
    validate_cluster_file(doc), format_validation_errors(issues)
    MatterType, load_matter_types(path), validate_value(type, value)

Errors:
    ClusterXmlError     — base class
    XmlParseError       — malformed text or wrong root element
    DocumentShapeError  — raw tree does not fit the typed model
"""

from cluster_xml.cluster_file import ClusterFile
from cluster_xml.defaults import (
    default_access,
    default_argument,
    default_attribute,
    default_cluster,
    default_cluster_include,
    default_cluster_ref,
    default_command,
    default_configurator,
    default_configurator_file,
    default_device_clusters,
    default_device_type,
    default_enum,
    default_enum_item,
    default_event,
    default_event_field,
    default_include_feature,
    default_struct,
    default_struct_item,
    merge_defaults,
)
from cluster_xml.document import clone, from_raw, parse, serialize, to_raw
from cluster_xml.errors import ClusterXmlError, DocumentShapeError, XmlParseError
from cluster_xml.file_validation import (
    FileValidationResult,
    ValidationIssue,
    format_validation_errors,
    validate_cluster_file,
)
from cluster_xml.hex_string import HexString, is_valid_hex_char, sanitize_hex_string
from cluster_xml.interfaces import InstanceListener
from cluster_xml.matter_types import (
    MatterType,
    get_matter_type_by_id,
    get_matter_type_by_name,
    is_type_numeric,
    load_matter_types,
    validate_value,
)
from cluster_xml.types import (
    Access,
    Argument,
    Attribute,
    Cluster,
    ClusterDomain,
    ClusterExtension,
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
    IncludeFeatures,
    StructDef,
    StructItem,
    XmlEntity,
)
from cluster_xml.xml_codec import (
    build_xml,
    infer_value,
    inline_text_elements,
    parse_xml,
    to_plain,
)

__all__ = [
    # Engine
    "ClusterFile",
    "InstanceListener",
    # Hex values
    "HexString",
    "is_valid_hex_char",
    "sanitize_hex_string",
    # Codec
    "build_xml",
    "infer_value",
    "inline_text_elements",
    "parse_xml",
    "to_plain",
    # Document conversion
    "clone",
    "from_raw",
    "parse",
    "serialize",
    "to_raw",
    # Entities
    "Access",
    "Argument",
    "Attribute",
    "Cluster",
    "ClusterDomain",
    "ClusterExtension",
    "ClusterInclude",
    "ClusterRef",
    "Command",
    "Configurator",
    "ConfiguratorFile",
    "DeviceClusters",
    "DeviceType",
    "DeviceTypeId",
    "EnumDef",
    "EnumItem",
    "Event",
    "EventField",
    "IncludeFeature",
    "IncludeFeatures",
    "StructDef",
    "StructItem",
    "XmlEntity",
    # Defaults
    "default_access",
    "default_argument",
    "default_attribute",
    "default_cluster",
    "default_cluster_include",
    "default_cluster_ref",
    "default_command",
    "default_configurator",
    "default_configurator_file",
    "default_device_clusters",
    "default_device_type",
    "default_enum",
    "default_enum_item",
    "default_event",
    "default_event_field",
    "default_include_feature",
    "default_struct",
    "default_struct_item",
    "merge_defaults",
    # Validation
    "FileValidationResult",
    "ValidationIssue",
    "format_validation_errors",
    "validate_cluster_file",
    # Atomic types
    "MatterType",
    "get_matter_type_by_id",
    "get_matter_type_by_name",
    "is_type_numeric",
    "load_matter_types",
    "validate_value",
    # Errors
    "ClusterXmlError",
    "DocumentShapeError",
    "XmlParseError",
]
