"""Required-field validation for a loaded cluster file.

Key types:
    ValidationIssue      — frozen dataclass: path, field, optional message
    FileValidationResult — aggregate result with multiple-instance flags

Entry points:
    validate_cluster_file(doc)       — check every cluster and device type
    format_validation_errors(issues) — human-readable summary ("" when none)

Validation returns data and never raises. Paths name the element the way a
user sees it in the file: the first cluster is ``cluster``, the second
``cluster 2``; members are indexed from zero (``cluster.attribute[0]``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cluster_xml.types import Cluster, ConfiguratorFile, DeviceType, DeviceTypeId

MISSING_FIELD_MESSAGE = "is not found in the XML file"
ERRORS_HEADER = "The following required fields are missing or invalid:"


# ─── Result Types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ValidationIssue:
    """One missing or invalid required field.

    path locates the element (``deviceType 2``, ``cluster.command[1]``),
    field is the XML name of the offending field, message overrides the
    default "is not found" text.
    """

    path: str
    field: str
    message: str | None = None

    def __str__(self) -> str:
        return f"{self.path} {self.field} {self.message or MISSING_FIELD_MESSAGE}"


@dataclass(frozen=True)
class FileValidationResult:
    is_valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    has_multiple_clusters: bool = False
    has_multiple_device_types: bool = False
    clusters: list[Cluster] = field(default_factory=list)
    device_types: list[DeviceType] = field(default_factory=list)


# ─── Checks ───────────────────────────────────────────────────────────────────


def _missing(value: Any) -> bool:
    if value is None:
        return True
    return str(value).strip() == ""


def _element_path(kind: str, index: int) -> str:
    return f"{kind} {index + 1}" if index > 0 else kind


def _check_members(
    members: list[Any] | None, path: str, required: tuple[tuple[str, str], ...]
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for index, member in enumerate(members or []):
        member_path = f"{path}[{index}]"
        for attr_name, xml_name in required:
            if _missing(getattr(member, attr_name)):
                issues.append(ValidationIssue(member_path, xml_name))
    return issues


def validate_cluster(cluster: Cluster, index: int = 0) -> list[ValidationIssue]:
    """Required cluster fields: name, code, define, domain, and per member
    attribute code/type/side, command code/name/source, event code/name/priority.
    """
    path = _element_path("cluster", index)
    issues: list[ValidationIssue] = []
    for attr_name in ("name", "code", "define", "domain"):
        if _missing(getattr(cluster, attr_name)):
            issues.append(ValidationIssue(path, attr_name))

    issues.extend(
        _check_members(
            cluster.attribute,
            f"{path}.attribute",
            (("code", "code"), ("type", "type"), ("side", "side")),
        )
    )
    issues.extend(
        _check_members(
            cluster.command,
            f"{path}.command",
            (("code", "code"), ("name", "name"), ("source", "source")),
        )
    )
    issues.extend(
        _check_members(
            cluster.event,
            f"{path}.event",
            (("code", "code"), ("name", "name"), ("priority", "priority")),
        )
    )
    return issues


def _missing_id(value: Any) -> bool:
    if isinstance(value, DeviceTypeId):
        return _missing(value.value)
    return _missing(value)


def validate_device_type(device_type: DeviceType, index: int = 0) -> list[ValidationIssue]:
    path = _element_path("deviceType", index)
    issues: list[ValidationIssue] = []
    for attr_name, xml_name in (("name", "name"), ("type_name", "typeName"), ("domain", "domain")):
        if _missing(getattr(device_type, attr_name)):
            issues.append(ValidationIssue(path, xml_name))
    for attr_name, xml_name in (("device_id", "deviceId"), ("profile_id", "profileId")):
        if _missing_id(getattr(device_type, attr_name)):
            issues.append(ValidationIssue(path, xml_name))
    for attr_name, xml_name in (("class_", "class"), ("scope", "scope")):
        if _missing(getattr(device_type, attr_name)):
            issues.append(ValidationIssue(path, xml_name))
    return issues


def validate_cluster_file(doc: ConfiguratorFile) -> FileValidationResult:
    """Validate every cluster and device type of a parsed file.

    A file needs at least one cluster or one device type; without either a
    single ``root`` issue is reported. All checks run, none short-circuit.
    """
    clusters = list(doc.cluster or [])
    device_types = list(doc.device_type or [])
    errors: list[ValidationIssue] = []
    for index, cluster in enumerate(clusters):
        errors.extend(validate_cluster(cluster, index))
    for index, device_type in enumerate(device_types):
        errors.extend(validate_device_type(device_type, index))
    if not clusters and not device_types:
        errors.append(
            ValidationIssue(
                "root",
                "cluster/deviceType",
                "File must contain at least one cluster or one device type",
            )
        )
    return FileValidationResult(
        is_valid=not errors,
        errors=errors,
        has_multiple_clusters=len(clusters) > 1,
        has_multiple_device_types=len(device_types) > 1,
        clusters=clusters,
        device_types=device_types,
    )


def format_validation_errors(issues: list[ValidationIssue]) -> str:
    """Header line followed by one issue per line; "" when there are none."""
    if not issues:
        return ""
    return "\n".join([ERRORS_HEADER, *(str(issue) for issue in issues)])
