"""Snapshot and diff engine for a loaded Matter cluster file.

ClusterFile keeps two snapshots of the document being edited:

- ``current`` tracks every change made by the user.
- ``base`` is a deep copy of ``current`` taken right after initialization;
  it is never mutated by editing and is the reference for every diff.

Typical flow::

    engine = ClusterFile()
    if engine.load("MyCluster.xml", text):
        await engine.initialize()              # or begin_initialize + commit_base
        engine.add_attribute(new_attribute)
        extension_xml = engine.get_serialized_cluster_extension()

Diffs are keyed by name (attributes fall back to their display text), so an
element counts as new when no base element has the same key. A base
collection that is absent (None) makes the whole current collection new.

The engine is an explicit object; several independent files can be edited
side by side. Every public operation holds one reentrant lock.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from typing import Any, Callable, Iterable, TypeVar

from cluster_xml.defaults import default_cluster, default_configurator
from cluster_xml.document import clone, parse, serialize
from cluster_xml.errors import ClusterXmlError
from cluster_xml.hex_string import HexString
from cluster_xml.interfaces import InstanceListener
from cluster_xml.types import (
    Attribute,
    Cluster,
    ClusterExtension,
    Command,
    Configurator,
    ConfiguratorFile,
    DeviceType,
    DeviceTypeId,
    EnumDef,
    Event,
    StructDef,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXTENSION_CLUSTER_NAME = "Cluster Extension"


def _new_items(current: list[T] | None, base: list[T] | None) -> list[T]:
    """Items of current whose key is missing from base, in current's order."""
    if current is None:
        return []
    if base is None:
        return list(current)
    base_keys = {item.key for item in base}
    return [item for item in current if item.key not in base_keys]


def _first(items: list[T] | None) -> T | None:
    return items[0] if items else None


def _device_type_id(value: Any) -> Any:
    """Make a <deviceId>/<profileId> value an explicit DeviceTypeId.

    Bare values, and ids written without an ``editable`` attribute, become
    non-editable.
    """
    if value is None:
        return None
    if not isinstance(value, DeviceTypeId):
        return DeviceTypeId(editable=False, value=value)
    if value.editable is None:
        value.editable = False
    return value


class ClusterFile:
    """Load, edit, diff and serialize one cluster XML file.

    Attributes:
        file: Document from the last successful load(), or None.
        extension_file: Document from the last successful load_extension().
        file_name: Base name of the last loaded file.
        content: Raw text of the last loaded file.
        current: Snapshot edited by the user.
        base: Reference snapshot for diffs.
        loaded_cluster_extension: True after load_extension() succeeded.
        base_pending: True between begin_initialize() and commit_base().
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._listeners: list[InstanceListener] = []
        self.file: ConfiguratorFile | None = None
        self.extension_file: ConfiguratorFile | None = None
        self.file_name = ""
        self.content = ""
        self.current: Configurator = default_configurator()
        self.base: Configurator = default_configurator()
        self.loaded_cluster_extension = False
        self.base_pending = False

    # ─── Listeners ────────────────────────────────────────────────────────────

    def add_listener(self, listener: InstanceListener | Callable[[ClusterFile], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: InstanceListener | Callable[[ClusterFile], None]) -> None:
        """Remove a listener. Raises ValueError if it was never added."""
        with self._lock:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ─── Loading ──────────────────────────────────────────────────────────────

    def is_multiple_cluster(self, text: str) -> bool:
        """Return True if the XML text declares more than one <cluster>.

        Raises:
            XmlParseError: If text is not a valid cluster document.
        """
        doc = parse(text)
        return doc.cluster is not None and len(doc.cluster) > 1

    def load(self, file_name: str | os.PathLike[str], text: str) -> bool:
        """Load a cluster file.

        Both snapshots are rebuilt from the file's first cluster, first device
        type, enums, structs and cluster extensions. Listeners are not
        notified; call initialize() to select a cluster and announce it.

        Returns:
            True on success. False when the text does not parse or holds
            neither a cluster nor a device type; the engine is then unchanged.
        """
        name = os.path.basename(os.fspath(file_name))
        try:
            doc = parse(text)
        except ClusterXmlError as exc:
            logger.error("Error parsing XML in %s: %s", name, exc)
            return False
        if not doc.cluster and not doc.device_type:
            logger.error("No <cluster> or <deviceType> found in %s", name)
            return False

        with self._lock:
            self.file = doc
            self.file_name = name
            self.content = text
            self.current = self._snapshot_of(doc, _first(doc.cluster))
            self.base = clone(self.current)
            self.loaded_cluster_extension = False
            self.base_pending = False
        logger.info("Loaded cluster file: %s", name)
        return True

    def load_extension(self, file_name: str | os.PathLike[str], text: str) -> bool:
        """Load a cluster extension file on top of a placeholder cluster.

        Both snapshots become a cluster named "Cluster Extension" carrying the
        extension's code and no members; current then receives the extension's
        attributes, commands, events and device type, so all of them show up
        as new in the diffs.

        Returns:
            True on success. False when the text does not parse or holds no
            <clusterExtension>; the engine is then unchanged.
        """
        name = os.path.basename(os.fspath(file_name))
        try:
            doc = parse(text)
        except ClusterXmlError as exc:
            logger.error("Error parsing XML in %s: %s", name, exc)
            return False
        extension = _first(doc.cluster_extension)
        if extension is None:
            logger.error("No <clusterExtension> found in %s", name)
            return False

        code = HexString(extension.code) if extension.code is not None else HexString(0)
        with self._lock:
            self.extension_file = doc
            self.file_name = name
            self.content = text
            self.base = Configurator(cluster=self._placeholder_cluster(code))
            self.current = Configurator(cluster=self._placeholder_cluster(code))
            added = clone(extension)
            self.current.cluster.attribute = added.attribute
            self.current.cluster.command = added.command
            self.current.cluster.event = added.event
            self.current.device_type = added.device_type
            self.loaded_cluster_extension = True
            self.base_pending = False
            self._notify()
        logger.info("Loaded cluster extension file: %s", name)
        return True

    @staticmethod
    def _placeholder_cluster(code: HexString) -> Cluster:
        cluster = default_cluster()
        cluster.name = EXTENSION_CLUSTER_NAME
        cluster.code = code
        cluster.attribute = None
        cluster.command = None
        cluster.event = None
        return cluster

    @staticmethod
    def _snapshot_of(doc: ConfiguratorFile, cluster: Cluster | None) -> Configurator:
        snapshot = default_configurator()
        if doc.enum is not None:
            snapshot.enum = clone(doc.enum)
        if doc.struct is not None:
            snapshot.struct = clone(doc.struct)
        if doc.device_type:
            snapshot.device_type = clone(doc.device_type[0])
        if doc.cluster_extension is not None:
            snapshot.cluster_extension = clone(doc.cluster_extension)
        snapshot.extra_attrs = clone(doc.extra_attrs)
        snapshot.extra_children = clone(doc.extra_children)
        if cluster is not None:
            snapshot.cluster = clone(cluster)
        return snapshot

    # ─── Initialization ───────────────────────────────────────────────────────

    def _select_cluster(self, cluster: Cluster | str | None) -> Cluster | None:
        if isinstance(cluster, Cluster):
            return cluster
        clusters = self.file.cluster or []
        if cluster is None:
            return _first(clusters)
        for candidate in clusters:
            if candidate.name == cluster:
                return candidate
        known = ", ".join(str(c.name) for c in clusters) or "none"
        raise ValueError(
            f"Cluster {cluster!r} not found in {self.file_name}. "
            f"Fix: choose one of: {known}."
        )

    def begin_initialize(self, cluster: Cluster | str | None = None) -> None:
        """Rebuild current from the loaded file around the selected cluster.

        Args:
            cluster: The cluster to edit, given as an element or by name.
                Defaults to the file's first cluster (or an empty cluster for
                device-type-only files).

        Base is left untouched until commit_base(); listeners notified here
        still see the previous base.

        Raises:
            RuntimeError: If no file has been loaded.
            ValueError: If a cluster name is given that the file does not hold.
        """
        with self._lock:
            if self.file is None:
                raise RuntimeError(
                    "begin_initialize() called before a successful load(). "
                    "Fix: load a cluster file first."
                )
            selected = self._select_cluster(cluster)
            self.current = self._snapshot_of(self.file, selected)
            device_type = self.current.device_type
            if device_type is not None:
                device_type.device_id = _device_type_id(device_type.device_id)
                device_type.profile_id = _device_type_id(device_type.profile_id)
            self.base_pending = True
            self._notify()

    def commit_base(self) -> None:
        """Take the base snapshot: a deep copy of current."""
        with self._lock:
            self.base = clone(self.current)
            self.base_pending = False

    async def initialize(self, cluster: Cluster | str | None = None) -> None:
        """begin_initialize(), one event-loop turn, then commit_base().

        Work that listeners schedule on the running loop executes in between
        and observes the previous base snapshot.
        """
        self.begin_initialize(cluster)
        await asyncio.sleep(0)
        self.commit_base()

    # ─── Diffs ────────────────────────────────────────────────────────────────

    def _cluster_members(self, snapshot: Configurator, member: str) -> list[Any] | None:
        if snapshot.cluster is None:
            return None
        return getattr(snapshot.cluster, member)

    def get_new_attributes(self) -> list[Attribute]:
        with self._lock:
            return _new_items(
                self._cluster_members(self.current, "attribute"),
                self._cluster_members(self.base, "attribute"),
            )

    def get_new_commands(self) -> list[Command]:
        with self._lock:
            return _new_items(
                self._cluster_members(self.current, "command"),
                self._cluster_members(self.base, "command"),
            )

    def get_new_events(self) -> list[Event]:
        with self._lock:
            return _new_items(
                self._cluster_members(self.current, "event"),
                self._cluster_members(self.base, "event"),
            )

    def get_new_enums(self) -> list[EnumDef]:
        with self._lock:
            return _new_items(self.current.enum, self.base.enum)

    def get_new_structs(self) -> list[StructDef]:
        with self._lock:
            return _new_items(self.current.struct, self.base.struct)

    def get_new_device_type(self) -> DeviceType | None:
        """Current device type if base has none or a different (name, typeName).

        Changes inside a device type with the same identity are not reported.
        """
        with self._lock:
            current = self.current.device_type
            if current is None:
                return None
            base = self.base.device_type
            if base is None or base.key != current.key:
                return current
            return None

    def get_cluster_diff(self) -> list[Cluster]:
        """Current cluster compared with an empty cluster.

        Returns [] while the cluster still equals default_cluster(); otherwise
        one cluster with the identity fields and every attribute, command and
        event of current.
        """
        with self._lock:
            cluster = self.current.cluster
            if cluster is None or cluster == default_cluster():
                return []
            return [
                Cluster(
                    domain=cluster.domain,
                    name=cluster.name,
                    code=cluster.code,
                    define=cluster.define,
                    attribute=cluster.attribute,
                    command=cluster.command,
                    event=cluster.event,
                )
            ]

    # ─── Serialization ────────────────────────────────────────────────────────

    def get_serialized_cluster(self) -> str:
        """Serialize the whole current document.

        Enums and structs are written even when unchanged. Cluster extensions
        come from current, or from the loaded file when current has none.
        Returns "" while current is still the empty default snapshot.
        """
        with self._lock:
            current = self.current
            if current == default_configurator():
                return ""
            doc = ConfiguratorFile(
                enum=current.enum,
                struct=current.struct,
                extra_attrs=current.extra_attrs,
                extra_children=current.extra_children,
            )
            if current.cluster is not None and current.cluster != default_cluster():
                doc.cluster = [current.cluster]
            if current.device_type is not None:
                doc.device_type = [current.device_type]
            extensions = current.cluster_extension
            if not extensions and self.file is not None:
                extensions = self.file.cluster_extension
            doc.cluster_extension = extensions
            return serialize(doc)

    def get_serialized_cluster_extension(self) -> str:
        """Serialize everything added since the base snapshot as a <clusterExtension>.

        Returns "" when there are no new attributes, commands, events and no
        new device type.
        """
        with self._lock:
            attributes = self.get_new_attributes()
            commands = self.get_new_commands()
            events = self.get_new_events()
            device_type = self.get_new_device_type()
            if not (attributes or commands or events or device_type is not None):
                return ""
            cluster = self.current.cluster
            extension = ClusterExtension(
                code=cluster.code if cluster is not None else None,
                attribute=attributes,
                command=commands,
                event=events,
                device_type=device_type,
            )
            logger.debug(
                "Extension for %s: %d attribute(s), %d command(s), %d event(s), device type %s",
                self.file_name,
                len(attributes),
                len(commands),
                len(events),
                "yes" if device_type is not None else "no",
            )
            return serialize(ConfiguratorFile(cluster_extension=[extension]))

    # ─── Editing ──────────────────────────────────────────────────────────────

    def _editable_cluster(self) -> Cluster:
        if self.current.cluster is None:
            self.current.cluster = default_cluster()
        return self.current.cluster

    def _append(self, owner: Any, member: str, items: Iterable[Any]) -> None:
        collection = getattr(owner, member)
        if collection is None:
            collection = []
            setattr(owner, member, collection)
        collection.extend(items)
        self._notify()

    def set_cluster(self, cluster: Cluster) -> None:
        with self._lock:
            self.current.cluster = cluster
            self._notify()

    def add_attribute(self, attribute: Attribute) -> None:
        with self._lock:
            self._append(self._editable_cluster(), "attribute", [attribute])

    def add_command(self, command: Command) -> None:
        with self._lock:
            self._append(self._editable_cluster(), "command", [command])

    def add_event(self, event: Event) -> None:
        with self._lock:
            self._append(self._editable_cluster(), "event", [event])

    def add_enum(self, enum: EnumDef) -> None:
        with self._lock:
            self._append(self.current, "enum", [enum])

    def add_struct(self, struct: StructDef) -> None:
        with self._lock:
            self._append(self.current, "struct", [struct])

    def set_device_type(self, device_type: DeviceType | None) -> None:
        with self._lock:
            self.current.device_type = device_type
            self._notify()

    def reset(self) -> None:
        """Forget the loaded file and return both snapshots to the empty default."""
        with self._lock:
            self.file = None
            self.extension_file = None
            self.file_name = ""
            self.content = ""
            self.current = default_configurator()
            self.base = default_configurator()
            self.loaded_cluster_extension = False
            self.base_pending = False
            self._notify()
        logger.info("Cluster file state reset")
