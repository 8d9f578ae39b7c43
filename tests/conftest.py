"""Shared pytest fixtures and helpers for the cluster_xml test suite.

Provides:
- Module-level helper functions importable directly by any test module.
- pytest fixtures for sample XML texts and loaded engines.
- Module-level _DIFF_FIXTURE singleton for YAML-driven diff tests.

Module-level helpers (import directly):
    _attribute(name, code) — minimal named Attribute
    _member(collection, name) — minimal named element of any diffed collection
    _snapshot(collection, names) — Configurator holding only that collection

Module-level fixtures (import directly):
    _DIFF_FIXTURE — DiffFixture singleton (loaded once, shared across tests).

pytest fixtures:
    mfg_cluster_xml      — text of fixtures/xml/mfg_cluster.xml
    multi_cluster_xml    — text of fixtures/xml/multi_cluster.xml
    mfg_extension_xml    — text of fixtures/xml/mfg_extension.xml
    device_type_only_xml — text of fixtures/xml/device_type_only.xml
    engine               — fresh ClusterFile
    loaded_engine        — ClusterFile with mfg_cluster.xml loaded and base committed
"""

from __future__ import annotations

from typing import Any

import pytest

from cluster_xml.cluster_file import ClusterFile
from cluster_xml.defaults import default_cluster
from cluster_xml.hex_string import HexString
from cluster_xml.types import Attribute, Command, Configurator, EnumDef, Event, StructDef

# Import after production imports so PYTHONPATH=scripts:tests resolves fixtures/
from fixtures.fixture_loader import DiffFixture, read_xml_fixture


# ─── Diff Fixture Singleton ───────────────────────────────────────────────────
# Loaded once at module import time; import _DIFF_FIXTURE directly in
# parametrize decorators (module-level eval).

_DIFF_FIXTURE = DiffFixture()


# ─── Module-Level Helpers ─────────────────────────────────────────────────────


def _attribute(name: str, code: int = 0) -> Attribute:
    return Attribute(
        name=name,
        side="server",
        code=HexString(code),
        define=name.upper(),
        type="int8u",
    )


_MEMBER_FACTORIES: dict[str, Any] = {
    "attribute": _attribute,
    "command": lambda name: Command(name=name, source="client", code=HexString(0)),
    "event": lambda name: Event(name=name, side="server", priority="info", code=HexString(0)),
    "enum": lambda name: EnumDef(name=name, type="enum8"),
    "struct": lambda name: StructDef(name=name),
}


def _member(collection: str, name: str) -> Any:
    """Minimal element named ``name`` for one of the diffed collections."""
    return _MEMBER_FACTORIES[collection](name)


def _snapshot(collection: str, names: tuple[str, ...] | None) -> Configurator:
    """Configurator whose only populated collection is ``collection``.

    names=None leaves the collection absent (None) rather than empty.
    """
    items = None if names is None else [_member(collection, n) for n in names]
    snapshot = Configurator(cluster=default_cluster())
    if collection in ("enum", "struct"):
        setattr(snapshot, collection, items)
    else:
        setattr(snapshot.cluster, collection, items)
    return snapshot


# ─── pytest Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def mfg_cluster_xml() -> str:
    return read_xml_fixture("mfg_cluster.xml")


@pytest.fixture
def multi_cluster_xml() -> str:
    return read_xml_fixture("multi_cluster.xml")


@pytest.fixture
def mfg_extension_xml() -> str:
    return read_xml_fixture("mfg_extension.xml")


@pytest.fixture
def device_type_only_xml() -> str:
    return read_xml_fixture("device_type_only.xml")


@pytest.fixture
def engine() -> ClusterFile:
    return ClusterFile()


@pytest.fixture
def loaded_engine(engine: ClusterFile, mfg_cluster_xml: str) -> ClusterFile:
    """Engine with mfg_cluster.xml loaded, initialized and base committed."""
    assert engine.load("mfg_cluster.xml", mfg_cluster_xml)
    engine.begin_initialize()
    engine.commit_base()
    return engine
