"""Tests for cluster_xml.matter_types — atomic types and option lists.

Coverage:
    - parse_matter_types: attribute mapping, hex ids, flag defaults
    - load_matter_types: per-path cache, unreadable and malformed files
    - lookups by id (case-insensitive) and name
    - validate_value for composite, discrete and analog types
    - is_type_numeric and the fixed option lists
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from cluster_xml.errors import DocumentShapeError
from cluster_xml.matter_types import (
    CLIENT_SERVER_OPTIONS,
    DEVICE_TYPE_SCOPES,
    PRIORITY_OPTIONS,
    MatterType,
    clear_matter_types_cache,
    get_matter_type_by_id,
    get_matter_type_by_name,
    is_type_numeric,
    load_matter_types,
    parse_matter_types,
    validate_value,
)
from fixtures.fixture_loader import read_xml_fixture, xml_fixture_path


@pytest.fixture(autouse=True)
def _empty_cache() -> Iterator[None]:
    clear_matter_types_cache()
    yield
    clear_matter_types_cache()


@pytest.fixture
def types() -> list[MatterType]:
    return parse_matter_types(read_xml_fixture("types.xml"))


# ─── Parsing ──────────────────────────────────────────────────────────────────


class TestParseMatterTypes:
    def test_all_entries(self, types: list[MatterType]) -> None:
        assert [t.name for t in types] == ["boolean", "int8u", "int16s", "char_string"]

    def test_fields(self, types: list[MatterType]) -> None:
        int16s = types[2]
        assert int16s == MatterType(
            id="0x29",
            name="int16s",
            description="Signed 16-bit integer",
            size=2,
            analog=True,
            signed=True,
        )

    def test_missing_size_and_flags(self, types: list[MatterType]) -> None:
        char_string = types[3]
        assert char_string.size is None
        assert char_string.composite is True
        assert char_string.analog is False

    def test_single_entry(self) -> None:
        (only,) = parse_matter_types(
            '<configurator><atomic><type id="0x08" name="data8" size="1" discrete="true"/></atomic></configurator>'
        )
        assert only.id == "0x8"
        assert only.discrete is True

    @pytest.mark.parametrize("size", ["one", "1.5", "true"])
    def test_non_integer_size_rejected(self, size: str) -> None:
        with pytest.raises(DocumentShapeError, match="size"):
            parse_matter_types(
                f'<configurator><atomic><type id="0x20" name="int8u" size="{size}"/></atomic></configurator>'
            )

    def test_no_atomic_section(self) -> None:
        assert parse_matter_types("<configurator><cluster/></configurator>") == []


class TestLoadMatterTypes:
    def test_load_from_path(self) -> None:
        assert len(load_matter_types(xml_fixture_path("types.xml"))) == 4

    def test_cached_per_path(self, tmp_path: Path) -> None:
        path = tmp_path / "types.xml"
        path.write_text(read_xml_fixture("types.xml"), encoding="utf-8")
        first = load_matter_types(path)
        path.write_text("<configurator/>", encoding="utf-8")
        assert load_matter_types(str(path)) is first
        clear_matter_types_cache()
        assert load_matter_types(path) == []

    def test_missing_file(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        assert load_matter_types(tmp_path / "absent.xml") == []
        assert "absent.xml" in caplog.text

    def test_bad_size_returns_empty_and_logs(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "types.xml"
        path.write_text(
            '<configurator><atomic><type id="0x20" name="int8u" size="one"/></atomic></configurator>',
            encoding="utf-8",
        )
        assert load_matter_types(path) == []
        assert "size='one'" in caplog.text

    def test_failure_not_cached(self, tmp_path: Path) -> None:
        path = tmp_path / "types.xml"
        path.write_text("<configurator><atomic>", encoding="utf-8")
        assert load_matter_types(path) == []
        path.write_text(read_xml_fixture("types.xml"), encoding="utf-8")
        assert len(load_matter_types(path)) == 4


# ─── Lookups ──────────────────────────────────────────────────────────────────


class TestLookups:
    def test_by_id_case_insensitive(self, types: list[MatterType]) -> None:
        assert get_matter_type_by_id(types, "0X20").name == "int8u"

    def test_by_id_unknown(self, types: list[MatterType]) -> None:
        assert get_matter_type_by_id(types, "0x99") is None

    def test_by_name(self, types: list[MatterType]) -> None:
        assert get_matter_type_by_name(types, "boolean").id == "0x10"
        assert get_matter_type_by_name(types, "Boolean") is None


# ─── Value Validation ─────────────────────────────────────────────────────────


class TestValidateValue:
    @pytest.mark.parametrize(
        ("name", "value", "expected"),
        [
            pytest.param("char_string", "hello", True, id="composite-str"),
            pytest.param("char_string", 5, False, id="composite-int"),
            pytest.param("boolean", 1, True, id="discrete-int"),
            pytest.param("boolean", True, False, id="discrete-bool"),
            pytest.param("boolean", 1.5, False, id="discrete-float"),
            pytest.param("int8u", 0, True, id="unsigned-min"),
            pytest.param("int8u", 255, True, id="unsigned-max"),
            pytest.param("int8u", 256, False, id="unsigned-overflow"),
            pytest.param("int8u", -1, False, id="unsigned-negative"),
            pytest.param("int16s", -32768, True, id="signed-min"),
            pytest.param("int16s", 32767, True, id="signed-max"),
            pytest.param("int16s", 32768, False, id="signed-overflow"),
            pytest.param("int16s", 12.5, True, id="analog-float"),
            pytest.param("int16s", "12", False, id="analog-str"),
        ],
    )
    def test_values(self, types: list[MatterType], name: str, value: object, expected: bool) -> None:
        assert validate_value(get_matter_type_by_name(types, name), value) is expected

    def test_unknown_type(self) -> None:
        assert validate_value(None, 1) is False

    def test_type_without_kind(self) -> None:
        assert validate_value(MatterType(id="0x0", name="no_data", description=""), 0) is False


class TestOptions:
    @pytest.mark.parametrize("name", ["int8u", "int64s", "int24u", "single", "double"])
    def test_numeric(self, name: str) -> None:
        assert is_type_numeric(name)

    @pytest.mark.parametrize("name", ["boolean", "char_string", "int128u", "enum8"])
    def test_not_numeric(self, name: str) -> None:
        assert not is_type_numeric(name)

    def test_option_lists(self) -> None:
        assert CLIENT_SERVER_OPTIONS == ("client", "server")
        assert "info" in PRIORITY_OPTIONS
        assert DEVICE_TYPE_SCOPES == ("Node", "Endpoint")
