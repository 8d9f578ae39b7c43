"""Tests for bin/cluster-xml.py — validate, roundtrip and extension subcommands.

BDD Acceptance Criteria:
    AC1: Given a valid file, when `validate` runs, then it prints "<file>: OK"
         and exits 0; with missing fields it prints the issues and exits 1.
    AC2: Given an unreadable or malformed file, when any subcommand runs, then
         it exits 2.
    AC3: Given a cluster file, when `roundtrip` runs, then the output parses
         to the same document.
    AC4: Given a base file and an edited copy with one extra attribute, when
         `extension` runs, then the output is a <clusterExtension> holding only
         that attribute; with no additions nothing is written.

Coverage:
    - build_parser: subcommands and defaults
    - main(): exit codes 0 / 1 / 2, help without a subcommand
"""

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

from cluster_xml.document import parse
from fixtures.fixture_loader import xml_fixture_path

CLI_PATH = Path(__file__).parent.parent / "bin" / "cluster-xml.py"


def _load_cli() -> ModuleType:
    """Load bin/cluster-xml.py as a module (its file name is not importable)."""
    spec = importlib.util.spec_from_file_location("cluster_xml_cli", CLI_PATH)
    assert spec is not None, f"Could not create module spec for {CLI_PATH}"
    assert spec.loader is not None, "Module spec has no loader"
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def cli() -> ModuleType:
    return _load_cli()


def _edited_copy(tmp_path: Path, xml: str) -> Path:
    """mfg_cluster.xml with one more attribute appended to the cluster."""
    extra = (
        '<attribute side="server" code="0x0002" define="USER_COUNTER" type="int16u" '
        'writable="true">UserCounter</attribute>\n  </cluster>'
    )
    path = tmp_path / "edited.xml"
    path.write_text(xml.replace("</cluster>", extra, 1), encoding="utf-8")
    return path


# ─── Parser ───────────────────────────────────────────────────────────────────


class TestParser:
    def test_extension_arguments(self, cli: ModuleType) -> None:
        args = cli.build_parser().parse_args(["extension", "a.xml", "b.xml", "--cluster", "Foo"])
        assert args.subcommand == "extension"
        assert args.base == Path("a.xml")
        assert args.cluster == "Foo"
        assert args.output is None

    def test_no_subcommand_prints_help(self, cli: ModuleType, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main([]) == 0
        assert "cluster-xml" in capsys.readouterr().out

    def test_unknown_subcommand_exits(self, cli: ModuleType) -> None:
        with pytest.raises(SystemExit):
            cli.main(["explode"])

    def test_commands_cover_subcommands(self, cli: ModuleType) -> None:
        assert set(cli.COMMANDS) == {"validate", "roundtrip", "extension"}


# ─── validate ─────────────────────────────────────────────────────────────────


class TestValidate:
    """AC1 + AC2."""

    def test_valid_file(self, cli: ModuleType, capsys: pytest.CaptureFixture[str]) -> None:
        path = xml_fixture_path("mfg_cluster.xml")
        assert cli.main(["validate", str(path)]) == 0
        assert f"{path}: OK" in capsys.readouterr().out

    def test_missing_fields(
        self, cli: ModuleType, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "incomplete.xml"
        path.write_text("<configurator><cluster><name>X</name></cluster></configurator>", encoding="utf-8")
        assert cli.main(["validate", str(path)]) == 1
        out = capsys.readouterr().out
        assert "cluster code is not found in the XML file" in out

    def test_malformed_file(self, cli: ModuleType, tmp_path: Path) -> None:
        path = tmp_path / "broken.xml"
        path.write_text("<configurator><cluster>", encoding="utf-8")
        assert cli.main(["validate", str(path)]) == 2

    def test_missing_file(self, cli: ModuleType, tmp_path: Path) -> None:
        assert cli.main(["validate", str(tmp_path / "absent.xml")]) == 2


# ─── roundtrip ────────────────────────────────────────────────────────────────


class TestRoundtrip:
    """AC3"""

    def test_output_file(self, cli: ModuleType, tmp_path: Path) -> None:
        source = xml_fixture_path("mfg_cluster.xml")
        output = tmp_path / "out.xml"
        assert cli.main(["roundtrip", str(source), "-o", str(output)]) == 0
        assert parse(output.read_text(encoding="utf-8")) == parse(source.read_text(encoding="utf-8"))

    def test_stdout(self, cli: ModuleType, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["roundtrip", str(xml_fixture_path("device_type_only.xml"))]) == 0
        out = capsys.readouterr().out
        assert out.startswith("<?xml")
        assert "nordic:sensor" in out

    def test_unloadable_file(self, cli: ModuleType, tmp_path: Path) -> None:
        path = tmp_path / "enum_only.xml"
        path.write_text('<configurator><enum name="E" type="enum8"/></configurator>', encoding="utf-8")
        assert cli.main(["roundtrip", str(path)]) == 2


# ─── extension ────────────────────────────────────────────────────────────────


class TestExtension:
    """AC4"""

    def test_added_attribute(self, cli: ModuleType, tmp_path: Path, mfg_cluster_xml: str) -> None:
        base = xml_fixture_path("mfg_cluster.xml")
        edited = _edited_copy(tmp_path, mfg_cluster_xml)
        output = tmp_path / "extension.xml"
        assert cli.main(["extension", str(base), str(edited), "-o", str(output)]) == 0

        (extension,) = parse(output.read_text(encoding="utf-8")).cluster_extension
        assert str(extension.code) == "0xfff10002"
        assert [a.key for a in extension.attribute] == ["UserCounter"]
        assert extension.command is None

    def test_no_additions_writes_nothing(self, cli: ModuleType, tmp_path: Path) -> None:
        base = xml_fixture_path("mfg_cluster.xml")
        output = tmp_path / "extension.xml"
        assert cli.main(["extension", str(base), str(base), "-o", str(output)]) == 0
        assert not output.exists()

    def test_unknown_cluster(self, cli: ModuleType) -> None:
        multi = str(xml_fixture_path("multi_cluster.xml"))
        assert cli.main(["extension", multi, multi, "--cluster", "Missing"]) == 2

    def test_named_cluster(self, cli: ModuleType, capsys: pytest.CaptureFixture[str]) -> None:
        multi = str(xml_fixture_path("multi_cluster.xml"))
        assert cli.main(["extension", multi, multi, "--cluster", "Actuator Config"]) == 0
        assert capsys.readouterr().out == ""
