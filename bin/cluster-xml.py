#!/usr/bin/env python3
"""cluster-xml — check, normalize and diff Matter cluster XML files.

Subcommands:
    validate FILE                       — report missing required fields
    roundtrip FILE [-o OUT]             — load and rewrite the whole file
    extension BASE EDITED [--cluster NAME] [-o OUT]
                                        — write what EDITED adds to BASE as a
                                          <clusterExtension> document

Exit codes:
    0  success (for extension: also when EDITED adds nothing; no output)
    1  validate found missing or invalid fields
    2  a file could not be read or loaded

Usage:
    bin/cluster-xml.py validate MyCluster.xml
    bin/cluster-xml.py roundtrip MyCluster.xml -o normalized.xml
    bin/cluster-xml.py extension Base.xml Edited.xml --cluster "Basic Information"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from cluster_xml import (
    ClusterFile,
    ClusterXmlError,
    format_validation_errors,
    parse,
    validate_cluster_file,
)

logger = logging.getLogger("cluster-xml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cluster-xml",
        description="Check, normalize and diff Matter cluster XML files.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="subcommand", metavar="<subcommand>")

    validate = subparsers.add_parser("validate", help="Report missing required fields")
    validate.add_argument("file", type=Path, help="Cluster XML file")

    roundtrip = subparsers.add_parser("roundtrip", help="Load and rewrite a cluster file")
    roundtrip.add_argument("file", type=Path, help="Cluster XML file")
    roundtrip.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")

    extension = subparsers.add_parser(
        "extension", help="Write the additions of EDITED over BASE as a cluster extension"
    )
    extension.add_argument("base", type=Path, help="Original cluster XML file")
    extension.add_argument("edited", type=Path, help="Edited cluster XML file")
    extension.add_argument(
        "--cluster",
        help="Name of the cluster to compare (default: the first cluster)",
    )
    extension.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")

    return parser


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read %s: %s", path, exc)
        return None


def _write(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
    else:
        output.write_text(text, encoding="utf-8")
        logger.info("Wrote %s", output)


def cmd_validate(args: argparse.Namespace) -> int:
    text = _read(args.file)
    if text is None:
        return 2
    try:
        doc = parse(text)
    except ClusterXmlError as exc:
        logger.error("%s", exc)
        return 2
    result = validate_cluster_file(doc)
    if result.is_valid:
        print(f"{args.file}: OK")
        return 0
    print(format_validation_errors(result.errors))
    return 1


def cmd_roundtrip(args: argparse.Namespace) -> int:
    text = _read(args.file)
    if text is None:
        return 2
    engine = ClusterFile()
    if not engine.load(args.file, text):
        return 2
    asyncio.run(engine.initialize())
    _write(engine.get_serialized_cluster(), args.output)
    return 0


def cmd_extension(args: argparse.Namespace) -> int:
    base_text = _read(args.base)
    edited_text = _read(args.edited)
    if base_text is None or edited_text is None:
        return 2
    engine = ClusterFile()
    if not engine.load(args.base, base_text):
        return 2
    edited = ClusterFile()
    if not edited.load(args.edited, edited_text):
        return 2
    try:
        engine.begin_initialize(args.cluster)
        edited.begin_initialize(args.cluster)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    engine.commit_base()

    engine.current.cluster.attribute = edited.current.cluster.attribute
    engine.current.cluster.command = edited.current.cluster.command
    engine.current.cluster.event = edited.current.cluster.event
    engine.current.device_type = edited.current.device_type

    output = engine.get_serialized_cluster_extension()
    if not output:
        logger.info("%s adds nothing to %s", args.edited, args.base)
        return 0
    _write(output, args.output)
    return 0


COMMANDS = {
    "validate": cmd_validate,
    "roundtrip": cmd_roundtrip,
    "extension": cmd_extension,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.subcommand is None:
        parser.print_help()
        return 0
    return COMMANDS[args.subcommand](args)


if __name__ == "__main__":
    sys.exit(main())
