"""CLI to report protocol version floors for a protobuf schema.

Usage:
  versionpb --descriptor-set schema.pb [--exclude google.protobuf] [--structured]
  versionpb --descriptor-set schema.pb --message pkg.Probe --payload probe.bin
  versionpb --descriptor-set schema.pb --message pkg.Probe --payload-json probe.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from google.protobuf import json_format
from packaging.version import Version

from versionpb.aggregate import annotations_of_registry, minimal_version_of
from versionpb.core import VersionpbSettings
from versionpb.errors import VersionInvariantError
from versionpb.registry import SchemaRegistry
from versionpb.tags import BlobTagExtractor, ExtensionTagExtractor, TagExtractor

_logger = logging.getLogger("versionpb.cli")


def _parse_args(argv: list[str], settings: VersionpbSettings) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Report the minimal protocol version required by a schema or message")
    p.add_argument("--descriptor-set", type=Path, required=True, help="Serialized FileDescriptorSet (protoc --include_imports --descriptor_set_out)")
    p.add_argument("--exclude", action="append", default=None, metavar="PACKAGE", help="Package to skip in the schema scan (repeatable)")
    p.add_argument("--structured", action="store_true", help="Read option extensions directly instead of scanning rendered options")
    p.add_argument("--message", default=None, help="Fully-qualified message type of the payload")
    payload = p.add_mutually_exclusive_group()
    payload.add_argument("--payload", type=Path, default=None, help="Binary-encoded message payload")
    payload.add_argument("--payload-json", type=Path, default=None, help="JSON-encoded message payload")
    ns = p.parse_args(argv)
    if (ns.payload or ns.payload_json) and not ns.message:
        p.error("--payload/--payload-json require --message")
    if ns.message and not (ns.payload or ns.payload_json):
        p.error("--message requires --payload or --payload-json")
    if ns.structured and len(settings.tag_names) != 4:
        p.error(
            f"--structured needs exactly 4 tag names (message, field, enum, enum value), "
            f"got {len(settings.tag_names)} from VERSIONPB_TAG_NAMES"
        )
    return ns


def _format_version(version: Version | None) -> str | None:
    return str(version) if version is not None else None


def _build_extractor(settings: VersionpbSettings, structured: bool) -> TagExtractor:
    if structured:
        return ExtensionTagExtractor(settings.tag_names)
    return BlobTagExtractor(settings.tag_names)


def _scan(registry: SchemaRegistry, excluded: tuple[str, ...], extractor: TagExtractor) -> int:
    scan = annotations_of_registry(registry, excluded, extractor=extractor)
    payload = {
        "annotations": [
            {"name": annotation.name, "version": _format_version(annotation.version)}
            for annotation in scan.annotations
        ],
        "floor": _format_version(scan.floor),
        "error": str(scan.error) if scan.error is not None else None,
    }
    print(json.dumps(payload, indent=2))
    return 0 if scan.ok else 1


def _floor_of_payload(registry: SchemaRegistry, ns: argparse.Namespace, extractor: TagExtractor) -> int:
    message = registry.message_class(ns.message)()
    if ns.payload is not None:
        message.ParseFromString(ns.payload.read_bytes())
    else:
        json_format.Parse(ns.payload_json.read_text(), message)
    try:
        floor = minimal_version_of(message, extractor=extractor)
    except VersionInvariantError as exc:
        _logger.error("%s: %s", ns.message, exc)
        return 2
    print(json.dumps({"message": ns.message, "minimal_version": _format_version(floor)}, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = VersionpbSettings()
    ns = _parse_args(list(sys.argv[1:] if argv is None else argv), settings)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    registry = SchemaRegistry.from_file(ns.descriptor_set)
    _logger.debug("loaded %d files from %s", len(registry), ns.descriptor_set)
    extractor = _build_extractor(settings, ns.structured)
    if ns.message:
        return _floor_of_payload(registry, ns, extractor)
    excluded = tuple(ns.exclude) if ns.exclude is not None else settings.excluded_packages
    return _scan(registry, excluded, extractor)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
