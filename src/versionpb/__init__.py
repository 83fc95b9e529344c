"""versionpb - minimal protocol version of protobuf schemas and messages.

Schema elements (messages, fields, enums, enum values) carry the version they
were introduced in as a custom option. versionpb walks a schema or a live
message, collects those tags and reports the floor version a consumer must
support.

Modules:
- tags: option tag extraction and version parsing
- walker: schema (declaration-driven) and instance (data-driven) traversal
- aggregate: public entry points folding traversals into results
- registry: schema files loaded from descriptor sets
"""

__version__ = "0.1.0"

from versionpb.aggregate import (
    ScanResult,
    annotations_of,
    annotations_of_registry,
    floor_of,
    minimal_version_of,
)
from versionpb.errors import (
    ElementVersionError,
    EnumResolutionError,
    TagFormatError,
    VersionError,
    VersionFormatError,
    VersionInvariantError,
)
from versionpb.registry import SchemaRegistry
from versionpb.tags import (
    DEFAULT_TAG_NAMES,
    BlobTagExtractor,
    ExtensionTagExtractor,
    extract_version,
    parse_version,
)
from versionpb.walker import CONTINUE, Continue, Stop, VersionAnnotation, walk_instance, walk_type

__all__ = [
    "CONTINUE",
    "DEFAULT_TAG_NAMES",
    "BlobTagExtractor",
    "Continue",
    "ElementVersionError",
    "EnumResolutionError",
    "ExtensionTagExtractor",
    "ScanResult",
    "SchemaRegistry",
    "Stop",
    "TagFormatError",
    "VersionAnnotation",
    "VersionError",
    "VersionFormatError",
    "VersionInvariantError",
    "annotations_of",
    "annotations_of_registry",
    "extract_version",
    "floor_of",
    "minimal_version_of",
    "parse_version",
    "walk_instance",
    "walk_type",
]
