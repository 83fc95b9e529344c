"""Public entry points: floor version of a value, annotations of a schema.

The two families deliberately fail differently:

- `minimal_version_of` assumes the schema behind a live value was validated
  long before; any traversal error raises `VersionInvariantError` and no
  partial floor is ever returned.
- `annotations_of` and `annotations_of_registry` are inspection tools; they
  return a `ScanResult` holding whatever was collected plus the error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Iterable

from google.protobuf import descriptor_pb2
from google.protobuf.descriptor import FileDescriptor
from google.protobuf.message import Message
from packaging.version import Version

from versionpb.errors import VersionInvariantError
from versionpb.tags import TagExtractor, max_version
from versionpb.walker import (
    CONTINUE,
    Stop,
    VersionAnnotation,
    VisitResult,
    walk_instance,
    walk_type,
)

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Annotations gathered by a schema scan and the error that ended it."""

    annotations: list[VersionAnnotation] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def floor(self) -> Version | None:
        return floor_of(self.annotations)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class _MaxVersionFold:
    """Running maximum over visited versions, owned by one call."""

    __slots__ = ("floor",)

    def __init__(self) -> None:
        self.floor: Version | None = None

    def __call__(self, name: str, version: Version | None) -> VisitResult:
        self.floor = max_version(self.floor, version)
        return CONTINUE


class _AnnotationCollector:
    __slots__ = ("annotations",)

    def __init__(self) -> None:
        self.annotations: list[VersionAnnotation] = []

    def __call__(self, name: str, version: Version | None) -> VisitResult:
        self.annotations.append(VersionAnnotation(name, version))
        return CONTINUE


def floor_of(annotations: Iterable[VersionAnnotation]) -> Version | None:
    """Highest version among annotations; None if none carries a version."""
    return reduce(max_version, (annotation.version for annotation in annotations), None)


def _declared_types(file: FileDescriptor) -> list:
    # The by-name maps carry no ordering guarantee; the file proto does.
    proto = descriptor_pb2.FileDescriptorProto.FromString(file.serialized_pb)
    return [
        *(file.message_types_by_name[message.name] for message in proto.message_type),
        *(file.enum_types_by_name[enum.name] for enum in proto.enum_type),
    ]


def minimal_version_of(
    message: Message, *, extractor: TagExtractor | None = None
) -> Version | None:
    """Lowest protocol version able to interpret every populated element.

    Raises:
        VersionInvariantError: A tag along the populated path is malformed or
            an enum number cannot be resolved.
    """
    fold = _MaxVersionFold()
    result = walk_instance(message, fold, extractor=extractor)
    if isinstance(result, Stop):
        raise VersionInvariantError(result.error) from result.error
    return fold.floor


def annotations_of(
    file: FileDescriptor, *, extractor: TagExtractor | None = None
) -> ScanResult:
    """Annotations of every element declared in one schema file.

    Top-level messages are walked first, then top-level enums, both in
    declaration order.
    """
    collector = _AnnotationCollector()
    for descriptor in _declared_types(file):
        result = walk_type(descriptor, collector, extractor=extractor)
        if isinstance(result, Stop):
            return ScanResult(collector.annotations, result.error)
    return ScanResult(collector.annotations)


def annotations_of_registry(
    registry: Iterable[FileDescriptor],
    excluded_packages: Iterable[str] = (),
    *,
    extractor: TagExtractor | None = None,
) -> ScanResult:
    """Annotations of every file in a registry, skipping excluded packages.

    Package names are matched exactly. The scan stops at the first failing
    file; the result then holds the annotations of the files completed before
    it, and no later file is read.
    """
    excluded = frozenset(excluded_packages)
    annotations: list[VersionAnnotation] = []
    for file in registry:
        if file.package in excluded:
            _logger.debug("skip %s (package %s excluded)", file.name, file.package)
            continue
        scan = annotations_of(file, extractor=extractor)
        if scan.error is not None:
            _logger.warning("scan aborted in %s: %s", file.name, scan.error)
            return ScanResult(annotations, scan.error)
        annotations.extend(scan.annotations)
    return ScanResult(annotations)


__all__ = [
    "ScanResult",
    "annotations_of",
    "annotations_of_registry",
    "floor_of",
    "minimal_version_of",
]
