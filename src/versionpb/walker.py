"""Schema and instance traversal.

Both walkers report every element they touch to a visitor as a
``(full_name, version)`` pair. The visitor answers with a `VisitResult`:
`CONTINUE` to keep walking, or `Stop(error)` to abort. Tag extraction failures
are turned into `Stop` as well, so a walk always ends in exactly one of the
two cases and never confuses "no annotation" with "aborted".

- `walk_type` is declaration-driven: every declared field, nested enum and
  nested message of a type, whether or not any value uses it.
- `walk_instance` is data-driven: only the fields populated on a concrete
  message, following sub-messages and resolving enum numbers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, NamedTuple

from google.protobuf.descriptor import Descriptor, EnumDescriptor, FieldDescriptor
from google.protobuf.message import Message
from packaging.version import Version

from versionpb.errors import ElementVersionError, EnumResolutionError, VersionError
from versionpb.tags import BlobTagExtractor, TagExtractor, full_name_of

_logger = logging.getLogger(__name__)


class VersionAnnotation(NamedTuple):
    """Version declared by one schema element (None when untagged)."""

    name: str
    version: Version | None


@dataclass(frozen=True, slots=True)
class Continue:
    """Keep walking."""


@dataclass(frozen=True, slots=True)
class Stop:
    """Abort the walk, carrying the error that triggered it."""

    error: Exception


VisitResult = Continue | Stop
Visitor = Callable[[str, Version | None], VisitResult]

CONTINUE = Continue()


def visit_element(descriptor, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    """Extract the tag of one element and hand it to the visitor."""
    name = full_name_of(descriptor)
    try:
        version = extractor.extract(descriptor)
    except VersionError as exc:
        return Stop(ElementVersionError(name, exc))
    _logger.debug("visit %s version=%s", name, version)
    return visit(name, version)


def _visit_all(descriptors: Iterable, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    for descriptor in descriptors:
        result = visit_element(descriptor, visit, extractor)
        if isinstance(result, Stop):
            return result
    return CONTINUE


# =============================================================================
# Schema walker
# =============================================================================


def walk_type(
    descriptor: Descriptor | EnumDescriptor,
    visit: Visitor,
    *,
    extractor: TagExtractor | None = None,
) -> VisitResult:
    """Walk a message or enum type as declared.

    Message order: the message, its fields, its nested enums (each followed by
    its values), then its nested messages recursively. Enum order: the enum,
    then its values. All in declaration order.
    """
    extractor = extractor or BlobTagExtractor()
    if isinstance(descriptor, EnumDescriptor):
        return _walk_enum_type(descriptor, visit, extractor)
    return _walk_message_type(descriptor, visit, extractor)


def _walk_enum_type(enum: EnumDescriptor, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    result = visit_element(enum, visit, extractor)
    if isinstance(result, Stop):
        return result
    return _visit_all(enum.values, visit, extractor)


def _walk_message_type(message: Descriptor, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    result = visit_element(message, visit, extractor)
    if isinstance(result, Stop):
        return result
    result = _visit_all(message.fields, visit, extractor)
    if isinstance(result, Stop):
        return result
    for enum in message.enum_types:
        result = _walk_enum_type(enum, visit, extractor)
        if isinstance(result, Stop):
            return result
    for nested in message.nested_types:
        result = _walk_message_type(nested, visit, extractor)
        if isinstance(result, Stop):
            return result
    return CONTINUE


# =============================================================================
# Instance walker
# =============================================================================


def walk_instance(
    message: Message,
    visit: Visitor,
    *,
    extractor: TagExtractor | None = None,
) -> VisitResult:
    """Walk the elements reachable from a populated message.

    Unset fields (including implicit-presence fields at their default) are not
    visited. Populated fields are visited in declaration order, extensions
    after regular fields.
    """
    return _walk_message(message, visit, extractor or BlobTagExtractor())


def _declaration_key(item: tuple[FieldDescriptor, object]) -> tuple[bool, int]:
    field = item[0]
    # ListFields() orders by field number; extensions have no declaration index.
    if field.is_extension:
        return True, field.number
    return False, field.index


def _populated_fields(message: Message) -> list[tuple[FieldDescriptor, object]]:
    return sorted(message.ListFields(), key=_declaration_key)


def _walk_message(message: Message, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    result = visit_element(message.DESCRIPTOR, visit, extractor)
    if isinstance(result, Stop):
        return result
    for field, value in _populated_fields(message):
        result = visit_element(field, visit, extractor)
        if isinstance(result, Stop):
            return result
        result = _walk_field_value(field, value, visit, extractor)
        if isinstance(result, Stop):
            return result
    return CONTINUE


def _walk_field_value(field: FieldDescriptor, value, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    if field.message_type is not None and field.message_type.GetOptions().map_entry:
        value_field = field.message_type.fields_by_name["value"]
        return _walk_values(value_field, [value[key] for key in sorted(value)], visit, extractor)
    if field.is_repeated:
        return _walk_values(field, list(value), visit, extractor)
    return _walk_values(field, [value], visit, extractor)


def _walk_values(field: FieldDescriptor, values: list, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    for value in values:
        if field.message_type is not None:
            result = _walk_message(value, visit, extractor)
        elif field.enum_type is not None:
            result = _walk_enum_number(field.enum_type, value, visit, extractor)
        else:
            continue
        if isinstance(result, Stop):
            return result
    return CONTINUE


def _walk_enum_number(enum: EnumDescriptor, number: int, visit: Visitor, extractor: TagExtractor) -> VisitResult:
    # Numbers are resolved by position: values must be declared 0..n-1 in order.
    result = visit_element(enum, visit, extractor)
    if isinstance(result, Stop):
        return result
    values = enum.values
    if not 0 <= number < len(values):
        error = EnumResolutionError(enum.full_name, number, len(values))
        return Stop(ElementVersionError(enum.full_name, error))
    return visit_element(values[number], visit, extractor)


__all__ = [
    "CONTINUE",
    "Continue",
    "Stop",
    "VersionAnnotation",
    "VisitResult",
    "Visitor",
    "visit_element",
    "walk_instance",
    "walk_type",
]
