"""Version tag extraction from protobuf element options.

A schema element declares the protocol version it was introduced in through a
custom option, e.g.::

    message Probe {
      option (version_msg) = "1.2";
      string id = 1 [(version_field) = "1.3"];
    }

Rendered through protobuf text format the options of `Probe` read
`[version_msg]: "1.2"`. `extract_version` scans such a rendering for the known
markers. The markers are tried in a fixed priority order and the first one
present anywhere in the blob wins, even if it belongs to another element
kind. Existing schemas depend on that precedence, so it is kept as is.

`ExtensionTagExtractor` is the structured alternative: it reads the option
extension matching the element kind directly from the options message.
"""

from __future__ import annotations

import re
from typing import Protocol, Sequence

from google.protobuf import descriptor_pool, text_encoding, text_format
from google.protobuf.descriptor import (
    Descriptor,
    EnumDescriptor,
    EnumValueDescriptor,
    FieldDescriptor,
)
from packaging.version import Version

from versionpb.errors import TagFormatError, VersionFormatError

# Ordered by priority: message, field, enum, enum value.
DEFAULT_TAG_NAMES: tuple[str, ...] = (
    "version_msg",
    "version_field",
    "version_enum",
    "version_enum_value",
)

_VERSION_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)(?:\.([0-9]+))?")
_QUOTED_PATTERN = re.compile(r'\s*"((?:[^"\\\n]|\\.)*)"')


def parse_version(text: str) -> Version:
    """Parse a MAJOR.MINOR[.PATCH] string into a three-component version.

    A missing PATCH component is filled with zero.

    Raises:
        VersionFormatError: If `text` is not two or three dot-separated
            non-negative integers.

    Examples:
        >>> str(parse_version("1.2"))
        '1.2.0'
        >>> str(parse_version("1.2.3"))
        '1.2.3'
    """
    match = _VERSION_PATTERN.fullmatch(text)
    if match is None:
        raise VersionFormatError(text)
    major, minor, patch = match.groups(default="0")
    return Version(f"{int(major)}.{int(minor)}.{int(patch)}")


def max_version(current: Version | None, candidate: Version | None) -> Version | None:
    """Return the larger of two optional versions; `None` never wins."""
    if current is not None and (candidate is None or candidate < current):
        return current
    return candidate


def extract_version(
    blob: str, tag_names: Sequence[str] = DEFAULT_TAG_NAMES
) -> Version | None:
    """Extract the version carried by a rendered options blob.

    Args:
        blob: Text-format rendering of one element's options.
        tag_names: Marker names in priority order.

    Returns:
        The parsed version, or None when no marker occurs in the blob.

    Raises:
        TagFormatError: The marker is not followed by a quoted string.
        VersionFormatError: The quoted text is not a valid version.
    """
    for name in tag_names:
        marker = f"[{name}]:"
        index = blob.find(marker)
        if index != -1:
            break
    else:
        return None

    end = index + len(marker)
    match = _QUOTED_PATTERN.match(blob, end)
    if match is None:
        raise TagFormatError(marker, blob[end:])
    try:
        text = text_encoding.CUnescape(match.group(1)).decode("utf-8")
    except ValueError as exc:
        raise TagFormatError(marker, blob[end:]) from exc
    return parse_version(text)


def render_options(descriptor) -> str:
    """Render the options of a descriptor as protobuf text format."""
    return text_format.MessageToString(descriptor.GetOptions())


def full_name_of(descriptor) -> str:
    """Fully-qualified name of a schema element.

    Enum values live in the scope enclosing their enum type, so `RED` declared
    in `pkg.Color` is named `pkg.RED`.
    """
    if isinstance(descriptor, EnumValueDescriptor):
        scope = descriptor.type.full_name.rpartition(".")[0]
        return f"{scope}.{descriptor.name}" if scope else descriptor.name
    return descriptor.full_name


class TagExtractor(Protocol):
    def extract(self, descriptor) -> Version | None: ...


class BlobTagExtractor:
    """Marker scan over the rendered options (first marker wins)."""

    def __init__(self, tag_names: Sequence[str] = DEFAULT_TAG_NAMES) -> None:
        self._tag_names = tuple(tag_names)

    @property
    def tag_names(self) -> tuple[str, ...]:
        return self._tag_names

    def extract(self, descriptor) -> Version | None:
        return extract_version(render_options(descriptor), self._tag_names)


class ExtensionTagExtractor:
    """Reads the option extension matching the element kind.

    `tag_names` holds the fully-qualified extension names for message, field,
    enum and enum value options, in that order. Extensions the pool does not
    know, or that extend a different options message, count as "no tag".
    """

    def __init__(
        self,
        tag_names: Sequence[str] = DEFAULT_TAG_NAMES,
        pool: descriptor_pool.DescriptorPool | None = None,
    ) -> None:
        if len(tag_names) != 4:
            raise ValueError(
                f"ExtensionTagExtractor needs one tag name per element kind, got {len(tag_names)}"
            )
        self._tag_names = tuple(tag_names)
        self._pool = pool or descriptor_pool.Default()

    def _tag_name_for(self, descriptor) -> str:
        if isinstance(descriptor, Descriptor):
            return self._tag_names[0]
        if isinstance(descriptor, FieldDescriptor):
            return self._tag_names[1]
        if isinstance(descriptor, EnumDescriptor):
            return self._tag_names[2]
        if isinstance(descriptor, EnumValueDescriptor):
            return self._tag_names[3]
        raise TypeError(f"Unsupported schema element {type(descriptor).__name__}")

    def extract(self, descriptor) -> Version | None:
        try:
            extension = self._pool.FindExtensionByName(self._tag_name_for(descriptor))
        except KeyError:
            return None
        options = descriptor.GetOptions()
        if extension.containing_type.full_name != options.DESCRIPTOR.full_name:
            return None
        if not options.HasExtension(extension):
            return None
        return parse_version(str(options.Extensions[extension]))


__all__ = [
    "DEFAULT_TAG_NAMES",
    "TagExtractor",
    "BlobTagExtractor",
    "ExtensionTagExtractor",
    "extract_version",
    "full_name_of",
    "max_version",
    "parse_version",
    "render_options",
]
