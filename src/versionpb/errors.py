"""Exception hierarchy for version tag extraction and traversal.

Parse and resolution errors describe *what* went wrong. Walkers wrap them in
`ElementVersionError` so callers also learn *where* (the fully-qualified name
of the element being visited).
"""

from __future__ import annotations


class VersionError(Exception):
    """Base class for every error raised by versionpb."""


class TagFormatError(VersionError, ValueError):
    """Text following a recognized tag marker is not a quoted string."""

    def __init__(self, marker: str, text: str) -> None:
        super().__init__(f"expected quoted version after {marker}, got {text[:32]!r}")
        self.marker = marker
        self.text = text


class VersionFormatError(VersionError, ValueError):
    """A tag value is not a MAJOR.MINOR[.PATCH] version."""

    def __init__(self, text: str) -> None:
        super().__init__(f"invalid semantic version {text!r}")
        self.text = text


class EnumResolutionError(VersionError, LookupError):
    """An enum number has no declared value at that position."""

    def __init__(self, enum_name: str, number: int, declared: int) -> None:
        super().__init__(
            f"could not resolve enum number [{number}] of {enum_name} "
            f"({declared} declared values)"
        )
        self.enum_name = enum_name
        self.number = number
        self.declared = declared


class ElementVersionError(VersionError):
    """Element-scoped wrapper around a tag or resolution failure."""

    def __init__(self, full_name: str, cause: Exception) -> None:
        super().__init__(f"{full_name}: {cause}")
        self.full_name = full_name
        self.cause = cause
        self.__cause__ = cause


class VersionInvariantError(RuntimeError):
    """A populated value could not be versioned.

    Raised by `minimal_version_of`, which assumes an already validated schema
    and therefore never returns a partial floor.
    """

    def __init__(self, error: Exception) -> None:
        super().__init__(f"version lookup aborted: {error}")
        self.error = error


__all__ = [
    "VersionError",
    "TagFormatError",
    "VersionFormatError",
    "EnumResolutionError",
    "ElementVersionError",
    "VersionInvariantError",
]
