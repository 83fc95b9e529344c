"""Shared primitives for versionpb: configuration helpers."""

from .config import VersionpbSettings

__all__ = ["VersionpbSettings"]
