"""Schema registry: the protobuf files available for a cross-file scan.

A registry is an insertion-ordered view over `FileDescriptor`s that live in a
`DescriptorPool`. Files are typically loaded from a serialized
`FileDescriptorSet`, as produced by::

    protoc --include_imports --descriptor_set_out=schema.pb proto/*.proto
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.descriptor import FileDescriptor
from google.protobuf.message import Message

_logger = logging.getLogger(__name__)


class SchemaRegistry:
    """In-memory registry of protobuf schema files."""

    def __init__(self, pool: descriptor_pool.DescriptorPool | None = None) -> None:
        self._pool = pool or descriptor_pool.Default()
        self._files: dict[str, FileDescriptor] = {}

    @classmethod
    def from_descriptor_set(
        cls,
        data: bytes,
        *,
        pool: descriptor_pool.DescriptorPool | None = None,
    ) -> SchemaRegistry:
        """Build a registry from a serialized `FileDescriptorSet`.

        Files already known to the pool are reused rather than added again;
        the set must list dependencies before dependents.
        """
        registry = cls(pool)
        file_set = descriptor_pb2.FileDescriptorSet.FromString(data)
        for file_proto in file_set.file:
            registry.register(registry._ensure_file(file_proto))
        return registry

    @classmethod
    def from_file(
        cls,
        path: Path,
        *,
        pool: descriptor_pool.DescriptorPool | None = None,
    ) -> SchemaRegistry:
        return cls.from_descriptor_set(Path(path).read_bytes(), pool=pool)

    @property
    def pool(self) -> descriptor_pool.DescriptorPool:
        return self._pool

    def _ensure_file(self, file_proto: descriptor_pb2.FileDescriptorProto) -> FileDescriptor:
        try:
            return self._pool.FindFileByName(file_proto.name)
        except KeyError:
            pass
        _logger.debug("adding %s (package %r) to pool", file_proto.name, file_proto.package)
        self._pool.AddSerializedFile(file_proto.SerializeToString())
        return self._pool.FindFileByName(file_proto.name)

    def register(self, file: FileDescriptor) -> None:
        self._files[file.name] = file

    def get(self, name: str) -> FileDescriptor | None:
        return self._files.get(name)

    def list_all(self) -> dict[str, FileDescriptor]:
        return dict(self._files)

    def message_class(self, full_name: str) -> type[Message]:
        """Concrete message class for a fully-qualified message type name.

        Raises:
            KeyError: If the pool does not define `full_name`.
        """
        return message_factory.GetMessageClass(self._pool.FindMessageTypeByName(full_name))

    def __iter__(self) -> Iterator[FileDescriptor]:
        return iter(list(self._files.values()))

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, name: object) -> bool:
        return name in self._files


__all__ = ["SchemaRegistry"]
