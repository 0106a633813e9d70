"""Object storage abstraction.

Responsibilities:
- Define the async storage gateway consumed by pipeline stages.
- Provide a deterministic filesystem-backed gateway for local runs and tests.
- Publish written objects only when their write handle completes successfully.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
import os
from pathlib import Path
from typing import Protocol, Sequence

from ..errors import InvalidInputError, TransientProviderError

_PARTIAL_SUFFIX = ".part"


class WriteHandle(Protocol):
    """Sink for bytes of one object being written."""

    async def write(self, data: bytes) -> None:
        """Append bytes to the pending object."""


class StorageGateway(Protocol):
    """Protocol for object storage used by pipeline stages."""

    combine_limit: int

    async def list_files(self, prefix: str) -> list[str]:
        """Return object names starting with `prefix`, bounded by the listing limit."""

    async def read_bytes(self, path: str) -> bytes:
        """Return the full content of one object."""

    async def read_text(self, path: str) -> str:
        """Return the full content of one object decoded as UTF-8."""

    def open_write(
        self, path: str, content_type: str
    ) -> AbstractAsyncContextManager[WriteHandle]:
        """Acquire a write handle finalized on normal exit and discarded on failure."""

    async def copy(self, source_path: str, dest_path: str) -> None:
        """Copy one object to a new name."""

    async def combine(
        self,
        source_paths: Sequence[str],
        dest_path: str,
        content_type: str | None = None,
    ) -> None:
        """Concatenate up to `combine_limit` objects, in order, into `dest_path`."""

    def uri_for(self, path: str) -> str:
        """Return a provider-facing URI for an object path."""


def require_combine_arity(source_paths: Sequence[str], combine_limit: int) -> None:
    """Reject empty or over-limit combine requests before touching storage."""

    if not source_paths:
        raise InvalidInputError("Combine requires at least one source object.")
    if len(source_paths) > combine_limit:
        raise InvalidInputError(
            f"Combine accepts at most {combine_limit} sources, got {len(source_paths)}."
        )


class _LocalWriteHandle:
    """Buffered file handle writing into a partial sibling file."""

    def __init__(self, file_obj) -> None:
        """Wrap an open binary file object."""

        self._file = file_obj

    async def write(self, data: bytes) -> None:
        """Append bytes to the partial file without blocking the event loop."""

        await asyncio.to_thread(self._file.write, data)


class LocalArtifactStore:
    """Filesystem-backed storage gateway rooted at one directory."""

    def __init__(
        self,
        root: Path,
        *,
        list_limit: int = 1000,
        combine_limit: int = 32,
    ) -> None:
        """Initialize the store with a root directory and provider-like limits."""

        self.root = root
        self.list_limit = list_limit
        self.combine_limit = combine_limit

    def _resolve(self, path: str) -> Path:
        """Map an object path onto the filesystem below the store root."""

        relative = path.lstrip("/")
        if not relative:
            raise InvalidInputError("Object path must not be empty.")
        return self.root / relative

    async def list_files(self, prefix: str) -> list[str]:
        """Return sorted object names starting with `prefix`."""

        return await asyncio.to_thread(self._list_files_sync, prefix)

    def _list_files_sync(self, prefix: str) -> list[str]:
        """Walk the root and collect matching object names."""

        if not self.root.exists():
            return []
        names: list[str] = []
        for file_path in self.root.rglob("*"):
            if not file_path.is_file() or file_path.name.endswith(_PARTIAL_SUFFIX):
                continue
            name = file_path.relative_to(self.root).as_posix()
            if name.startswith(prefix.lstrip("/")):
                names.append(name)
        names.sort()
        return names[: self.list_limit]

    async def read_bytes(self, path: str) -> bytes:
        """Return object bytes."""

        try:
            return await asyncio.to_thread(self._resolve(path).read_bytes)
        except OSError as exc:
            raise TransientProviderError(
                f"Failed to read `{path}`: {exc}", provider="local", operation="read"
            ) from exc

    async def read_text(self, path: str) -> str:
        """Return object text decoded as UTF-8."""

        return (await self.read_bytes(path)).decode("utf-8")

    @asynccontextmanager
    async def open_write(self, path: str, content_type: str) -> AsyncIterator[WriteHandle]:
        """Write into a partial file and atomically publish it on success.

        The content type is accepted for interface parity; the filesystem does not
        store it.
        """

        _ = content_type
        destination = self._resolve(path)
        partial = destination.with_name(destination.name + _PARTIAL_SUFFIX)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            file_obj = open(partial, "wb")
        except OSError as exc:
            raise TransientProviderError(
                f"Failed to open `{path}` for writing: {exc}",
                provider="local",
                operation="write",
            ) from exc
        published = False
        try:
            with file_obj:
                yield _LocalWriteHandle(file_obj)
            os.replace(partial, destination)
            published = True
        except OSError as exc:
            raise TransientProviderError(
                f"Failed to write `{path}`: {exc}", provider="local", operation="write"
            ) from exc
        finally:
            if not published:
                partial.unlink(missing_ok=True)

    async def copy(self, source_path: str, dest_path: str) -> None:
        """Copy one object, tolerating identical source and destination."""

        data = await self.read_bytes(source_path)
        async with self.open_write(dest_path, "application/octet-stream") as handle:
            await handle.write(data)

    async def combine(
        self,
        source_paths: Sequence[str],
        dest_path: str,
        content_type: str | None = None,
    ) -> None:
        """Concatenate source objects byte-for-byte into the destination."""

        require_combine_arity(source_paths, self.combine_limit)
        payloads = [await self.read_bytes(source) for source in source_paths]
        async with self.open_write(dest_path, content_type or "application/octet-stream") as handle:
            for payload in payloads:
                await handle.write(payload)

    def uri_for(self, path: str) -> str:
        """Return a `file://` URI for an object path."""

        return self._resolve(path).resolve().as_uri()

    def exists(self, path: str) -> bool:
        """Return whether the given object exists."""

        return self._resolve(path).is_file()
