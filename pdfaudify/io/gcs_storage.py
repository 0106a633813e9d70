"""Google Cloud Storage gateway.

Responsibilities:
- Implement the storage gateway on one GCS bucket.
- Run blocking client calls in worker threads so the event loop keeps scheduling.
- Map client failures to `TransientProviderError` for the retry wrapper.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Sequence, TypeVar

from google.api_core import exceptions as google_exceptions
from google.cloud import storage

from ..errors import TransientProviderError
from .storage import WriteHandle, require_combine_arity

_Result = TypeVar("_Result")

# Object composition accepts at most 32 source objects per request.
GCS_COMPOSE_LIMIT = 32


class _BlobWriteHandle:
    """Write handle over a GCS blob writer."""

    def __init__(self, gateway: "GcsStorageGateway", path: str, writer) -> None:
        """Wrap an open blob writer; uploads share the gateway's failure mapping."""

        self._gateway = gateway
        self._path = path
        self._writer = writer

    async def write(self, data: bytes) -> None:
        """Append bytes to the pending upload."""

        await self._gateway._call("write", self._path, self._writer.write, data)


class GcsStorageGateway:
    """Storage gateway backed by a single Google Cloud Storage bucket."""

    def __init__(
        self,
        bucket_name: str,
        *,
        client: storage.Client | None = None,
        list_limit: int = 1000,
        combine_limit: int = GCS_COMPOSE_LIMIT,
    ) -> None:
        """Initialize the bucket handle; the client defaults to ambient credentials."""

        self.bucket_name = bucket_name
        self.list_limit = list_limit
        self.combine_limit = min(combine_limit, GCS_COMPOSE_LIMIT)
        self._client = client if client is not None else storage.Client()
        self._bucket = self._client.bucket(bucket_name)

    async def _call(
        self,
        operation: str,
        target: str,
        func: Callable[..., _Result],
        *args: object,
        **kwargs: object,
    ) -> _Result:
        """Run one blocking client call in a thread and normalize its failures."""

        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (google_exceptions.GoogleAPIError, OSError) as exc:
            raise TransientProviderError(
                f"GCS {operation} failed for `{target}`: {exc}",
                provider="gcs",
                operation=operation,
            ) from exc

    async def list_files(self, prefix: str) -> list[str]:
        """Return object names under `prefix`, at most `list_limit` of them."""

        def _list() -> list[str]:
            blobs = self._client.list_blobs(
                self.bucket_name, prefix=prefix, max_results=self.list_limit
            )
            return [blob.name for blob in blobs]

        return await self._call("list", prefix, _list)

    async def read_bytes(self, path: str) -> bytes:
        """Download one object."""

        blob = self._bucket.blob(path)
        return await self._call("read", path, blob.download_as_bytes)

    async def read_text(self, path: str) -> str:
        """Download one object as UTF-8 text."""

        return (await self.read_bytes(path)).decode("utf-8")

    @asynccontextmanager
    async def open_write(self, path: str, content_type: str) -> AsyncIterator[WriteHandle]:
        """Stream bytes into a blob; the upload is finalized only on normal exit."""

        blob = self._bucket.blob(path)
        writer = await self._call("write", path, blob.open, "wb", content_type=content_type)
        yield _BlobWriteHandle(self, path, writer)
        await self._call("write", path, writer.close)

    async def copy(self, source_path: str, dest_path: str) -> None:
        """Copy one object within the bucket."""

        source = self._bucket.blob(source_path)
        await self._call("copy", source_path, self._bucket.copy_blob, source, self._bucket, dest_path)

    async def combine(
        self,
        source_paths: Sequence[str],
        dest_path: str,
        content_type: str | None = None,
    ) -> None:
        """Compose source objects in order into `dest_path`."""

        require_combine_arity(source_paths, self.combine_limit)
        destination = self._bucket.blob(dest_path)
        if content_type is not None:
            destination.content_type = content_type
        sources = [self._bucket.blob(path) for path in source_paths]
        await self._call("combine", dest_path, destination.compose, sources)

    def uri_for(self, path: str) -> str:
        """Return the `gs://` URI of an object path."""

        return f"gs://{self.bucket_name}/{path.lstrip('/')}"
