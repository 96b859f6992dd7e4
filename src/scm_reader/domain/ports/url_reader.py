"""Port: URL reader — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from scm_reader.domain.entities import (
    ReadTreeOptions,
    ResponseFile,
    SearchOptions,
    SearchResponse,
)


class ReadTreeResponse(Protocol):
    """A materialized snapshot of a directory subtree at one revision."""

    @property
    def etag(self) -> str:
        """The revision the snapshot corresponds to."""
        ...

    async def files(self) -> list[ResponseFile]:
        """Return every file of the snapshot; may be called repeatedly."""
        ...

    async def archive(self) -> bytes:
        """Return the snapshot packed as a gzip tarball."""
        ...

    async def dir(self, target_dir: str | Path | None = None) -> Path:
        """Write the snapshot to disk and return the directory."""
        ...


class UrlReader(Protocol):
    """Abstract contract for reading remote source-control content."""

    async def read(self, url: str) -> bytes:
        """Return the raw bytes of a single file."""
        ...

    async def read_tree(
        self, url: str, options: ReadTreeOptions | None = None
    ) -> ReadTreeResponse:
        """Return a snapshot of the directory tree the URL points at."""
        ...

    async def search(
        self, url: str, options: SearchOptions | None = None
    ) -> SearchResponse:
        """Return the files matching the glob in the URL's path."""
        ...
