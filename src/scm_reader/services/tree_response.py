"""Tree materialization — turn a tarball stream into individually addressable files.

The archive stream is consumed exactly once: it is spooled to a temporary
file, unpacked sequentially, and the kept entries are buffered so that the
resulting :class:`TarArchiveResponse` can be asked for its files, an archive
or a directory as many times as needed.
"""

from __future__ import annotations

import asyncio
import io
import logging
import tarfile
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from typing import IO

from scm_reader.domain.entities import ContentAccessor, PathFilter, ResponseFile
from scm_reader.domain.exceptions import ArchiveTooLargeError, ReadError

logger = logging.getLogger(__name__)

_SPOOL_IN_MEMORY_BYTES = 8 * 1024 * 1024


def _buffered(data: bytes) -> ContentAccessor:
    async def content() -> bytes:
        return data

    return content


def _is_safe_path(path: str) -> bool:
    return not path.startswith("/") and ".." not in path.split("/")


class TarArchiveResponse:
    """Read-tree response backed by entries buffered from a tarball."""

    def __init__(self, etag: str, entries: dict[str, bytes]) -> None:
        self.etag = etag
        self._entries = entries

    async def files(self) -> list[ResponseFile]:
        return [
            ResponseFile(path=path, content=_buffered(data))
            for path, data in self._entries.items()
        ]

    async def archive(self) -> bytes:
        """Re-pack the kept files into a gzip tarball."""
        return await asyncio.to_thread(self._pack)

    def _pack(self) -> bytes:
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for path, data in self._entries.items():
                info = tarfile.TarInfo(path)
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    async def dir(self, target_dir: str | Path | None = None) -> Path:
        """Write the files below *target_dir*, or a fresh temporary directory."""
        return await asyncio.to_thread(self._write_dir, target_dir)

    def _write_dir(self, target_dir: str | Path | None) -> Path:
        if target_dir is None:
            root = Path(tempfile.mkdtemp(prefix="scm-reader-"))
        else:
            root = Path(target_dir)
            root.mkdir(parents=True, exist_ok=True)

        for path, data in self._entries.items():
            destination = root / path
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)

        logger.debug("Wrote %d files for %s to %s", len(self._entries), self.etag, root)
        return root


class ReadTreeResponseFactory:
    """Builds read-tree responses, bounding the extracted size of each one."""

    def __init__(self, max_size_bytes: int) -> None:
        self._max_size_bytes = max_size_bytes

    async def from_tar_archive(
        self,
        stream: AsyncIterator[bytes],
        *,
        etag: str,
        subpath: str = "",
        filter: PathFilter | None = None,  # noqa: A002
    ) -> TarArchiveResponse:
        """Consume *stream* and return the files under *subpath*.

        The archive's top-level directory (``owner-repo-sha/`` for GitHub
        tarballs) is stripped.  *filter* sees paths relative to *subpath*.
        The caller must not touch *stream* afterwards.  Both the compressed
        download and the extracted files are bounded by ``max_size_bytes``.
        """
        with tempfile.SpooledTemporaryFile(max_size=_SPOOL_IN_MEMORY_BYTES) as spool:
            received = 0
            async for chunk in stream:
                received += len(chunk)
                if received > self._max_size_bytes:
                    raise ArchiveTooLargeError(self._max_size_bytes)
                spool.write(chunk)
            spool.seek(0)
            entries = await asyncio.to_thread(self._extract, spool, subpath, filter)

        logger.debug("Extracted %d files at %s (subpath=%r)", len(entries), etag, subpath)
        return TarArchiveResponse(etag, entries)

    def _extract(
        self,
        fileobj: IO[bytes],
        subpath: str,
        path_filter: PathFilter | None,
    ) -> dict[str, bytes]:
        prefix = subpath.strip("/")
        prefix = f"{prefix}/" if prefix else ""

        entries: dict[str, bytes] = {}
        total = 0
        try:
            with tarfile.open(fileobj=fileobj, mode="r|*") as tar:
                for member in tar:
                    if not member.isfile():
                        continue

                    _, _, path = member.name.partition("/")
                    if not path.startswith(prefix) or not _is_safe_path(path):
                        continue
                    relative = path[len(prefix):]
                    if not relative:
                        continue
                    if path_filter is not None and not path_filter(relative):
                        continue

                    total += member.size
                    if total > self._max_size_bytes:
                        raise ArchiveTooLargeError(self._max_size_bytes)

                    extracted = tar.extractfile(member)
                    entries[relative] = extracted.read() if extracted else b""
        except tarfile.TarError as exc:
            raise ReadError(f"Failed to unpack archive: {exc}") from exc

        return entries
