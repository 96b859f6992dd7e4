"""URL reader registry — dispatch a URL to the reader that owns its host."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from scm_reader.domain.entities import ReadTreeOptions, SearchOptions, SearchResponse
from scm_reader.domain.exceptions import ConfigurationError, UnsupportedUrlError
from scm_reader.domain.ports.url_reader import ReadTreeResponse, UrlReader
from scm_reader.domain.value_objects import url_host

logger = logging.getLogger(__name__)

UrlPredicate = Callable[[str], bool]


def host_predicate(host: str) -> UrlPredicate:
    """Return a predicate that is *True* for URLs whose host equals *host*.

    Comparison ignores case and any userinfo; a port must match exactly.
    """
    host = host.lower()

    def _matches(url: str) -> bool:
        return url_host(url) == host

    return _matches


@dataclass(frozen=True, slots=True)
class ReaderPredicate:
    """A reader plus the predicate that decides which URLs it serves.

    ``host`` is set for host-bound readers and used to reject duplicates.
    """

    reader: UrlReader
    predicate: UrlPredicate
    host: str | None = None

    @classmethod
    def for_host(cls, reader: UrlReader, host: str) -> ReaderPredicate:
        return cls(reader=reader, predicate=host_predicate(host), host=host.lower())


class UrlReaderRegistry:
    """Holds one reader per integration and dispatches URLs to them.

    Entries are kept in configuration order and the first matching predicate
    wins.  Two entries for the same host are rejected at construction.
    """

    def __init__(self, entries: Sequence[ReaderPredicate]) -> None:
        seen: set[str] = set()
        for entry in entries:
            if entry.host is None:
                continue
            if entry.host in seen:
                raise ConfigurationError(
                    f"Duplicate integration for host '{entry.host}'"
                )
            seen.add(entry.host)
        self._entries = tuple(entries)

    def resolve(self, url: str) -> UrlReader:
        for entry in self._entries:
            if entry.predicate(url):
                return entry.reader
        raise UnsupportedUrlError(
            f"Reading from '{url}' is not supported, no integration matches its host"
        )

    async def read(self, url: str) -> bytes:
        return await self.resolve(url).read(url)

    async def read_tree(
        self, url: str, options: ReadTreeOptions | None = None
    ) -> ReadTreeResponse:
        return await self.resolve(url).read_tree(url, options)

    async def search(
        self, url: str, options: SearchOptions | None = None
    ) -> SearchResponse:
        return await self.resolve(url).search(url, options)

    def __str__(self) -> str:
        return f"predicateMux{{readers=[{', '.join(str(e.reader) for e in self._entries)}]}}"
