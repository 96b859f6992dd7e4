"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

PathFilter = Callable[[str], bool]
ContentAccessor = Callable[[], Awaitable[bytes]]


@dataclass(frozen=True, slots=True)
class Credentials:
    """Authorization headers for a single call; never cached by the readers."""

    headers: Mapping[str, str] = field(default_factory=dict)
    token: str | None = None


@dataclass(frozen=True, slots=True)
class ReadTreeOptions:
    """Options for ``read_tree``.

    ``filter`` receives paths relative to the requested subpath.
    """

    etag: str | None = None
    filter: PathFilter | None = None


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Options for ``search``."""

    etag: str | None = None


@dataclass(frozen=True, slots=True)
class ResponseFile:
    """A file path plus a deferred content accessor.

    ``content`` may be awaited any number of times; every call produces the
    same bytes and has no side effect beyond the fetch itself.
    """

    path: str
    content: ContentAccessor


@dataclass(frozen=True, slots=True)
class SearchResponse:
    """Files matching a search, stamped with the revision they belong to."""

    etag: str
    files: list[ResponseFile]


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A single node from the GitHub tree API (blob or sub-tree)."""

    path: str
    type: str  # "blob", "tree" or "commit"
    url: str | None = None
    size: int = 0


@dataclass(frozen=True, slots=True)
class RepoDetails:
    """Repository and branch documents as returned by the GitHub API."""

    repo: dict[str, Any]
    branch: dict[str, Any]

    @property
    def commit_sha(self) -> str:
        return self.branch["commit"]["sha"]
