"""Value objects — self-validating domain primitives."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from scm_reader.domain.exceptions import InvalidUrlError

_FILEPATH_TYPES = frozenset({"blob", "tree", "raw", "edit"})


def url_host(url: str) -> str:
    """Return the lowercased ``hostname[:port]`` of *url*, without userinfo."""
    parts = urlsplit(url.strip())
    try:
        port = parts.port
    except ValueError:
        return ""
    hostname = parts.hostname or ""
    return f"{hostname}:{port}" if port is not None else hostname


@dataclass(frozen=True, slots=True)
class GitUrl:
    """A source-control web URL decomposed into its repository coordinates.

    Handles URLs like
    ``https://github.com/acme/widgets/blob/main/docs/index.md``: *owner*
    ``acme``, *name* ``widgets``, *filepath_type* ``blob``, *ref* ``main`` and
    *filepath* ``docs/index.md``.

    The ref is always a single path segment.  A branch called
    ``feature/x`` therefore resolves to ref ``feature`` with ``x/...`` folded
    into the filepath; callers relying on such branches get the wrong
    revision.
    """

    host: str
    owner: str
    name: str
    ref: str
    filepath_type: str
    filepath: str
    raw: str

    @classmethod
    def parse(cls, url: str) -> GitUrl:
        """Parse and validate a raw URL string."""
        url = url.strip()
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise InvalidUrlError(f"Invalid URL: '{url}'. Expected an http(s) URL.")

        segments = [unquote(s) for s in parts.path.split("/") if s]
        if len(segments) < 2:
            raise InvalidUrlError(
                f"Invalid URL: '{url}'. "
                "Expected format: https://<host>/<owner>/<repo>[/<type>/<ref>/<path>]"
            )

        owner, name = segments[0], segments[1]
        if name.endswith(".git"):
            name = name[: -len(".git")]

        filepath_type = ""
        ref = ""
        rest = segments[2:]
        if rest and rest[0] in _FILEPATH_TYPES:
            filepath_type = rest[0]
            if len(rest) > 1:
                ref = rest[1]
            rest = rest[2:]

        return cls(
            host=url_host(url),
            owner=owner,
            name=name,
            ref=ref,
            filepath_type=filepath_type,
            filepath="/".join(rest),
            raw=url,
        )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"
