"""Glob matching over repository-relative paths."""

from __future__ import annotations

from wcmatch import glob

from scm_reader.domain.entities import PathFilter

_FLAGS = glob.GLOBSTAR | glob.FORCEUNIX


def compile_glob(pattern: str) -> PathFilter:
    """Compile a shell-style glob into a ``path -> bool`` predicate.

    The pattern is anchored at the repository root: ``*`` stays within one
    path segment, so ``*.md`` only matches top-level files and ``docs/*`` does
    not reach into ``docs/guide/``; ``**/*.md`` matches at any depth.  Leading
    slashes on the pattern and on the tested paths are ignored, and wildcards
    do not match dotfiles.
    """
    stripped = pattern.lstrip("/")
    if not stripped:
        return lambda path: False

    def _matches(path: str) -> bool:
        return glob.globmatch(path.lstrip("/"), stripped, flags=_FLAGS)

    return _matches
