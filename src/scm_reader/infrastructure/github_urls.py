"""GitHub URL resolution — translate web URLs into API endpoints."""

from __future__ import annotations

import re
from urllib.parse import quote

from scm_reader.domain.exceptions import InvalidUrlError
from scm_reader.domain.value_objects import GitUrl
from scm_reader.infrastructure.config import GitHubIntegrationConfig

_FETCHABLE_TYPES = frozenset({"blob", "tree", "raw"})

# {name} and {/name}, the two RFC 6570 forms GitHub uses in its *_url fields.
_TEMPLATE_RE = re.compile(r"\{(/?)([a-z_]+)\}")


def _choose_endpoint(config: GitHubIntegrationConfig, has_token: bool) -> str:
    """Return ``"api"`` or ``"raw"``.

    The contents API is needed for authenticated reads; the raw host is
    preferred otherwise because it is not rate limited.
    """
    if config.api_base_url and (has_token or not config.raw_base_url):
        return "api"
    return "raw"


def get_github_file_fetch_url(
    url: str, config: GitHubIntegrationConfig, *, has_token: bool = False
) -> str:
    """Build the endpoint that serves the raw content of the file at *url*."""
    git_url = GitUrl.parse(url)
    if (
        not git_url.owner
        or not git_url.name
        or not git_url.ref
        or git_url.filepath_type not in _FETCHABLE_TYPES
    ):
        raise InvalidUrlError(f"Incorrect URL: {url}, Invalid GitHub URL or file path")

    path = quote(git_url.filepath.lstrip("/"))
    if _choose_endpoint(config, has_token) == "api":
        ref = quote(git_url.ref, safe="")
        return (
            f"{config.api_base_url}/repos/{git_url.owner}/{git_url.name}"
            f"/contents/{path}?ref={ref}"
        )
    return f"{config.raw_base_url}/{git_url.owner}/{git_url.name}/{git_url.ref}/{path}"


def repo_api_url(config: GitHubIntegrationConfig, git_url: GitUrl) -> str:
    """``{api}/repos/{owner}/{name}``."""
    return f"{config.api_base_url}/repos/{git_url.full_name}"


def expand_url_template(template: str, **values: str) -> str:
    """Expand the URI templates found in GitHub API documents.

    ``https://api.github.com/repos/o/r/branches{/branch}`` with
    ``branch="main"`` becomes ``.../branches/main``; variables without a value
    expand to nothing.
    """

    def _replace(match: re.Match[str]) -> str:
        prefix, name = match.groups()
        value = values.get(name)
        if not value:
            return ""
        return f"{prefix}{value}"

    return _TEMPLATE_RE.sub(_replace, template)
