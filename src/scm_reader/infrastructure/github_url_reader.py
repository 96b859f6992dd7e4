"""GitHub URL reader — implements the UrlReader port on the GitHub v3 REST API."""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping, Sequence

import httpx

from scm_reader.domain.entities import (
    ContentAccessor,
    Credentials,
    PathFilter,
    ReadTreeOptions,
    RepoDetails,
    ResponseFile,
    SearchOptions,
    SearchResponse,
    TreeEntry,
)
from scm_reader.domain.exceptions import (
    ConfigurationError,
    NotModifiedError,
    ReadError,
)
from scm_reader.domain.ports.credentials_provider import CredentialsProvider
from scm_reader.domain.value_objects import GitUrl
from scm_reader.infrastructure.config import GitHubIntegrationConfig
from scm_reader.infrastructure.github_credentials import create_credentials_provider
from scm_reader.infrastructure.github_http import (
    fetch_json,
    fetch_response,
    raise_for_github_status,
)
from scm_reader.infrastructure.github_urls import (
    expand_url_template,
    get_github_file_fetch_url,
    repo_api_url,
)
from scm_reader.services.glob_matcher import compile_glob
from scm_reader.services.tree_response import ReadTreeResponseFactory, TarArchiveResponse
from scm_reader.services.url_reader_registry import ReaderPredicate

logger = logging.getLogger(__name__)

_API_ACCEPT = "application/vnd.github.v3+json"
_RAW_ACCEPT = "application/vnd.github.v3.raw"


class GithubUrlReader:
    """Concrete UrlReader for one GitHub or GitHub Enterprise host."""

    def __init__(
        self,
        config: GitHubIntegrationConfig,
        *,
        client: httpx.AsyncClient,
        tree_response_factory: ReadTreeResponseFactory,
        credentials_provider: CredentialsProvider,
    ) -> None:
        if not config.api_base_url and not config.raw_base_url:
            raise ConfigurationError(
                f"GitHub integration for '{config.host}' must configure an "
                "explicit api_base_url and raw_base_url"
            )
        self._config = config
        self._client = client
        self._tree_response_factory = tree_response_factory
        self._credentials = credentials_provider

    @classmethod
    def factory(
        cls,
        integrations: Sequence[GitHubIntegrationConfig],
        *,
        client: httpx.AsyncClient,
        tree_response_factory: ReadTreeResponseFactory,
    ) -> list[ReaderPredicate]:
        """Build one host-bound reader per configured integration."""
        return [
            ReaderPredicate.for_host(
                cls(
                    config,
                    client=client,
                    tree_response_factory=tree_response_factory,
                    credentials_provider=create_credentials_provider(config, client),
                ),
                config.host,
            )
            for config in integrations
        ]

    # ── UrlReader ───────────────────────────────────────────────────────

    async def read(self, url: str) -> bytes:
        """Fetch a single file as raw bytes."""
        credentials = await self._credentials.get_credentials(url)
        fetch_url = get_github_file_fetch_url(
            url, self._config, has_token=credentials.token is not None
        )
        logger.debug("Reading %s via %s", url, fetch_url)
        resp = await fetch_response(
            self._client,
            fetch_url,
            headers={**credentials.headers, "Accept": _RAW_ACCEPT},
        )
        return resp.content

    async def read_tree(
        self, url: str, options: ReadTreeOptions | None = None
    ) -> TarArchiveResponse:
        """Snapshot the directory at *url*; its etag is the resolved commit sha."""
        options = options or ReadTreeOptions()
        credentials = await self._credentials.get_credentials(url)
        details = await self._repo_details(url, credentials)
        sha = details.commit_sha

        if options.etag and options.etag == sha:
            raise NotModifiedError(sha)

        return await self._do_read_tree(
            details.repo["archive_url"],
            sha,
            GitUrl.parse(url).filepath,
            credentials,
            options.filter,
        )

    async def search(
        self, url: str, options: SearchOptions | None = None
    ) -> SearchResponse:
        """Return the files matching the glob in the URL's path."""
        options = options or SearchOptions()
        credentials = await self._credentials.get_credentials(url)
        details = await self._repo_details(url, credentials)
        sha = details.commit_sha

        if options.etag and options.etag == sha:
            raise NotModifiedError(sha)

        matcher = compile_glob(GitUrl.parse(url).filepath)
        headers = self._api_headers(credentials)
        listing = await fetch_json(
            self._client,
            expand_url_template(details.repo["trees_url"], sha=sha),
            headers=headers,
            params={"recursive": "true"},
        )

        if not listing.get("truncated"):
            entries = [
                TreeEntry(
                    path=item["path"],
                    type=item.get("type", ""),
                    url=item.get("url"),
                    size=item.get("size", 0),
                )
                for item in listing.get("tree", [])
                if item.get("path")
            ]
            files = [
                ResponseFile(path=entry.path, content=self._blob_accessor(entry.url, headers))
                for entry in entries
                if entry.type == "blob" and entry.url and matcher(entry.path)
            ]
            return SearchResponse(etag=sha, files=files)

        # Too many entries for a single listing; scan the whole archive instead.
        logger.info("Tree listing of %s is truncated, searching the archive", url)
        tree = await self._do_read_tree(
            details.repo["archive_url"], sha, "", credentials, matcher
        )
        return SearchResponse(etag=sha, files=await tree.files())

    def __str__(self) -> str:
        authed = bool(self._config.token or self._config.apps)
        return f"github{{host={self._config.host},authed={authed}}}"

    # ── Internals ───────────────────────────────────────────────────────

    async def _do_read_tree(
        self,
        archive_url_template: str,
        sha: str,
        subpath: str,
        credentials: Credentials,
        path_filter: PathFilter | None,
    ) -> TarArchiveResponse:
        archive_url = expand_url_template(
            archive_url_template, archive_format="tarball", ref=sha
        )
        logger.debug("Fetching archive %s", archive_url)
        try:
            async with self._client.stream(
                "GET",
                archive_url,
                headers=dict(credentials.headers),
                follow_redirects=True,
            ) as resp:
                raise_for_github_status(resp, archive_url)
                return await self._tree_response_factory.from_tar_archive(
                    resp.aiter_bytes(),
                    etag=sha,
                    subpath=subpath,
                    filter=path_filter,
                )
        except httpx.HTTPError as exc:
            raise ReadError(f"Network error fetching {archive_url}: {exc}") from exc

    async def _repo_details(self, url: str, credentials: Credentials) -> RepoDetails:
        if not self._config.api_base_url:
            raise ConfigurationError(
                f"GitHub integration for '{self._config.host}' has no api_base_url, "
                "which tree reads and searches require"
            )

        git_url = GitUrl.parse(url)
        headers = self._api_headers(credentials)
        repo = await fetch_json(
            self._client, repo_api_url(self._config, git_url), headers=headers
        )
        branch = await fetch_json(
            self._client,
            expand_url_template(
                repo["branches_url"], branch=git_url.ref or repo["default_branch"]
            ),
            headers=headers,
        )
        return RepoDetails(repo=repo, branch=branch)

    def _blob_accessor(self, blob_url: str, headers: Mapping[str, str]) -> ContentAccessor:
        async def content() -> bytes:
            blob = await fetch_json(self._client, blob_url, headers=headers)
            return base64.b64decode(blob["content"])

        return content

    @staticmethod
    def _api_headers(credentials: Credentials) -> dict[str, str]:
        return {**credentials.headers, "Accept": _API_ACCEPT}
