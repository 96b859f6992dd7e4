"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
import io
import tarfile

import httpx
import pytest

from scm_reader.infrastructure.config import GitHubIntegrationConfig
from scm_reader.infrastructure.github_credentials import TokenCredentialsProvider
from scm_reader.infrastructure.github_url_reader import GithubUrlReader
from scm_reader.services.tree_response import ReadTreeResponseFactory

HOST = "github.example.com"
API = f"https://{HOST}/api/v3"
RAW = f"https://raw.{HOST}"
CODELOAD = f"https://codeload.{HOST}"
SHA = "3f786850e387550fdab836ed7e6dc881de23001b"
TOKEN = "t0k3n"

FILES: dict[str, bytes] = {
    "README.md": b"# Widgets\n",
    "setup.cfg": b"[metadata]\nname = widgets\n",
    "docs/index.md": b"# Docs\n",
    "docs/guide/setup.md": b"Run the installer.\n",
    "src/widgets/core.py": b"def spin():\n    return 42\n",
}


def make_tarball(files: dict[str, bytes], top: str = f"acme-widgets-{SHA[:7]}") -> bytes:
    """Build a gzip tarball laid out like the ones GitHub serves."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        root = tarfile.TarInfo(top)
        root.type = tarfile.DIRTYPE
        tar.addfile(root)
        for path, data in files.items():
            info = tarfile.TarInfo(f"{top}/{path}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def _dirs(paths: list[str]) -> set[str]:
    dirs: set[str] = set()
    for path in paths:
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            dirs.add("/".join(parts[:i]))
    return dirs


class FakeGitHub:
    """In-memory GitHub Enterprise serving the ``acme/widgets`` repository."""

    def __init__(
        self,
        files: dict[str, bytes] | None = None,
        *,
        sha: str = SHA,
        truncated: bool = False,
    ) -> None:
        self.files = dict(FILES if files is None else files)
        self.sha = sha
        self.truncated = truncated
        self.requests: list[httpx.Request] = []
        self.failing_blobs: set[str] = set()
        self.blob_urls = {
            path: f"{API}/repos/acme/widgets/git/blobs/{i}"
            for i, path in enumerate(sorted(self.files))
        }

    @property
    def paths_requested(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?", 1)[0]
        repo = f"{API}/repos/acme/widgets"

        if url == repo:
            return httpx.Response(
                200,
                json={
                    "full_name": "acme/widgets",
                    "default_branch": "main",
                    "branches_url": f"{repo}/branches{{/branch}}",
                    "trees_url": f"{repo}/git/trees{{/sha}}",
                    "archive_url": f"{repo}/{{archive_format}}{{/ref}}",
                },
            )
        if url == f"{repo}/branches/main":
            return httpx.Response(200, json={"name": "main", "commit": {"sha": self.sha}})
        if url == f"{repo}/git/trees/{self.sha}":
            return httpx.Response(200, json=self._tree_listing())
        if url == f"{repo}/tarball/{self.sha}":
            return httpx.Response(
                302, headers={"Location": f"{CODELOAD}/acme/widgets/legacy.tar.gz/{self.sha}"}
            )
        if url == f"{CODELOAD}/acme/widgets/legacy.tar.gz/{self.sha}":
            return httpx.Response(200, content=make_tarball(self.files))
        for path, blob_url in self.blob_urls.items():
            if url == blob_url:
                if path in self.failing_blobs:
                    return httpx.Response(500)
                return httpx.Response(200, json=self._blob(path))
        if url.startswith(f"{repo}/contents/"):
            return self._file(url[len(f"{repo}/contents/"):], request.url.params.get("ref"))
        if url.startswith(f"{RAW}/acme/widgets/"):
            ref, _, path = url[len(f"{RAW}/acme/widgets/"):].partition("/")
            return self._file(path, ref)
        return httpx.Response(404, json={"message": "Not Found"})

    def _file(self, path: str, ref: str | None) -> httpx.Response:
        if ref != "main" or path not in self.files:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, content=self.files[path])

    def _tree_listing(self) -> dict[str, object]:
        tree: list[dict[str, object]] = [
            {"path": d, "type": "tree", "url": f"{API}/repos/acme/widgets/git/trees/{d}"}
            for d in sorted(_dirs(list(self.files)))
        ]
        tree += [
            {
                "path": path,
                "type": "blob",
                "size": len(self.files[path]),
                "url": self.blob_urls[path],
            }
            for path in sorted(self.files)
        ]
        if self.truncated:
            tree = tree[:2]
        return {"sha": self.sha, "tree": tree, "truncated": self.truncated}

    def _blob(self, path: str) -> dict[str, object]:
        encoded = base64.encodebytes(self.files[path]).decode("ascii")
        return {"content": encoded, "encoding": "base64", "size": len(self.files[path])}


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def client(fake_github: FakeGitHub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_github))


@pytest.fixture
def config() -> GitHubIntegrationConfig:
    return GitHubIntegrationConfig(
        host=HOST, api_base_url=API, raw_base_url=RAW, token=TOKEN
    )


@pytest.fixture
def reader(config: GitHubIntegrationConfig, client: httpx.AsyncClient) -> GithubUrlReader:
    return GithubUrlReader(
        config,
        client=client,
        tree_response_factory=ReadTreeResponseFactory(max_size_bytes=10 * 1024 * 1024),
        credentials_provider=TokenCredentialsProvider(TOKEN),
    )
