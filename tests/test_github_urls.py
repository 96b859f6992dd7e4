"""Tests for GitHub endpoint resolution."""

import pytest

from scm_reader.domain.exceptions import InvalidUrlError
from scm_reader.infrastructure.config import GitHubIntegrationConfig
from scm_reader.infrastructure.github_urls import (
    expand_url_template,
    get_github_file_fetch_url,
)

FILE_URL = "https://github.example.com/acme/widgets/blob/main/docs/index.md"


@pytest.fixture
def both_bases() -> GitHubIntegrationConfig:
    return GitHubIntegrationConfig(
        host="github.example.com",
        api_base_url="https://github.example.com/api/v3",
        raw_base_url="https://raw.github.example.com",
    )


class TestFileFetchUrl:
    def test_raw_endpoint_without_token(self, both_bases):
        assert (
            get_github_file_fetch_url(FILE_URL, both_bases)
            == "https://raw.github.example.com/acme/widgets/main/docs/index.md"
        )

    def test_api_endpoint_with_token(self, both_bases):
        assert (
            get_github_file_fetch_url(FILE_URL, both_bases, has_token=True)
            == "https://github.example.com/api/v3/repos/acme/widgets/contents/docs/index.md?ref=main"
        )

    def test_api_endpoint_when_raw_missing(self):
        config = GitHubIntegrationConfig(
            host="github.example.com", api_base_url="https://github.example.com/api/v3"
        )
        assert get_github_file_fetch_url(FILE_URL, config).startswith(
            "https://github.example.com/api/v3/repos/acme/widgets/contents/"
        )

    def test_raw_endpoint_when_api_missing(self):
        config = GitHubIntegrationConfig(
            host="github.example.com", raw_base_url="https://raw.github.example.com"
        )
        assert get_github_file_fetch_url(FILE_URL, config, has_token=True).startswith(
            "https://raw.github.example.com/"
        )

    def test_deterministic(self, both_bases):
        assert get_github_file_fetch_url(FILE_URL, both_bases) == get_github_file_fetch_url(
            FILE_URL, both_bases
        )

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.example.com/acme/widgets",
            "https://github.example.com/acme/widgets/commits/main/README.md",
        ],
    )
    def test_rejects_urls_without_ref_or_type(self, both_bases, url):
        with pytest.raises(InvalidUrlError):
            get_github_file_fetch_url(url, both_bases)


class TestExpandUrlTemplate:
    def test_optional_path_segment(self):
        assert (
            expand_url_template("https://api/repos/o/r/branches{/branch}", branch="main")
            == "https://api/repos/o/r/branches/main"
        )

    def test_archive_template(self):
        assert (
            expand_url_template(
                "https://api/repos/o/r/{archive_format}{/ref}",
                archive_format="tarball",
                ref="abc",
            )
            == "https://api/repos/o/r/tarball/abc"
        )

    def test_missing_value_expands_to_nothing(self):
        assert expand_url_template("https://api/repos/o/r/git/trees{/sha}") == (
            "https://api/repos/o/r/git/trees"
        )
