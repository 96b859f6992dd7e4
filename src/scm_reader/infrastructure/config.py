"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from scm_reader.domain.exceptions import ConfigurationError

GITHUB_HOST = "github.com"
GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_RAW_BASE_URL = "https://raw.githubusercontent.com"


class GitHubAppConfig(BaseModel):
    """Credentials of a GitHub App installed on one or more organizations."""

    model_config = ConfigDict(frozen=True)

    app_id: int
    private_key: SecretStr


class GitHubIntegrationConfig(BaseModel):
    """One configured GitHub (or GitHub Enterprise) host."""

    model_config = ConfigDict(frozen=True)

    host: str = GITHUB_HOST
    api_base_url: str | None = None
    raw_base_url: str | None = None
    token: SecretStr | None = None
    apps: tuple[GitHubAppConfig, ...] = ()

    @property
    def token_value(self) -> str | None:
        return self.token.get_secret_value() if self.token else None


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_integrations: list[GitHubIntegrationConfig] = []
    github_token: SecretStr | None = None
    max_archive_size_mb: int = 100
    http_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def max_archive_size_bytes(self) -> int:
        return self.max_archive_size_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()


def _is_valid_host(host: str) -> bool:
    """Return *True* if *host* is a bare ``hostname[:port]``."""
    if not host or host != host.strip():
        return False
    try:
        parts = urlsplit(f"http://{host}")
        parts.port  # noqa: B018  (raises on a malformed port)
    except ValueError:
        return False
    return parts.netloc == host and not parts.path and parts.hostname is not None


def _trim(url: str | None) -> str | None:
    return url.rstrip("/") if url else url


def read_github_integration_configs(
    settings: Settings,
) -> list[GitHubIntegrationConfig]:
    """Normalize the configured integrations.

    Hosts are lowercased, base URLs lose their trailing slashes, ``github.com``
    gets its public endpoints filled in, and a default ``github.com`` integration (using
    ``github_token``) is appended when none is configured.
    """
    configs: list[GitHubIntegrationConfig] = []
    for config in settings.github_integrations:
        if not _is_valid_host(config.host):
            raise ConfigurationError(
                f"Invalid GitHub integration config, '{config.host}' is not a valid host"
            )
        host = config.host.lower()

        api_base_url = _trim(config.api_base_url)
        raw_base_url = _trim(config.raw_base_url)
        if host == GITHUB_HOST:
            api_base_url = api_base_url or GITHUB_API_BASE_URL
            raw_base_url = raw_base_url or GITHUB_RAW_BASE_URL

        configs.append(
            config.model_copy(
                update={
                    "host": host,
                    "api_base_url": api_base_url,
                    "raw_base_url": raw_base_url,
                }
            )
        )

    if not any(c.host == GITHUB_HOST for c in configs):
        configs.append(
            GitHubIntegrationConfig(
                host=GITHUB_HOST,
                api_base_url=GITHUB_API_BASE_URL,
                raw_base_url=GITHUB_RAW_BASE_URL,
                token=settings.github_token,
            )
        )

    return configs
