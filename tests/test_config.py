"""Tests for settings and integration normalization."""

from __future__ import annotations

import json

import pytest

from scm_reader.domain.exceptions import ConfigurationError
from scm_reader.infrastructure.config import (
    GITHUB_API_BASE_URL,
    GITHUB_RAW_BASE_URL,
    GitHubIntegrationConfig,
    Settings,
    read_github_integration_configs,
)


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


def test_default_github_integration_is_added():
    configs = read_github_integration_configs(_settings(github_token="pat"))
    assert len(configs) == 1
    assert configs[0].host == "github.com"
    assert configs[0].api_base_url == GITHUB_API_BASE_URL
    assert configs[0].raw_base_url == GITHUB_RAW_BASE_URL
    assert configs[0].token_value == "pat"


def test_enterprise_integration_is_normalized():
    settings = _settings(
        github_integrations=[
            GitHubIntegrationConfig(
                host="ghe.example.com", api_base_url="https://ghe.example.com/api/v3/"
            )
        ]
    )
    enterprise, public = read_github_integration_configs(settings)
    assert enterprise.host == "ghe.example.com"
    assert enterprise.api_base_url == "https://ghe.example.com/api/v3"
    assert enterprise.raw_base_url is None
    assert public.host == "github.com"


def test_explicit_github_com_gets_public_endpoints():
    settings = _settings(
        github_integrations=[GitHubIntegrationConfig(host="github.com", token="t")]
    )
    (config,) = read_github_integration_configs(settings)
    assert config.api_base_url == GITHUB_API_BASE_URL
    assert config.raw_base_url == GITHUB_RAW_BASE_URL
    assert config.token_value == "t"


@pytest.mark.parametrize("host", ["", "https://ghe.example.com", "ghe.example.com/api", "ghe:port"])
def test_invalid_host_is_rejected(host):
    settings = _settings(github_integrations=[GitHubIntegrationConfig(host=host)])
    with pytest.raises(ConfigurationError):
        read_github_integration_configs(settings)


def test_integrations_load_from_environment(monkeypatch):
    monkeypatch.setenv(
        "GITHUB_INTEGRATIONS",
        json.dumps(
            [
                {
                    "host": "ghe.example.com",
                    "api_base_url": "https://ghe.example.com/api/v3",
                    "token": "secret",
                }
            ]
        ),
    )
    monkeypatch.setenv("MAX_ARCHIVE_SIZE_MB", "5")

    settings = _settings()

    assert settings.github_integrations[0].host == "ghe.example.com"
    assert settings.github_integrations[0].token_value == "secret"
    assert settings.max_archive_size_bytes == 5 * 1024 * 1024
    assert "secret" not in repr(settings)


def test_hosts_are_lowercased():
    settings = _settings(
        github_integrations=[
            GitHubIntegrationConfig(host="GHE.Example.com", api_base_url="https://ghe/api")
        ]
    )
    enterprise, _ = read_github_integration_configs(settings)
    assert enterprise.host == "ghe.example.com"
