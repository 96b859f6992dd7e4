"""GitHub credentials — implements the CredentialsProvider port.

Two variants: a static personal access token, and GitHub Apps, which trade a
signed JWT for a short-lived installation token of the organization that owns
the requested repository.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
import jwt

from scm_reader.domain.entities import Credentials
from scm_reader.domain.ports.credentials_provider import CredentialsProvider
from scm_reader.domain.value_objects import GitUrl
from scm_reader.infrastructure.config import GitHubAppConfig, GitHubIntegrationConfig
from scm_reader.infrastructure.github_http import fetch_json

logger = logging.getLogger(__name__)

_API_ACCEPT = "application/vnd.github.v3+json"
_JWT_BACKDATE = timedelta(seconds=60)
_JWT_LIFETIME = timedelta(minutes=9)
_TOKEN_REFRESH_MARGIN = timedelta(minutes=10)


class TokenCredentialsProvider:
    """Static token credentials; no headers when no token is configured."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    async def get_credentials(self, url: str) -> Credentials:
        if not self._token:
            return Credentials()
        return Credentials(
            headers={"Authorization": f"token {self._token}"},
            token=self._token,
        )


@dataclass(frozen=True, slots=True)
class _InstallationToken:
    token: str
    expires_at: datetime


class GithubAppCredentialsProvider:
    """Installation-token credentials for integrations configured with GitHub Apps.

    Tokens are cached per (app, owner) until shortly before they expire.  When
    none of the apps is installed for the URL's owner, *fallback* is used.
    """

    def __init__(
        self,
        apps: tuple[GitHubAppConfig, ...],
        api_base_url: str,
        client: httpx.AsyncClient,
        fallback: CredentialsProvider,
    ) -> None:
        self._apps = apps
        self._api_base_url = api_base_url
        self._client = client
        self._fallback = fallback
        self._tokens: dict[tuple[int, str], _InstallationToken] = {}

    async def get_credentials(self, url: str) -> Credentials:
        owner = GitUrl.parse(url).owner
        for app in self._apps:
            token = await self._installation_token(app, owner)
            if token:
                return Credentials(
                    headers={"Authorization": f"Bearer {token}"}, token=token
                )
        return await self._fallback.get_credentials(url)

    async def _installation_token(self, app: GitHubAppConfig, owner: str) -> str | None:
        key = (app.app_id, owner.lower())
        now = datetime.now(timezone.utc)
        cached = self._tokens.get(key)
        if cached and cached.expires_at - _TOKEN_REFRESH_MARGIN > now:
            return cached.token

        headers = {
            "Accept": _API_ACCEPT,
            "Authorization": f"Bearer {self._app_jwt(app, now)}",
        }
        installations = await fetch_json(
            self._client,
            f"{self._api_base_url}/app/installations",
            headers=headers,
            params={"per_page": "100"},
        )
        installation = next(
            (
                i
                for i in installations
                if i.get("account", {}).get("login", "").lower() == owner.lower()
            ),
            None,
        )
        if installation is None:
            logger.debug("GitHub App %s is not installed for %s", app.app_id, owner)
            return None

        data = await fetch_json(
            self._client,
            f"{self._api_base_url}/app/installations/{installation['id']}/access_tokens",
            headers=headers,
            method="POST",
        )
        token = _InstallationToken(
            token=data["token"],
            expires_at=datetime.fromisoformat(data["expires_at"]),
        )
        self._tokens[key] = token
        logger.info("Issued installation token for app %s on %s", app.app_id, owner)
        return token.token

    @staticmethod
    def _app_jwt(app: GitHubAppConfig, now: datetime) -> str:
        payload = {
            "iat": int((now - _JWT_BACKDATE).timestamp()),
            "exp": int((now + _JWT_LIFETIME).timestamp()),
            "iss": str(app.app_id),
        }
        return jwt.encode(payload, app.private_key.get_secret_value(), algorithm="RS256")


def create_credentials_provider(
    config: GitHubIntegrationConfig, client: httpx.AsyncClient
) -> CredentialsProvider:
    """Pick the credentials variant for an integration."""
    token_provider = TokenCredentialsProvider(config.token_value)
    if config.apps and config.api_base_url:
        return GithubAppCredentialsProvider(
            config.apps, config.api_base_url, client, fallback=token_provider
        )
    return token_provider
