"""GitHub HTTP helpers — request issuing and error translation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import httpx

from scm_reader.domain.exceptions import NotFoundError, RateLimitError, ReadError


def raise_for_github_status(resp: httpx.Response, url: str) -> None:
    """Translate a non-2xx GitHub response into a domain exception."""
    if resp.is_success:
        return

    message = f"Request failed for {url}, {resp.status_code} {resp.reason_phrase}"

    if resp.status_code == 404:
        raise NotFoundError(message)

    if resp.status_code == 403 and resp.headers.get("x-ratelimit-remaining") == "0":
        reset_raw = resp.headers.get("x-ratelimit-reset", "")
        try:
            reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                "%Y-%m-%d %H:%M:%S UTC"
            )
        except (ValueError, OSError):
            reset_str = reset_raw or "unknown"
        raise RateLimitError(
            f"GitHub API rate limit exceeded for {url}. Resets at {reset_str}.",
            status_code=403,
        )

    if resp.status_code == 429:
        raise RateLimitError(
            f"GitHub API rate limit exceeded (HTTP 429) for {url}.", status_code=429
        )

    raise ReadError(message, status_code=resp.status_code)


async def fetch_response(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: Mapping[str, str],
    method: str = "GET",
    params: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Perform a request with error translation; redirects are followed."""
    try:
        resp = await client.request(
            method, url, headers=dict(headers), params=params, follow_redirects=True
        )
    except httpx.HTTPError as exc:
        raise ReadError(f"Network error fetching {url}: {exc}") from exc

    raise_for_github_status(resp, url)
    return resp


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: Mapping[str, str],
    method: str = "GET",
    params: Mapping[str, str] | None = None,
) -> Any:
    resp = await fetch_response(
        client, url, headers=headers, method=method, params=params
    )
    try:
        return resp.json()
    except ValueError as exc:
        raise ReadError(
            f"Invalid JSON from {url}: {exc}", status_code=resp.status_code
        ) from exc
