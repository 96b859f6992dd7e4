"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx

from scm_reader.infrastructure.config import get_settings
from scm_reader.infrastructure.reader_factory import create_url_reader_registry
from scm_reader.services.url_reader_registry import UrlReaderRegistry

_http_client: httpx.AsyncClient | None = None
_registry: UrlReaderRegistry | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _registry  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))
    # Misconfigured integrations fail here, before the first request.
    _registry = create_url_reader_registry(settings, _http_client)


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _registry  # noqa: PLW0603

    _registry = None
    if _http_client:
        await _http_client.aclose()
        _http_client = None


def get_registry() -> UrlReaderRegistry:
    """Return the registry built at startup."""
    assert _registry is not None, "startup() was not called"
    return _registry
