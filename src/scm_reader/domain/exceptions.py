"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations


class UrlReaderError(Exception):
    """Base exception for the entire application."""


# ── Configuration ───────────────────────────────────────────────────────────


class ConfigurationError(UrlReaderError):
    """An integration is misconfigured; raised at startup, never deferred."""


# ── Input validation ────────────────────────────────────────────────────────


class UnsupportedUrlError(UrlReaderError):
    """No configured integration owns the host of the URL."""


class InvalidUrlError(UrlReaderError):
    """The URL cannot be decomposed into owner / repo / ref / path."""


# ── Conditional-fetch signal ────────────────────────────────────────────────


class NotModifiedError(UrlReaderError):
    """The caller's etag matches the current revision; there is nothing to do.

    Not a failure: callers keep whatever they fetched for that etag.
    """

    def __init__(self, etag: str | None = None) -> None:
        super().__init__(f"Not modified since {etag}" if etag else "Not modified")
        self.etag = etag


# ── Upstream errors ─────────────────────────────────────────────────────────


class NotFoundError(UrlReaderError):
    """The requested resource does not exist upstream (404)."""


class ReadError(UrlReaderError):
    """Any other upstream or transport failure.

    ``status_code`` is ``None`` when the request never got a response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ReadError):
    """Upstream API rate limit exceeded (429 / 403 with rate-limit header)."""


# ── Processing errors ───────────────────────────────────────────────────────


class ArchiveTooLargeError(UrlReaderError):
    """Archive extraction exceeded the configured size bound."""

    def __init__(self, limit_bytes: int) -> None:
        super().__init__(
            f"Archive exceeds the maximum extracted size of {limit_bytes} bytes"
        )
        self.limit_bytes = limit_bytes
