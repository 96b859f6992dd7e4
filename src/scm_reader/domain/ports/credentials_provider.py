"""Port: credentials provider — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from scm_reader.domain.entities import Credentials


class CredentialsProvider(Protocol):
    """Produces short-lived authorization headers for URLs of one integration."""

    async def get_credentials(self, url: str) -> Credentials:
        """Return the credentials to attach to requests made on behalf of *url*."""
        ...
