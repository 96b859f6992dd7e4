"""Reader wiring — build the URL reader registry from settings."""

from __future__ import annotations

import logging

import httpx

from scm_reader.infrastructure.config import Settings, read_github_integration_configs
from scm_reader.infrastructure.github_url_reader import GithubUrlReader
from scm_reader.services.tree_response import ReadTreeResponseFactory
from scm_reader.services.url_reader_registry import UrlReaderRegistry

logger = logging.getLogger(__name__)


def create_url_reader_registry(
    settings: Settings, client: httpx.AsyncClient
) -> UrlReaderRegistry:
    """Create one reader per configured integration, in configuration order."""
    integrations = read_github_integration_configs(settings)
    tree_response_factory = ReadTreeResponseFactory(settings.max_archive_size_bytes)
    registry = UrlReaderRegistry(
        GithubUrlReader.factory(
            integrations, client=client, tree_response_factory=tree_response_factory
        )
    )
    logger.info("Configured URL readers: %s", registry)
    return registry
