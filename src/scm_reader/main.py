"""Command-line entry point: serve the reader API with uvicorn.

Host, port and log level come from :class:`~scm_reader.infrastructure.config.Settings`,
so ``HOST=0.0.0.0 PORT=9000 scm-reader`` is enough to expose it.
"""

from __future__ import annotations

import logging

import uvicorn

from scm_reader.infrastructure.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    # httpx logs every upstream request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    uvicorn.run(
        "scm_reader.interface.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
