"""
Run the service with uvicorn: ``python -m projects_api``.

Uvicorn handles SIGINT/SIGTERM: it stops accepting connections and runs the
application's shutdown handler, which closes the record store.
"""
import logging
import sys

import uvicorn

from projects_api.core.config import ConfigurationError, Settings
from projects_api.main import configure_logging

logger = logging.getLogger("projects_api")


def main() -> int:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        configure_logging("ERROR")
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings.log_level)
    logger.info(f"Starting server on {settings.host}:{settings.port}")

    uvicorn.run(
        "projects_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
