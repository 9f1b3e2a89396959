"""Application entry point.

Configures logging and serves the market pricing HTTP API with aiohttp.
"""

import logging

from aiohttp import web

from .config import config
from .web.app import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    """Main application entry point.

    Raises:
        CredentialsMissing: If ACTIVE_SOURCE=api and the eBay client
            credentials are not set.
    """
    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(message)s",
        level=config.server.log_level.upper(),
    )

    app = create_app()

    logger.info(f"Starting market pricing API on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
