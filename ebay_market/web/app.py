"""aiohttp application factory."""

import logging

from aiohttp import web

from ..core.container import Container
from .handlers import (
    ASSEMBLER_KEY,
    ebay_active,
    health,
    market_report,
    scrape_active,
    scrape_sold,
)

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> web.Application:
    """Build the HTTP application.

    The Browse API endpoint is mounted only when client credentials are
    configured. Missing credentials are fatal when the market report is set
    to sample active listings through the API.

    Args:
        container: DI container, a default one is created when omitted.

    Returns:
        Configured aiohttp application.

    Raises:
        CredentialsMissing: ACTIVE_SOURCE=api without EBAY_CLIENT_ID/SECRET.
    """
    container = container or Container()
    settings = container.settings()

    api_enabled = settings.ebay.has_credentials
    if not api_enabled:
        if settings.server.uses_api_for_active:
            settings.ebay.require_credentials()
        logger.warning("eBay API credentials not configured; /api/ebay-active disabled")
        assembler = container.assembler(api_sampler=None)
    else:
        assembler = container.assembler()

    app = web.Application()
    app[ASSEMBLER_KEY] = assembler

    app.router.add_get("/api/scrape-sold", scrape_sold)
    app.router.add_get("/api/scrape-active", scrape_active)
    if api_enabled:
        app.router.add_get("/api/ebay-active", ebay_active)
    app.router.add_get("/api/market-report", market_report)
    app.router.add_get("/health", health)

    return app
