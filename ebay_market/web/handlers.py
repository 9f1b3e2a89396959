"""HTTP request handlers.

Every endpoint answers HTTP 200 with a JSON body carrying a ``success`` flag;
failures are reported in-band so callers can always compose the sold and
active fragments themselves.
"""

import logging

from aiohttp import web

from ..services.market_report import MarketReportAssembler

logger = logging.getLogger(__name__)

ASSEMBLER_KEY = web.AppKey("assembler", MarketReportAssembler)


def _parse_limit(raw: str | None) -> int | None:
    """Parse the optional sample limit, ignoring malformed values."""
    if raw is None or raw == "":
        return None
    try:
        limit = int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed limit: {raw!r}")
        return None
    return limit if limit > 0 else None


async def scrape_sold(request: web.Request) -> web.Response:
    """GET /api/scrape-sold?keywords=... - sold listings from rendered pages."""
    keywords = request.query.get("keywords")
    logger.info(f"Sold listings search for: {keywords}")
    report = await request.app[ASSEMBLER_KEY].sold_report(keywords)
    return web.json_response(report.to_json_dict())


async def scrape_active(request: web.Request) -> web.Response:
    """GET /api/scrape-active?keywords=... - active listings from rendered pages."""
    keywords = request.query.get("keywords")
    logger.info(f"Active listings search for: {keywords}")
    report = await request.app[ASSEMBLER_KEY].active_report(keywords)
    return web.json_response(report.to_json_dict())


async def ebay_active(request: web.Request) -> web.Response:
    """GET /api/ebay-active?keywords=...&limit=n - active listings via the Browse API."""
    keywords = request.query.get("keywords")
    limit = _parse_limit(request.query.get("limit"))
    logger.info(f"eBay API active search for: {keywords} (limit {limit})")
    report = await request.app[ASSEMBLER_KEY].api_active_report(keywords, limit=limit)
    return web.json_response(report.to_json_dict())


async def market_report(request: web.Request) -> web.Response:
    """GET /api/market-report?keywords=... - sold + active with sell-through rate."""
    keywords = request.query.get("keywords")
    logger.info(f"Market report for: {keywords}")
    report = await request.app[ASSEMBLER_KEY].market_report(keywords)
    return web.json_response(report.to_json_dict())


async def health(request: web.Request) -> web.Response:
    """GET /health - liveness check."""
    return web.json_response({"status": "ok"})
