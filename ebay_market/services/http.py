"""HTTP session factory for eBay API access."""

import aiohttp

from ..config import config


def create_session(timeout: int | None = None) -> aiohttp.ClientSession:
    """Create configured aiohttp session for eBay API calls.

    Args:
        timeout: Total per-request timeout in seconds, defaults to the
            configured API timeout.

    Returns:
        aiohttp.ClientSession: Configured HTTP session for making requests.
    """
    connector = aiohttp.TCPConnector(limit=20, limit_per_host=10)
    client_timeout = aiohttp.ClientTimeout(total=timeout or config.ebay.timeout)

    headers = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
        "User-Agent": "ebay-market/1.0",
    }

    return aiohttp.ClientSession(connector=connector, timeout=client_timeout, headers=headers)
