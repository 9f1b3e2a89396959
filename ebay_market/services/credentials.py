"""OAuth application-token provider for the eBay Browse API.

Holds the process-wide application token and renews it with the
client-credentials grant when it is missing or close to expiry. Concurrent
callers share one in-flight refresh.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import aiohttp

from ..config import EbayApiConfig, config
from ..errors import CredentialsMissing, TokenAcquisitionFailed

logger = logging.getLogger(__name__)


class CredentialProvider:
    """Client-credentials token cache.

    Attributes:
        settings: eBay API settings with client id, secret and endpoints.
    """

    def __init__(self, settings: EbayApiConfig | None = None) -> None:
        self.settings = settings or config.ebay
        self._token: str | None = None
        self._expires_at: datetime | None = None
        self._refresh_lock = asyncio.Lock()

    def _has_fresh_token(self) -> bool:
        return (
            self._token is not None
            and self._expires_at is not None
            and datetime.now(UTC) < self._expires_at
        )

    async def get_token(self, session: aiohttp.ClientSession) -> str:
        """Return a valid bearer token, fetching a new one when needed.

        Args:
            session: HTTP session used for the token request.

        Returns:
            Access token string.

        Raises:
            TokenAcquisitionFailed: Credentials missing or token endpoint failed.
        """
        if self._has_fresh_token():
            return self._token  # type: ignore[return-value]

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if self._has_fresh_token():
                return self._token  # type: ignore[return-value]
            return await self._fetch_token(session)

    def invalidate(self) -> None:
        """Drop the held token so the next call fetches a fresh one."""
        logger.info("Invalidating eBay application token")
        self._token = None
        self._expires_at = None

    async def _fetch_token(self, session: aiohttp.ClientSession) -> str:
        """Request a new application token."""
        try:
            client_id, client_secret = self.settings.require_credentials()
        except CredentialsMissing as e:
            raise TokenAcquisitionFailed(str(e)) from e

        data = {"grant_type": "client_credentials", "scope": self.settings.scope}
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout)

        try:
            logger.info("Requesting eBay application token...")
            async with session.post(
                self.settings.oauth_url,
                data=data,
                auth=aiohttp.BasicAuth(client_id, client_secret),
                timeout=timeout,
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise TokenAcquisitionFailed(
                        f"Token endpoint returned {response.status}: {error_text}"
                    )
                payload = await response.json()

            token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 7200))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error requesting eBay token: {e}")
            raise TokenAcquisitionFailed(f"Token request failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed eBay token response: {e}")
            raise TokenAcquisitionFailed(f"Malformed token response: {e}") from e

        lifetime = max(expires_in - self.settings.token_refresh_margin, 0)
        self._token = token
        self._expires_at = datetime.now(UTC) + timedelta(seconds=lifetime)
        logger.info(f"eBay token acquired, valid for {expires_in}s")
        return token
