"""eBay Browse API client and API-backed sampler.

The sampler first asks for a single item to learn the API-reported total,
then pages through results with offset pagination until it holds
``min(sample_cap, total)`` items or the API signals the last page. A request
rejected for an invalid token is retried exactly once with a fresh token.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from ..config import EbayApiConfig, SamplingConfig, config
from ..errors import ListingRejected, SamplingFailed, TokenRejected
from ..models import Sample
from ..services.credentials import CredentialProvider
from ..services.http import create_session
from .base import BaseSampler
from .normalizer import TitleFilterPolicy, normalize_api_item

INVALID_TOKEN_ERROR_ID = 1001


@dataclass
class SearchBatch:
    """One page of Browse API search results.

    Attributes:
        total: API-reported total number of matching items.
        items: Raw item summaries in API order.
    """

    total: int = 0
    items: list[dict[str, Any]] = field(default_factory=list)


def _error_ids(payload: Any) -> set[int]:
    if not isinstance(payload, dict):
        return set()
    ids = set()
    for error in payload.get("errors") or []:
        try:
            ids.add(int(error.get("errorId")))
        except (TypeError, ValueError):
            continue
    return ids


def _error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        for error in payload.get("errors") or []:
            message = error.get("longMessage") or error.get("message")
            if message:
                return message
    return str(payload)[:200]


class BrowseApiClient:
    """Thin client for the Browse API item summary search."""

    def __init__(
        self, credentials: CredentialProvider, settings: EbayApiConfig | None = None
    ) -> None:
        self.credentials = credentials
        self.settings = settings or config.ebay

    async def search(
        self, session: aiohttp.ClientSession, query: str, limit: int, offset: int = 0
    ) -> SearchBatch:
        """Run one item summary search.

        Args:
            session: HTTP session for requests.
            query: Search keywords.
            limit: Number of items requested.
            offset: Index of the first item requested.

        Returns:
            SearchBatch with the reported total and the returned items.

        Raises:
            TokenRejected: The API reported the bearer token as invalid.
            TokenAcquisitionFailed: No token could be obtained.
            SamplingFailed: Network failure, timeout or error response.
        """
        token = await self.credentials.get_token(session)
        headers = {
            "Authorization": f"Bearer {token}",
            "X-EBAY-C-MARKETPLACE-ID": self.settings.marketplace,
        }
        params = {"q": query, "limit": str(limit), "offset": str(offset), "sort": "price"}

        try:
            async with session.get(
                self.settings.browse_url, headers=headers, params=params
            ) as response:
                payload = await response.json(content_type=None)
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise SamplingFailed(f"Browse API request failed: {e}") from e

        if status == 401 or INVALID_TOKEN_ERROR_ID in _error_ids(payload):
            raise TokenRejected(f"Browse API rejected token: {_error_message(payload)}")
        if status != 200:
            raise SamplingFailed(f"Browse API returned {status}: {_error_message(payload)}")

        return SearchBatch(
            total=int(payload.get("total") or 0),
            items=payload.get("itemSummaries") or [],
        )


class ApiSampler(BaseSampler):
    """Sampler over the Browse API item summary search."""

    def __init__(
        self,
        client: BrowseApiClient,
        settings: SamplingConfig | None = None,
        session_factory: Callable[[], aiohttp.ClientSession] = create_session,
        policy: TitleFilterPolicy | None = None,
    ) -> None:
        settings = settings or config.sampling
        super().__init__("browse-api", settings.sample_cap)
        self.client = client
        self.page_size = settings.api_page_size
        self.session_factory = session_factory
        self.policy = policy

    async def sample(self, query: str, sample_cap: int | None = None) -> Sample:
        """Collect a bounded sample of active listings from the API.

        Args:
            query: Search keywords.
            sample_cap: Maximum sample size, never above the configured cap.

        Returns:
            Sample with normalized listings and the API-reported total.

        Raises:
            SamplingFailed: Network failure, error response, or a token
                rejected twice in a row.
            TokenAcquisitionFailed: No token could be obtained.
        """
        cap = self._effective_cap(sample_cap)
        self._log_sampling_start(query, cap)

        try:
            async with self.session_factory() as session:
                count_batch = await self._search(session, query, limit=1, offset=0)
                total = count_batch.total
                self.logger.info(f"Browse API total available: {total} active listings")

                raw_items = await self._collect(session, query, target=min(cap, total))
        except SamplingFailed as e:
            self._log_sampling_error(query, e)
            raise

        listings = []
        for summary in raw_items:
            try:
                listings.append(normalize_api_item(summary, self.policy))
            except ListingRejected as e:
                self.logger.debug(f"Rejected API item ({type(e).__name__}): {e}")

        sample = Sample(items=listings, estimated_total=total)
        self._log_sampling_success(query, sample)
        return sample

    async def _collect(
        self, session: aiohttp.ClientSession, query: str, target: int
    ) -> list[dict[str, Any]]:
        """Page through results until the target size or the last page."""
        raw_items: list[dict[str, Any]] = []
        offset = 0
        while len(raw_items) < target:
            limit = min(self.page_size, target - len(raw_items))
            batch = await self._search(session, query, limit=limit, offset=offset)
            page_number = offset // self.page_size + 1
            self.logger.info(f"Browse API page {page_number}: {len(batch.items)} items")

            if not batch.items:
                break
            raw_items.extend(batch.items)
            offset += len(batch.items)

            if len(batch.items) < limit:
                self.logger.info("Last page reached, stopping pagination")
                break
        return raw_items[:target]

    async def _search(
        self, session: aiohttp.ClientSession, query: str, limit: int, offset: int
    ) -> SearchBatch:
        """Search once, retrying a single time with a fresh token if rejected."""
        try:
            return await self.client.search(session, query, limit=limit, offset=offset)
        except TokenRejected as e:
            self.logger.warning(f"Token rejected ({e}), retrying with a fresh token")
            self.client.credentials.invalidate()
            return await self.client.search(session, query, limit=limit, offset=offset)
