"""Sold/active pipelines and market report assembly.

Each pipeline runs sampler -> normalizer -> estimator for one signal and
converts any failure into a zero-analytics fragment at its own boundary. The
market report runs the sold and active pipelines concurrently and derives the
sell-through rate from their reported totals.
"""

import asyncio
import logging
from decimal import Decimal

from .. import messages
from ..config import ServerConfig, config
from ..errors import InputMissing, MarketDataError
from ..models import ActiveReport, MarketReport, SoldReport
from ..scrapers.base import SamplerProtocol
from .estimator import estimate

logger = logging.getLogger(__name__)


def require_keywords(keywords: str | None) -> str:
    """Validate search keywords.

    Raises:
        InputMissing: Keywords are absent or blank.
    """
    if keywords is None or not keywords.strip():
        raise InputMissing(messages.KEYWORDS_REQUIRED)
    return keywords.strip()


def sell_through_rate(total_sold: int, total_active: int) -> Decimal:
    """Sold volume as a percentage of active volume, 0 when nothing is active."""
    if total_active <= 0:
        return Decimal("0")
    return Decimal(total_sold) / Decimal(total_active) * 100


def sell_through_band(rate: Decimal) -> str:
    """Classify a sell-through rate for display."""
    if rate < 20:
        return messages.BAND_LOW
    if rate <= 50:
        return messages.BAND_MODERATE
    if rate < 100:
        return messages.BAND_STRONG
    return messages.BAND_VERY_STRONG


class MarketReportAssembler:
    """Runs the sold and active pipelines and composes market reports.

    Responsibilities:
    - Validate keywords before any sampling
    - Run each pipeline and isolate its failures
    - Run sold and active pipelines concurrently for the combined report
    - Derive the sell-through rate and its display band
    """

    def __init__(
        self,
        sold_sampler: SamplerProtocol,
        active_sampler: SamplerProtocol,
        api_sampler: SamplerProtocol | None = None,
        settings: ServerConfig | None = None,
    ) -> None:
        """Initialize the assembler.

        Args:
            sold_sampler: Sampler over sold/completed listings.
            active_sampler: Sampler over active listings on rendered pages.
            api_sampler: Browse API sampler, None when credentials are absent.
            settings: Server settings selecting the active source.
        """
        self.sold_sampler = sold_sampler
        self.active_sampler = active_sampler
        self.api_sampler = api_sampler
        self.settings = settings or config.server

    async def sold_report(self, keywords: str | None) -> SoldReport:
        """Run the sold pipeline.

        Returns:
            SoldReport; on any failure a zero-analytics fragment with a message.
        """
        try:
            query = require_keywords(keywords)
        except InputMissing as e:
            return SoldReport.failed(str(e))

        try:
            sample = await self.sold_sampler.sample(query)
        except MarketDataError as e:
            logger.error(f"Sold pipeline failed for '{query}': {e}")
            return SoldReport.failed(messages.SOLD_FAILED.format(error=e))
        except Exception as e:
            logger.exception(f"Unexpected error in sold pipeline for '{query}'")
            return SoldReport.failed(messages.SOLD_FAILED.format(error=e))

        return SoldReport(
            success=True,
            message=messages.SOLD_SUCCESS.format(
                total=sample.estimated_total, sampled=sample.size
            ),
            analytics=estimate(sample.items, sample.estimated_total),
            items=sample.items,
            total_sold=sample.estimated_total,
        )

    async def active_report(self, keywords: str | None) -> ActiveReport:
        """Run the active pipeline over rendered pages."""
        try:
            query = require_keywords(keywords)
        except InputMissing as e:
            return ActiveReport.failed(str(e))

        try:
            sample = await self.active_sampler.sample(query)
        except MarketDataError as e:
            logger.error(f"Active pipeline failed for '{query}': {e}")
            return ActiveReport.failed(messages.ACTIVE_FAILED.format(error=e))
        except Exception as e:
            logger.exception(f"Unexpected error in active pipeline for '{query}'")
            return ActiveReport.failed(messages.ACTIVE_FAILED.format(error=e))

        return ActiveReport(
            success=True,
            message=messages.ACTIVE_SUCCESS.format(
                total=sample.estimated_total, sampled=sample.size
            ),
            analytics=estimate(sample.items, sample.estimated_total),
            items=sample.items,
            total_active=sample.estimated_total,
        )

    async def api_active_report(
        self, keywords: str | None, limit: int | None = None
    ) -> ActiveReport:
        """Run the active pipeline over the Browse API.

        Args:
            keywords: Search keywords.
            limit: Optional lower sample cap.
        """
        source = messages.API_SOURCE
        try:
            query = require_keywords(keywords)
        except InputMissing as e:
            return ActiveReport.failed(str(e), source=source)

        if self.api_sampler is None:
            return ActiveReport.failed(messages.API_UNAVAILABLE, source=source)

        try:
            sample = await self.api_sampler.sample(query, sample_cap=limit)
        except MarketDataError as e:
            logger.error(f"API active pipeline failed for '{query}': {e}")
            return ActiveReport.failed(messages.API_ACTIVE_FAILED.format(error=e), source=source)
        except Exception as e:
            logger.exception(f"Unexpected error in API active pipeline for '{query}'")
            return ActiveReport.failed(messages.API_ACTIVE_FAILED.format(error=e), source=source)

        return ActiveReport(
            success=True,
            message=messages.API_ACTIVE_SUCCESS.format(
                total=sample.estimated_total, sampled=sample.size
            ),
            analytics=estimate(sample.items, sample.estimated_total),
            items=sample.items,
            total_active=sample.estimated_total,
            sampled_active=sample.size,
            source=source,
        )

    async def market_report(self, keywords: str | None) -> MarketReport:
        """Run sold and active pipelines concurrently and combine them.

        Returns:
            MarketReport; never raises for pipeline failures.
        """
        if self.settings.uses_api_for_active and self.api_sampler is not None:
            active_pipeline = self.api_active_report(keywords)
        else:
            active_pipeline = self.active_report(keywords)

        sold, active = await asyncio.gather(self.sold_report(keywords), active_pipeline)

        rate = sell_through_rate(sold.total_sold, active.total_active)
        logger.info(
            f"Sell-through for '{keywords}': {sold.total_sold} sold / "
            f"{active.total_active} active = {rate:.1f}%"
        )
        return MarketReport(
            success=sold.success or active.success,
            sold=sold,
            active=active,
            sell_through_rate=rate,
            sell_through_band=sell_through_band(rate),
        )
