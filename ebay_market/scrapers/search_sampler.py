"""Rendered-page sampler for eBay search results.

Samples sold/completed or active listings by rendering result pages in a
headless browser and parsing them. The browser session is acquired once per
sampling run and released on every exit path; pages are visited strictly in
order because each next-page link comes from the page before it.
"""

import asyncio
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from playwright.async_api import Error as PlaywrightError

from ..config import SamplingConfig, config
from ..errors import SamplingFailed
from ..models import Listing, Sample
from .base import BaseSampler, PageRenderer
from .ebay import build_search_url, parse_results_page
from .headless import HeadlessBrowser
from .normalizer import TitleFilterPolicy, normalize_records

RendererFactory = Callable[[], AbstractAsyncContextManager[PageRenderer]]


class RenderedPageSampler(BaseSampler):
    """Sampler over rendered eBay search-result pages.

    Stops when the sample reaches the cap, a page yields no valid listings,
    the page limit is reached, or there is no enabled next-page control.
    """

    def __init__(
        self,
        sold: bool,
        renderer_factory: RendererFactory | None = None,
        settings: SamplingConfig | None = None,
        policy: TitleFilterPolicy | None = None,
    ) -> None:
        """Initialize rendered-page sampler.

        Args:
            sold: Sample sold/completed listings when True, active ones otherwise.
            renderer_factory: Callable returning an async context manager that
                yields a PageRenderer; defaults to HeadlessBrowser.
            settings: Sampling bounds, defaults to the global configuration.
            policy: Title filter policy, defaults to the configured one.
        """
        settings = settings or config.sampling
        super().__init__("sold-pages" if sold else "active-pages", settings.sample_cap)
        self.sold = sold
        self.max_pages = settings.max_pages
        self.renderer_factory: RendererFactory = renderer_factory or HeadlessBrowser
        self.policy = policy

    async def sample(self, query: str, sample_cap: int | None = None) -> Sample:
        """Collect a bounded sample of listings from rendered pages.

        Args:
            query: Search keywords.
            sample_cap: Maximum sample size, never above the configured cap.

        Returns:
            Sample with listings and the page-reported total.

        Raises:
            SamplingFailed: Browser navigation or rendering failed.
        """
        cap = self._effective_cap(sample_cap)
        self._log_sampling_start(query, cap)
        url = build_search_url(query, sold=self.sold)

        try:
            async with self.renderer_factory() as renderer:
                sample = await self._collect(renderer, url, cap)
        except (PlaywrightError, asyncio.TimeoutError, OSError) as e:
            self._log_sampling_error(query, e)
            raise SamplingFailed(str(e)) from e

        self._log_sampling_success(query, sample)
        return sample

    async def _collect(self, renderer: PageRenderer, url: str, cap: int) -> Sample:
        """Walk result pages and accumulate normalized listings."""
        html = await renderer.render(url)
        page = parse_results_page(html, url)
        total = page.total_results
        self.logger.info(f"Total results available: {total}")

        items: list[Listing] = []
        for page_number in range(1, self.max_pages + 1):
            listings = normalize_records(page.records, self.policy)
            items.extend(listings)
            self.logger.info(
                f"Page {page_number}: {len(listings)} of {len(page.records)} records kept "
                f"(sample {len(items)}/{cap})"
            )

            if len(items) >= cap:
                break
            if not listings:
                self.logger.info(f"No listings on page {page_number}, stopping pagination")
                break
            if page_number >= self.max_pages or page.next_url is None:
                break

            next_url = page.next_url
            html = await renderer.render(next_url)
            page = parse_results_page(html, next_url)

        if total == 0 and items:
            self.logger.warning("No result count on page, using sample size as total")
            total = len(items)

        return Sample(items=items[:cap], estimated_total=total)
