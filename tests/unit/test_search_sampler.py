"""Tests for the rendered-page sampler.

A fake renderer serves canned result pages so pagination, stop conditions
and browser release can be checked without Playwright.
"""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from ebay_market.config import SamplingConfig
from ebay_market.errors import SamplingFailed
from ebay_market.models import Condition
from ebay_market.scrapers.normalizer import TitleFilterPolicy
from ebay_market.scrapers.search_sampler import RenderedPageSampler
from ebay_market.services.estimator import estimate
from tests.helpers import FakeRenderer, build_results_page, result_item, widget_items

NEXT_2 = "https://www.ebay.com/sch/i.html?_nkw=widget&_pgn=2"
NEXT_3 = "https://www.ebay.com/sch/i.html?_nkw=widget&_pgn=3"
NEXT_4 = "https://www.ebay.com/sch/i.html?_nkw=widget&_pgn=4"


def chrome_items(count: int) -> list[dict]:
    return [result_item("Shop on eBay", price="$20.00") for _ in range(count)]


def make_sampler(renderer: FakeRenderer, sold: bool = True) -> RenderedPageSampler:
    return RenderedPageSampler(
        sold=sold, renderer_factory=lambda: renderer, settings=SamplingConfig()
    )


@pytest.mark.asyncio
async def test_three_page_walk_and_extrapolation():
    """150 raw records over three pages, 10 of them page chrome."""
    pages = [
        build_results_page(
            chrome_items(10)
            + widget_items(20, condition="Brand New")
            + widget_items(30, start=20),
            total=500,
            next_href=NEXT_2,
        ),
        build_results_page(
            widget_items(20, condition="Brand New", start=50) + widget_items(35, start=70),
            total=500,
            next_href=NEXT_3,
        ),
        build_results_page(widget_items(35, start=105), total=500, next_href=NEXT_4),
    ]
    renderer = FakeRenderer(pages)

    sample = await make_sampler(renderer).sample("widget")

    assert renderer.urls[1:] == [NEXT_2, NEXT_3]
    assert "LH_Sold=1" in renderer.urls[0]
    assert sample.size == 140
    assert sample.estimated_total == 500
    assert sum(item.condition == Condition.NEW for item in sample.items) == 40
    assert sum(item.condition == Condition.USED for item in sample.items) == 100
    assert renderer.closed

    analytics = estimate(sample.items, sample.estimated_total)
    assert analytics.total.count == 500
    assert analytics.new.count == 143
    assert analytics.used.count == 357


@pytest.mark.asyncio
async def test_stops_when_cap_reached():
    """Reaching the cap stops pagination and the sample is truncated."""
    pages = [build_results_page(widget_items(50), total=900, next_href=NEXT_2)]
    renderer = FakeRenderer(pages)

    sample = await make_sampler(renderer).sample("widget", sample_cap=30)

    assert len(renderer.urls) == 1
    assert sample.size == 30
    assert sample.estimated_total == 900


@pytest.mark.asyncio
async def test_stops_on_page_without_listings():
    pages = [
        build_results_page(widget_items(5), total=80, next_href=NEXT_2),
        build_results_page(chrome_items(4), total=80, next_href=NEXT_3),
    ]
    renderer = FakeRenderer(pages)

    sample = await make_sampler(renderer).sample("widget")

    assert len(renderer.urls) == 2
    assert sample.size == 5


@pytest.mark.asyncio
async def test_stops_without_next_control():
    pages = [build_results_page(widget_items(12), total=12)]
    renderer = FakeRenderer(pages)

    sample = await make_sampler(renderer, sold=False).sample("widget")

    assert len(renderer.urls) == 1
    assert "LH_Sold" not in renderer.urls[0]
    assert sample.size == 12
    assert sample.estimated_total == 12


@pytest.mark.asyncio
async def test_stops_on_disabled_next_control():
    pages = [build_results_page(widget_items(12), total=40, next_href=NEXT_2, next_disabled=True)]
    renderer = FakeRenderer(pages)

    await make_sampler(renderer).sample("widget")

    assert len(renderer.urls) == 1


@pytest.mark.asyncio
async def test_missing_count_falls_back_to_sample_size():
    renderer = FakeRenderer([build_results_page(widget_items(7))])

    sample = await make_sampler(renderer).sample("widget")

    assert sample.estimated_total == 7


@pytest.mark.asyncio
async def test_empty_results_page():
    renderer = FakeRenderer([build_results_page([], total=0)])

    sample = await make_sampler(renderer).sample("widget")

    assert sample.size == 0
    assert sample.estimated_total == 0


@pytest.mark.asyncio
async def test_navigation_error_becomes_sampling_failed():
    """Browser errors surface as SamplingFailed and the session is released."""
    renderer = FakeRenderer([], error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))

    with pytest.raises(SamplingFailed, match="ERR_NAME_NOT_RESOLVED"):
        await make_sampler(renderer).sample("widget")

    assert renderer.closed


@pytest.mark.asyncio
async def test_timeout_on_later_page_releases_browser():
    pages = [build_results_page(widget_items(10), total=100, next_href=NEXT_2)]
    renderer = FakeRenderer(pages, error=asyncio.TimeoutError(), fail_on=2)

    with pytest.raises(SamplingFailed):
        await make_sampler(renderer).sample("widget")

    assert len(renderer.urls) == 2
    assert renderer.closed


def test_source_names():
    assert RenderedPageSampler(sold=True, settings=SamplingConfig()).get_source_name() == "sold-pages"
    assert RenderedPageSampler(sold=False, settings=SamplingConfig()).get_source_name() == "active-pages"


@pytest.mark.asyncio
async def test_short_title_dropped_under_lax_filter_config():
    """A nine-character title is dropped even when the filter file allows four."""
    page = build_results_page(
        [result_item("Desk lamp", price="$12.00")] + widget_items(5), total=6
    )
    renderer = FakeRenderer([page])
    sampler = RenderedPageSampler(
        sold=True,
        renderer_factory=lambda: renderer,
        settings=SamplingConfig(),
        policy=TitleFilterPolicy.from_config({"min_length": 4}),
    )

    sample = await sampler.sample("widget")

    assert sample.size == 5
    assert all(item.title.startswith("Acme Widget") for item in sample.items)
