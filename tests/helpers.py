"""Builders and fakes shared by the unit and integration tests."""

from decimal import Decimal
from html import escape

from ebay_market.models import Condition, Listing, Sample


def make_listing(
    price: str = "25.00",
    condition: Condition = Condition.USED,
    title: str = "Acme Widget Deluxe Model",
) -> Listing:
    """Build a valid listing with sensible defaults."""
    return Listing(title=title, price=Decimal(price), condition=condition)


def make_api_item(
    index: int,
    price: str = "25.00",
    condition_id: str | None = "3000",
    condition: str | None = "Used",
    buying_options: list[str] | None = None,
) -> dict:
    """Build a Browse API item summary."""
    item = {
        "itemId": f"v1|{100000 + index}|0",
        "title": f"Acme Widget Deluxe Model {index:03d}",
        "price": {"value": price, "currency": "USD"},
        "conditionId": condition_id,
        "condition": condition,
        "itemWebUrl": f"https://www.ebay.com/itm/{100000 + index}",
        "image": {"imageUrl": f"https://i.ebayimg.com/images/{index}.jpg"},
        "buyingOptions": buying_options or ["FIXED_PRICE"],
    }
    return {key: value for key, value in item.items() if value is not None}


def result_item(
    title: str, price: str = "$25.00", condition: str = "Pre-Owned", url: str | None = None
) -> dict:
    """Describe one item card for ``build_results_page``."""
    return {"title": title, "price": price, "condition": condition, "url": url}


def widget_items(count: int, condition: str = "Pre-Owned", start: int = 0) -> list[dict]:
    """Item cards with distinct, valid titles."""
    return [
        result_item(
            f"Acme Widget Deluxe Model {start + i:03d}",
            price=f"${10 + (start + i) % 40}.99",
            condition=condition,
            url=f"https://www.ebay.com/itm/{200000 + start + i}",
        )
        for i in range(count)
    ]


def build_results_page(
    items: list[dict],
    total: int | None = None,
    next_href: str | None = None,
    next_disabled: bool = False,
) -> str:
    """Render minimal search-results HTML in eBay's markup."""
    parts = ["<html><body>"]
    if total is not None:
        parts.append(
            f'<h1 class="srp-controls__count-heading"><span>{total:,}</span> results for widget</h1>'
        )
    parts.append('<ul class="srp-results">')
    for item in items:
        title = f'<span class="su-styled-text primary default">{escape(item["title"])}</span>'
        if item.get("url"):
            title = f'<a href="{item["url"]}">{title}</a>'
        parts.append(
            '<li class="s-item"><div class="s-item__info">'
            f"{title}"
            f'<span class="SECONDARY_INFO">{escape(item["condition"])}</span>'
            f'<span class="s-item__price">{escape(item["price"])}</span>'
            "</div></li>"
        )
    parts.append("</ul>")
    if next_href is not None or next_disabled:
        disabled = ' aria-disabled="true"' if next_disabled else ""
        href = f' href="{escape(next_href)}"' if next_href else ""
        parts.append(f'<a class="pagination__next"{href}{disabled}>Next</a>')
    parts.append("</body></html>")
    return "".join(parts)


class FakeRenderer:
    """Async context manager serving canned pages in request order."""

    def __init__(self, pages: list[str], error: Exception | None = None, fail_on: int = 1):
        self.pages = pages
        self.error = error
        self.fail_on = fail_on
        self.urls: list[str] = []
        self.entered = False
        self.closed = False

    async def __aenter__(self) -> "FakeRenderer":
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.closed = True
        return False

    async def render(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None and len(self.urls) == self.fail_on:
            raise self.error
        return self.pages[len(self.urls) - 1]


class StaticSampler:
    """Sampler returning a fixed sample or raising a fixed error."""

    def __init__(self, sample: Sample | None = None, error: Exception | None = None, name: str = "static"):
        self.result = sample or Sample()
        self.error = error
        self.name = name
        self.calls: list[tuple[str, int | None]] = []

    async def sample(self, query: str, sample_cap: int | None = None) -> Sample:
        self.calls.append((query, sample_cap))
        if self.error is not None:
            raise self.error
        return self.result

    def get_source_name(self) -> str:
        return self.name


class DummySession:
    """Stand-in for an aiohttp session used only as a context manager."""

    async def __aenter__(self) -> "DummySession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

