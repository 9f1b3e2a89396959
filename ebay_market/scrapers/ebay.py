"""eBay search-results page parsing.

This module turns the HTML of a rendered eBay search-results page into raw
records: the reported total result count, one ``RawListing`` per title node,
and the URL behind the "next page" control. It also builds the search URLs
for sold and active queries.

Extraction mirrors how a reader scans the page: find every title node, climb
to the nearest item container, and read the price from a price-labelled
element inside it, keeping the container text for later fallback and
condition inference.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import urlencode, urljoin

from bs4 import BeautifulSoup, Tag

from ..models import RawListing

SEARCH_URL = "https://www.ebay.com/sch/i.html"

COUNT_SELECTOR = ".srp-controls__count-heading, .results-count, .srp-header__count"
TITLE_SELECTOR = "span.su-styled-text.primary.default"
CONTAINER_CLASSES = {"s-item", "srp-item", "item", "s-item-wrapper", "s-item-container"}
PRICE_SELECTORS = [
    ".s-item__price",
    ".item-price",
    ".srp-item-price",
    '[data-testid="item-price"]',
    ".s-item__detail--primary",
    ".s-item__detail",
    ".price",
]
NEXT_PAGE_SELECTOR = (
    '.pagination__next, .pagination-next, [aria-label="Next page"], .srp-pagination__next'
)

COUNT_RE = re.compile(r"(\d+(?:,\d+)*)")


@dataclass
class ResultsPage:
    """Parsed content of one rendered results page.

    Attributes:
        total_results: Result count from the heading, 0 when absent.
        records: Raw records in page order.
        next_url: Absolute URL of the next page, None when there is none
            or the control is disabled.
    """

    total_results: int = 0
    records: list[RawListing] = field(default_factory=list)
    next_url: str | None = None


def build_search_url(keywords: str, sold: bool) -> str:
    """Build the search URL for sold/completed or active listings.

    Args:
        keywords: Search terms.
        sold: True for sold and completed listings, False for active ones.

    Returns:
        Search URL sorted by newest first.
    """
    params = {"_nkw": keywords}
    if sold:
        params["LH_Sold"] = "1"
        params["LH_Complete"] = "1"
    params["_sop"] = "10"
    return f"{SEARCH_URL}?{urlencode(params)}"


def parse_total_results(soup: BeautifulSoup) -> int:
    """Read the total result count from the count heading."""
    heading = soup.select_one(COUNT_SELECTOR)
    if heading is None:
        return 0
    match = COUNT_RE.search(heading.get_text(" ", strip=True))
    if not match:
        return 0
    return int(match.group(1).replace(",", ""))


def _is_item_container(tag: Tag) -> bool:
    classes = set(tag.get("class") or [])
    return bool(classes & CONTAINER_CLASSES) or tag.get("data-view") == "item"


def _find_container(title_node: Tag) -> Tag | None:
    """Find the element holding both the title and its price."""
    container = title_node.find_parent(_is_item_container)
    if container is not None:
        return container

    parent = title_node.parent
    while parent is not None and "$" not in parent.get_text():
        parent = parent.parent
    return parent if isinstance(parent, Tag) else None


def _find_price_text(container: Tag) -> str | None:
    for selector in PRICE_SELECTORS:
        element = container.select_one(selector)
        if element is not None and "$" in element.get_text():
            return element.get_text(" ", strip=True)
    return None


def _find_link(container: Tag) -> str | None:
    link = container.select_one('a[href*="ebay.com"]')
    if link is None:
        return None
    return link.get("href")


def parse_records(soup: BeautifulSoup) -> list[RawListing]:
    """Extract one raw record per title node.

    Title nodes without any enclosing container that mentions a price are
    skipped here; everything else is left to the normalizer.
    """
    records: list[RawListing] = []
    for title_node in soup.select(TITLE_SELECTOR):
        container = _find_container(title_node)
        if container is None:
            continue
        records.append(
            RawListing(
                title=title_node.get_text(" ", strip=True),
                container_text=container.get_text(" ", strip=True),
                price_text=_find_price_text(container),
                source_url=_find_link(container),
            )
        )
    return records


def parse_next_url(soup: BeautifulSoup, base_url: str) -> str | None:
    """Resolve the next-page control to an absolute URL.

    Returns:
        URL of the next page, or None when the control is missing, disabled
        or has no target.
    """
    control = soup.select_one(NEXT_PAGE_SELECTOR)
    if control is None or control.get("aria-disabled") == "true":
        return None
    href = control.get("href")
    if not href:
        anchor = control.find("a", href=True)
        href = anchor.get("href") if anchor else None
    if not href:
        return None
    return urljoin(base_url, href)


def parse_results_page(html: str, base_url: str = SEARCH_URL) -> ResultsPage:
    """Parse a rendered results page.

    Args:
        html: Page HTML after client-side rendering.
        base_url: URL the page was loaded from, for resolving relative links.

    Returns:
        ResultsPage with total count, raw records and next-page URL.
    """
    soup = BeautifulSoup(html, "lxml")
    return ResultsPage(
        total_results=parse_total_results(soup),
        records=parse_records(soup),
        next_url=parse_next_url(soup, base_url),
    )
