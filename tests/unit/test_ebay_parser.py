"""Tests for eBay search URL building and results-page parsing."""

from urllib.parse import parse_qs, urlparse

from ebay_market.scrapers.ebay import build_search_url, parse_results_page
from tests.helpers import build_results_page, result_item, widget_items

BASE_URL = "https://www.ebay.com/sch/i.html?_nkw=widget"


def test_build_search_url_sold():
    url = build_search_url("shure sm58", sold=True)
    query = parse_qs(urlparse(url).query)

    assert url.startswith("https://www.ebay.com/sch/i.html?")
    assert query["_nkw"] == ["shure sm58"]
    assert query["LH_Sold"] == ["1"]
    assert query["LH_Complete"] == ["1"]
    assert query["_sop"] == ["10"]


def test_build_search_url_active():
    query = parse_qs(urlparse(build_search_url("shure sm58", sold=False)).query)

    assert "LH_Sold" not in query
    assert "LH_Complete" not in query
    assert query["_sop"] == ["10"]


def test_parse_results_page():
    """Count heading, item records and next link are all extracted."""
    html = build_results_page(
        widget_items(3, condition="Brand New"),
        total=1234,
        next_href="/sch/i.html?_nkw=widget&_pgn=2",
    )

    page = parse_results_page(html, BASE_URL)

    assert page.total_results == 1234
    assert len(page.records) == 3
    first = page.records[0]
    assert first.title == "Acme Widget Deluxe Model 000"
    assert first.price_text == "$10.99"
    assert "Brand New" in first.container_text
    assert first.source_url == "https://www.ebay.com/itm/200000"
    assert page.next_url == "https://www.ebay.com/sch/i.html?_nkw=widget&_pgn=2"


def test_parse_results_page_without_count_or_next():
    page = parse_results_page(build_results_page(widget_items(2)), BASE_URL)

    assert page.total_results == 0
    assert len(page.records) == 2
    assert page.next_url is None


def test_disabled_next_control():
    html = build_results_page(
        widget_items(1), total=1, next_href="/sch/i.html?_pgn=2", next_disabled=True
    )

    assert parse_results_page(html, BASE_URL).next_url is None


def test_chrome_nodes_are_still_extracted():
    """Filtering is the normalizer's job; the parser reports every title node."""
    html = build_results_page(
        [result_item("Shop on eBay", price="$20.00"), *widget_items(1)], total=5
    )

    titles = [record.title for record in parse_results_page(html, BASE_URL).records]

    assert titles == ["Shop on eBay", "Acme Widget Deluxe Model 000"]


def test_container_fallback_to_ancestor_with_price():
    """Without a known item class the nearest ancestor mentioning $ is used."""
    html = (
        "<html><body><div class='card'><div class='inner'>"
        "<span class='su-styled-text primary default'>Vintage Acme Widget Lamp</span>"
        "</div><b>$42.00</b> Pre-Owned</div>"
        "</body></html>"
    )

    records = parse_results_page(html, BASE_URL).records

    assert len(records) == 1
    assert records[0].title == "Vintage Acme Widget Lamp"
    assert records[0].price_text is None
    assert "$42.00" in records[0].container_text
