"""Global test configuration and fixtures.

Isolates the environment from real eBay credentials and provides shared
fixtures for sampler and pipeline tests.
"""

import pytest

from ebay_market.models import Condition, Sample
from tests.helpers import make_listing

TEST_ENV_UNSET = ["EBAY_CLIENT_ID", "EBAY_CLIENT_SECRET", "EBAY_MARKETPLACE", "SAMPLE_CAP"]


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Setup test environment variables for all tests."""
    for key in TEST_ENV_UNSET:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ACTIVE_SOURCE", "scrape")
    monkeypatch.setenv("PAGE_SETTLE_SECONDS", "0")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    yield


@pytest.fixture
def mixed_sample() -> Sample:
    """140 listings (40 New, 100 Used) against a reported total of 500."""
    items = [make_listing("40.00", Condition.NEW) for _ in range(40)]
    items += [make_listing("20.00", Condition.USED) for _ in range(100)]
    return Sample(items=items, estimated_total=500)
