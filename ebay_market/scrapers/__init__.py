"""Listing samplers package.

Contains the sampling strategies and their building blocks:

- normalizer: raw record -> Listing conversion and the title filter policy
- ebay: search URL building and results-page parsing
- headless: Playwright page renderer
- search_sampler: RenderedPageSampler over rendered result pages
- browse_api: BrowseApiClient and ApiSampler over the eBay Browse API
"""

from .base import BaseSampler, PageRenderer, SamplerProtocol
from .browse_api import ApiSampler, BrowseApiClient
from .search_sampler import RenderedPageSampler

__all__ = [
    "SamplerProtocol",
    "PageRenderer",
    "BaseSampler",
    "RenderedPageSampler",
    "ApiSampler",
    "BrowseApiClient",
]
