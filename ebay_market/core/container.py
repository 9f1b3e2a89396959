"""Dependency-injection container.

Wires the samplers, the credential provider and the report assembler from a
single ``Config`` instance. Tests override individual providers to swap in
fake samplers without touching the HTTP layer.
"""

from dependency_injector import containers, providers

from ebay_market.config import config as app_config
from ebay_market.scrapers.browse_api import ApiSampler, BrowseApiClient
from ebay_market.scrapers.headless import HeadlessBrowser
from ebay_market.scrapers.search_sampler import RenderedPageSampler
from ebay_market.services.credentials import CredentialProvider
from ebay_market.services.market_report import MarketReportAssembler


class Container(containers.DeclarativeContainer):
    """DI container for the application."""

    settings = providers.Object(app_config)

    # Page rendering: a fresh browser per sampling run
    headless_browser = providers.Factory(HeadlessBrowser, settings=settings.provided.browser)

    # eBay API access
    credential_provider = providers.Singleton(CredentialProvider, settings=settings.provided.ebay)
    browse_client = providers.Singleton(
        BrowseApiClient, credentials=credential_provider, settings=settings.provided.ebay
    )

    # Samplers
    sold_sampler = providers.Singleton(
        RenderedPageSampler,
        sold=True,
        renderer_factory=headless_browser.provider,
        settings=settings.provided.sampling,
    )
    active_sampler = providers.Singleton(
        RenderedPageSampler,
        sold=False,
        renderer_factory=headless_browser.provider,
        settings=settings.provided.sampling,
    )
    api_sampler = providers.Singleton(
        ApiSampler, client=browse_client, settings=settings.provided.sampling
    )

    # Report assembly
    assembler = providers.Singleton(
        MarketReportAssembler,
        sold_sampler=sold_sampler,
        active_sampler=active_sampler,
        api_sampler=api_sampler,
        settings=settings.provided.server,
    )
