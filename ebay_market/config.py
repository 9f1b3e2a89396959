"""Configuration management for the market pricing service.

Handles environment variables, the YAML title-filter policy and default
settings. Provides structured configuration classes for the eBay API
credentials, sampling bounds, the headless browser and the HTTP server.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

from .errors import CredentialsMissing


class EbayApiConfig(BaseSettings):
    """eBay Browse API access settings.

    Attributes:
        client_id: OAuth application identifier.
        client_secret: OAuth application secret.
        marketplace: Marketplace sent in X-EBAY-C-MARKETPLACE-ID.
        oauth_url: Client-credentials token endpoint.
        browse_url: Browse API item summary search endpoint.
        scope: OAuth scope requested with the application token.
        timeout: Per-request timeout in seconds.
        token_refresh_margin: Seconds before expiry at which a token is renewed.
    """
    client_id: str | None = Field(default=None, validation_alias="EBAY_CLIENT_ID")
    client_secret: str | None = Field(default=None, validation_alias="EBAY_CLIENT_SECRET")
    marketplace: str = Field(default="EBAY_US", validation_alias="EBAY_MARKETPLACE")
    oauth_url: str = "https://api.ebay.com/identity/v1/oauth2/token"
    browse_url: str = "https://api.ebay.com/buy/browse/v1/item_summary/search"
    scope: str = "https://api.ebay.com/oauth/api_scope"
    timeout: int = Field(default=20, validation_alias="EBAY_API_TIMEOUT")
    token_refresh_margin: int = 60

    @property
    def has_credentials(self) -> bool:
        """Whether both halves of the client credentials are configured."""
        return bool(self.client_id and self.client_secret)

    def require_credentials(self) -> tuple[str, str]:
        """Return the client credentials or fail.

        Returns:
            Tuple of (client_id, client_secret).

        Raises:
            CredentialsMissing: If either value is not configured.
        """
        if not self.client_id or not self.client_secret:
            raise CredentialsMissing(
                "Set EBAY_CLIENT_ID and EBAY_CLIENT_SECRET to use the eBay Browse API"
            )
        return self.client_id, self.client_secret


class SamplingConfig(BaseSettings):
    """Bounds applied to every sample.

    Attributes:
        sample_cap: Maximum number of listings kept per sample.
        max_pages: Maximum number of rendered result pages visited.
        api_page_size: Items requested per Browse API batch.
    """
    sample_cap: int = Field(default=150, validation_alias="SAMPLE_CAP")
    max_pages: int = Field(default=3, validation_alias="MAX_PAGES")
    api_page_size: int = Field(default=50, validation_alias="API_PAGE_SIZE")


class BrowserConfig(BaseSettings):
    """Headless browser settings for rendered search pages.

    Attributes:
        headless: Run Chromium without a window.
        navigation_timeout_ms: Timeout for a single page navigation.
        settle_seconds: Pause after navigation so late content can render.
        user_agent: User agent reported by the browser context.
    """
    headless: bool = Field(default=True, validation_alias="HEADLESS")
    navigation_timeout_ms: int = Field(default=30000, validation_alias="NAVIGATION_TIMEOUT_MS")
    settle_seconds: float = Field(default=3.0, validation_alias="PAGE_SETTLE_SECONDS")
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )


class ServerConfig(BaseSettings):
    """HTTP server configuration.

    Attributes:
        host: Interface the server binds to.
        port: Listening port.
        active_source: Active-listing pipeline used by the market report
            ("scrape" for rendered pages, "api" for the Browse API).
        log_level: Root logging level.
    """
    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=3023, validation_alias="PORT")
    active_source: str = Field(default="scrape", validation_alias="ACTIVE_SOURCE")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def uses_api_for_active(self) -> bool:
        """Whether the market report samples active listings through the API."""
        return self.active_source.strip().lower() == "api"


class Config:
    """Application configuration manager.

    Centralizes loading of environment-backed settings and the YAML title
    filter policy. Provides typed access to configuration sections for the
    samplers, the credential provider and the server.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to ebay_market/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.ebay = EbayApiConfig()
        self.sampling = SamplingConfig()
        self.browser = BrowserConfig()
        self.server = ServerConfig()

        self.title_filters = self._load_title_filters()

    def _load_title_filters(self) -> dict[str, Any]:
        """Load the title filter policy from YAML.

        Returns:
            Raw policy mapping, empty when the file is absent.
        """
        filters_path = self.config_dir / "title_filters.yml"
        if not filters_path.exists():
            return {}

        with open(filters_path) as f:
            data = yaml.safe_load(f)

        return data or {}


# Global configuration instance
config = Config()
