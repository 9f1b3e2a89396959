"""Base sampler protocol and shared sampler plumbing.

Defines the interface every sampling strategy implements so the report
assembler can run rendered-page and API sampling interchangeably.
"""

import logging
from typing import Protocol

from ..models import Sample

logger = logging.getLogger(__name__)


class SamplerProtocol(Protocol):
    """Protocol for listing samplers.

    Methods:
        sample: Collect a bounded sample and the source-reported total.
        get_source_name: Get source identifier for logs and reports.
    """

    async def sample(self, query: str, sample_cap: int | None = None) -> Sample:
        """Collect a bounded sample of listings for a query.

        Args:
            query: Search keywords.
            sample_cap: Maximum sample size, defaults to the configured cap.

        Returns:
            Sample with listings and the estimated total result count.

        Raises:
            SamplingFailed: Navigation, network or timeout failure.
        """
        ...

    def get_source_name(self) -> str:
        """Get the source name identifier."""
        ...


class PageRenderer(Protocol):
    """Rendered-page source used by the rendered-page sampler."""

    async def render(self, url: str) -> str:
        """Load a URL and return its rendered HTML."""
        ...


class BaseSampler:
    """Base class providing common functionality for samplers."""

    def __init__(self, source_name: str, sample_cap: int):
        """Initialize base sampler.

        Args:
            source_name: Name of the source (e.g., 'sold-pages', 'browse-api').
            sample_cap: Default maximum sample size.
        """
        self.source_name = source_name
        self.sample_cap = sample_cap
        self.logger = logging.getLogger(f"{__name__}.{source_name}")

    def get_source_name(self) -> str:
        """Get the source name identifier."""
        return self.source_name

    def _effective_cap(self, sample_cap: int | None) -> int:
        if sample_cap is None:
            return self.sample_cap
        return max(0, min(sample_cap, self.sample_cap))

    def _log_sampling_start(self, query: str, cap: int) -> None:
        self.logger.info(f"Sampling {self.source_name} for '{query}' (cap {cap})")

    def _log_sampling_success(self, query: str, sample: Sample) -> None:
        self.logger.info(
            f"Sampled {sample.size} listings from {self.source_name} for '{query}' "
            f"(reported total {sample.estimated_total})"
        )

    def _log_sampling_error(self, query: str, error: Exception) -> None:
        self.logger.error(f"Failed to sample {self.source_name} for '{query}': {error}")
