"""Data models for the market pricing service.

Defines Pydantic models for raw search records, normalized listings, samples,
per-segment statistics and the report fragments returned by the HTTP API.
Report models serialize with camelCase keys and money values as JSON numbers.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Condition(str, Enum):
    """Item condition as reported in search results."""

    NEW = "New"
    USED = "Used"
    REFURBISHED = "Refurbished"


class ApiModel(BaseModel):
    """Base for models exposed over HTTP (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump the model as a JSON-compatible dict with wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RawListing(BaseModel):
    """Unvalidated record extracted from a rendered results page.

    Attributes:
        title: Text of the title node, untrimmed.
        container_text: Full text of the nearest item container.
        price_text: Text of the price-labelled sub-element, if one was found.
        source_url: Link to the item page, if present.
    """

    title: str
    container_text: str = ""
    price_text: str | None = None
    source_url: str | None = None


class Listing(ApiModel):
    """Normalized item listing.

    Attributes:
        title: Trimmed item title, at least 10 characters.
        price: Item price in USD, always positive.
        condition: New, Used or Refurbished.
        source_url: Item page URL (absent for unlinked records).
        image_url: Primary image URL (API listings only).
        item_id: Marketplace item identifier (API listings only).
        buying_format: "Auction" or "Buy It Now" (API listings only).
    """

    title: str = Field(min_length=10)
    price: Money = Field(gt=0)
    condition: Condition
    source_url: str | None = None
    image_url: str | None = None
    item_id: str | None = None
    buying_format: str | None = None


class Sample(BaseModel):
    """Bounded set of listings collected for one query from one source.

    Attributes:
        items: Listings in the order they were collected.
        estimated_total: Source-reported total result count.
    """

    items: list[Listing] = Field(default_factory=list)
    estimated_total: int = Field(default=0, ge=0)

    @property
    def size(self) -> int:
        """Number of listings actually sampled."""
        return len(self.items)


class SegmentStats(ApiModel):
    """Statistics for one segment (total, new or used).

    ``count`` is an extrapolated population figure; the price fields come
    from the sampled prices only and are zero for an empty segment.
    """

    count: int = Field(default=0, ge=0)
    highest: Money = Field(default=Decimal("0"), ge=0)
    lowest: Money = Field(default=Decimal("0"), ge=0)
    average: Money = Field(default=Decimal("0"), ge=0)


class SegmentAnalytics(ApiModel):
    """Per-segment statistics for one sample."""

    total: SegmentStats = Field(default_factory=SegmentStats)
    new: SegmentStats = Field(default_factory=SegmentStats)
    used: SegmentStats = Field(default_factory=SegmentStats)


class SoldReport(ApiModel):
    """Sold-listings report fragment.

    Attributes:
        success: Whether the sold pipeline completed.
        message: Human-readable outcome.
        analytics: Segment statistics (all zero on failure).
        items: Sampled listings.
        total_sold: Source-reported number of sold listings.
    """

    success: bool
    message: str
    analytics: SegmentAnalytics = Field(default_factory=SegmentAnalytics)
    items: list[Listing] = Field(default_factory=list)
    total_sold: int = 0

    @classmethod
    def failed(cls, message: str) -> "SoldReport":
        """Zero-analytics fragment for a failed or rejected request."""
        return cls(success=False, message=message)


class ActiveReport(ApiModel):
    """Active-listings report fragment.

    Attributes:
        success: Whether the active pipeline completed.
        message: Human-readable outcome.
        analytics: Segment statistics (all zero on failure).
        items: Sampled listings.
        total_active: Source-reported number of active listings.
        sampled_active: Sample size (API source only).
        source: Data source label (API source only).
    """

    success: bool
    message: str
    analytics: SegmentAnalytics = Field(default_factory=SegmentAnalytics)
    items: list[Listing] = Field(default_factory=list)
    total_active: int = 0
    sampled_active: int | None = None
    source: str | None = None

    @classmethod
    def failed(cls, message: str, source: str | None = None) -> "ActiveReport":
        """Zero-analytics fragment for a failed or rejected request."""
        return cls(success=False, message=message, source=source)


class MarketReport(ApiModel):
    """Sold and active fragments combined with the sell-through rate.

    Attributes:
        success: True when at least one pipeline completed.
        sold: Sold-listings fragment.
        active: Active-listings fragment.
        sell_through_rate: Sold total as a percentage of the active total.
        sell_through_band: Presentation band for the rate.
    """

    success: bool
    sold: SoldReport
    active: ActiveReport
    sell_through_rate: Money = Decimal("0")
    sell_through_band: str
