"""Exception hierarchy for sampling and estimation.

Request-level errors (``InputMissing``) are rejected before sampling starts.
Pipeline-level errors (``SamplingFailed`` and its subclasses) are caught at
the pipeline boundary and turned into zero-analytics report fragments.
Record-level rejections (``ListingRejected``) only shrink the sample.
"""


class MarketDataError(Exception):
    """Base class for all market data errors."""


class InputMissing(MarketDataError):
    """No search keywords were supplied."""


class CredentialsMissing(MarketDataError):
    """eBay API client id or secret is not configured."""


class SamplingFailed(MarketDataError):
    """Navigation, network or timeout failure while collecting a sample."""


class TokenAcquisitionFailed(SamplingFailed):
    """The credential provider could not issue an access token."""


class TokenRejected(SamplingFailed):
    """The upstream API reported the bearer token as invalid."""


class ListingRejected(MarketDataError):
    """A raw record could not be turned into a listing."""


class FilteredNonItem(ListingRejected):
    """The record's title is page chrome, not an item."""


class NoPriceResolved(ListingRejected):
    """No currency-formatted price was found for the record."""
