"""Report message templates and presentation constants.

Centralizes every human-readable message returned in report fragments so the
HTTP layer and the pipelines stay consistent.
"""

# Request validation
KEYWORDS_REQUIRED = "Keywords required"

# Sold pipeline
SOLD_SUCCESS = "Found {total} total sold listings (analyzed {sampled} for pricing)"
SOLD_FAILED = "Scraping failed: {error}"

# Active pipeline (rendered pages)
ACTIVE_SUCCESS = "Found {total} total active listings (analyzed {sampled} for pricing)"
ACTIVE_FAILED = "Active search failed: {error}"

# Active pipeline (Browse API)
API_SOURCE = "eBay API"
API_ACTIVE_SUCCESS = (
    "Found {total} total active listings via eBay API (sampled {sampled} for analytics)"
)
API_ACTIVE_FAILED = "eBay API search failed: {error}"
API_UNAVAILABLE = "eBay API credentials are not configured"

# Sell-through presentation bands
BAND_LOW = "low"
BAND_MODERATE = "moderate"
BAND_STRONG = "strong"
BAND_VERY_STRONG = "very strong"
