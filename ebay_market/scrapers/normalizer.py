"""Listing normalization for raw search records.

Turns raw records (title text plus the text of the surrounding item
container) into validated ``Listing`` objects. Titles are screened by a
``TitleFilterPolicy`` because rendered result pages expose UI chrome through
the same text nodes as item titles; the policy is built from
``config/title_filters.yml`` and can be swapped without touching the samplers.
"""

import logging
import re
from collections.abc import Callable, Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from ..config import config
from ..errors import FilteredNonItem, ListingRejected, NoPriceResolved
from ..models import Condition, Listing, RawListing

logger = logging.getLogger(__name__)

PRICE_RE = re.compile(r"\$\s?(\d[\d,]*(?:\.\d+)?)")

MIN_TITLE_LENGTH = 10
SINGLE_WORD_MAX_LENGTH = 20

TitlePredicate = Callable[[str], bool]


def parse_price(text: str | None) -> Decimal | None:
    """Extract the first dollar amount from text.

    Args:
        text: Text that may contain a price such as "$1,299.99".

    Returns:
        Positive Decimal price, or None when no usable amount is present.
    """
    if not text:
        return None
    match = PRICE_RE.search(text)
    if not match:
        return None
    try:
        price = Decimal(match.group(1).replace(",", ""))
    except InvalidOperation:
        return None
    return price if price > 0 else None


def infer_condition(container_text: str) -> Condition:
    """Infer item condition from container text.

    "brand new" / "new condition" win over "refurbished"; anything else is Used.
    """
    text = container_text.lower()
    if "brand new" in text or "new condition" in text:
        return Condition.NEW
    if "refurbished" in text:
        return Condition.REFURBISHED
    return Condition.USED


class TitleFilterPolicy:
    """Predicate list deciding whether a text node is an item title.

    Each predicate is paired with a short label used in debug logs. The
    length and single-word rules are always applied; everything else comes
    from configuration.
    """

    def __init__(
        self,
        predicates: Iterable[tuple[str, TitlePredicate]] = (),
        min_length: int = MIN_TITLE_LENGTH,
        single_word_max_length: int = SINGLE_WORD_MAX_LENGTH,
    ) -> None:
        # Listing.title enforces the same floor, so a laxer value cannot apply
        self.min_length = max(min_length, MIN_TITLE_LENGTH)
        self.single_word_max_length = single_word_max_length
        self.predicates: list[tuple[str, TitlePredicate]] = list(predicates)

    @classmethod
    def from_config(cls, data: dict[str, Any]) -> "TitleFilterPolicy":
        """Build a policy from the YAML mapping.

        Args:
            data: Mapping with optional ``contains``, ``exact`` and ``patterns``
                lists plus ``min_length`` / ``single_word_max_length``.

        Returns:
            Configured TitleFilterPolicy.
        """
        predicates: list[tuple[str, TitlePredicate]] = []

        for phrase in data.get("contains", []):
            predicates.append((f"contains '{phrase}'", lambda t, p=phrase: p in t))

        exact = frozenset(data.get("exact", []))
        if exact:
            predicates.append(("exact label", lambda t: t in exact))

        for entry in data.get("patterns", []):
            flags = re.IGNORECASE if entry.get("ignore_case") else 0
            regex = re.compile(entry["pattern"], flags)
            predicates.append((f"pattern {regex.pattern}", lambda t, r=regex: bool(r.search(t))))

        return cls(
            predicates,
            min_length=data.get("min_length", MIN_TITLE_LENGTH),
            single_word_max_length=data.get("single_word_max_length", SINGLE_WORD_MAX_LENGTH),
        )

    def rejection_reason(self, title: str) -> str | None:
        """Return why a trimmed title is not an item, or None if it is."""
        if not title:
            return "empty title"
        if len(title) < self.min_length:
            return f"shorter than {self.min_length} characters"
        if (
            len(title) < self.single_word_max_length
            and " " not in title
            and "-" not in title
        ):
            return "single word"
        for label, predicate in self.predicates:
            if predicate(title):
                return label
        return None

    def is_item_title(self, title: str) -> bool:
        return self.rejection_reason(title.strip()) is None


title_filter_policy = TitleFilterPolicy.from_config(config.title_filters)


def normalize_listing(raw: RawListing, policy: TitleFilterPolicy | None = None) -> Listing:
    """Convert a raw page record into a Listing.

    The price is taken from the price-labelled sub-element when it holds a
    dollar amount, otherwise from the whole container text.

    Args:
        raw: Record extracted from a results page.
        policy: Title filter policy, defaults to the configured one.

    Returns:
        Validated Listing.

    Raises:
        FilteredNonItem: Title is empty, too short or matches the denylist.
        NoPriceResolved: No dollar amount found for the record.
    """
    policy = policy or title_filter_policy
    title = raw.title.strip()

    reason = policy.rejection_reason(title)
    if reason:
        raise FilteredNonItem(f"{title!r}: {reason}")

    price = parse_price(raw.price_text) or parse_price(raw.container_text)
    if price is None:
        raise NoPriceResolved(f"{title!r}: no price in container")

    return Listing(
        title=title,
        price=price,
        condition=infer_condition(raw.container_text),
        source_url=raw.source_url,
    )


def normalize_records(
    records: Iterable[RawListing], policy: TitleFilterPolicy | None = None
) -> list[Listing]:
    """Normalize a page of records, dropping rejected ones.

    Rejections are logged at debug level and never raised.
    """
    listings: list[Listing] = []
    for raw in records:
        try:
            listings.append(normalize_listing(raw, policy))
        except ListingRejected as e:
            logger.debug(f"Rejected record ({type(e).__name__}): {e}")
    return listings


def condition_from_api(condition_id: str | None, display_name: str | None) -> Condition:
    """Map Browse API condition fields onto a Condition.

    Numeric ids take precedence: 1000-1999 are new, 2000-2999 refurbished,
    3000 and above used. Without an id the display name decides.
    """
    if condition_id and condition_id.isdigit():
        numeric = int(condition_id)
        if 1000 <= numeric < 2000:
            return Condition.NEW
        if 2000 <= numeric < 3000:
            return Condition.REFURBISHED
        if numeric >= 3000:
            return Condition.USED

    name = (display_name or "").lower()
    if "refurbished" in name:
        return Condition.REFURBISHED
    if "new" in name:
        return Condition.NEW
    return Condition.USED


def normalize_api_item(summary: dict[str, Any], policy: TitleFilterPolicy | None = None) -> Listing:
    """Convert a Browse API item summary into a Listing.

    API titles are real item titles, so only the length rule applies.

    Raises:
        FilteredNonItem: Title missing or shorter than the minimum length.
        NoPriceResolved: Price missing, malformed or not positive.
    """
    policy = policy or title_filter_policy
    title = (summary.get("title") or "").strip()
    if len(title) < policy.min_length:
        raise FilteredNonItem(f"{title!r}: shorter than {policy.min_length} characters")

    raw_price = (summary.get("price") or {}).get("value")
    try:
        price = Decimal(str(raw_price)) if raw_price is not None else None
    except InvalidOperation:
        price = None
    if price is None or not price.is_finite() or price <= 0:
        raise NoPriceResolved(f"{title!r}: no price in API item")

    buying_options = summary.get("buyingOptions") or []
    return Listing(
        title=title,
        price=price,
        condition=condition_from_api(summary.get("conditionId"), summary.get("condition")),
        source_url=summary.get("itemWebUrl"),
        image_url=(summary.get("image") or {}).get("imageUrl"),
        item_id=summary.get("itemId"),
        buying_format="Auction" if "AUCTION" in buying_options else "Buy It Now",
    )
