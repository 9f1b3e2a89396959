"""Segment statistics and population extrapolation.

Splits a sample into New and Used bags and scales each bag's share of the
sample up to the source-reported total. Only counts are extrapolated; price
statistics always come straight from the sampled prices.

Refurbished listings belong to neither bag but still feed the total price
statistics.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from ..models import Condition, Listing, SegmentAnalytics, SegmentStats

CENT = Decimal("0.01")


def extrapolate_count(extrapolation_base: int, bag_size: int, sample_size: int) -> int:
    """Scale a bag's share of the sample to the population.

    Args:
        extrapolation_base: Source-reported total result count.
        bag_size: Number of sampled listings in the segment.
        sample_size: Number of sampled listings overall.

    Returns:
        ``round(extrapolation_base * bag_size / sample_size)`` with halves
        rounded up, 0 for an empty sample.
    """
    if sample_size <= 0:
        return 0
    estimate = Decimal(extrapolation_base) * Decimal(bag_size) / Decimal(sample_size)
    return int(estimate.quantize(Decimal("1"), ROUND_HALF_UP))


def price_stats(prices: Sequence[Decimal], count: int) -> SegmentStats:
    """Build segment statistics from sampled prices.

    Non-positive prices are ignored; an empty price set yields zeros. The
    average is rounded half-up to whole cents; highest and lowest are the
    sampled prices unchanged.
    """
    positive = [price for price in prices if price > 0]
    if not positive:
        return SegmentStats(count=count)

    average = (sum(positive, Decimal("0")) / len(positive)).quantize(CENT, ROUND_HALF_UP)
    return SegmentStats(
        count=count,
        highest=max(positive),
        lowest=min(positive),
        average=average,
    )


def estimate(sample: Sequence[Listing], extrapolation_base: int) -> SegmentAnalytics:
    """Compute total/new/used statistics for a sample.

    Args:
        sample: Sampled listings.
        extrapolation_base: Source-reported total result count; reported
            verbatim as the total count.

    Returns:
        SegmentAnalytics with extrapolated counts and sampled price stats.
        Averages are rounded half-up to the cent.
    """
    sample_size = len(sample)
    new_items = [item for item in sample if item.condition == Condition.NEW]
    used_items = [item for item in sample if item.condition == Condition.USED]

    return SegmentAnalytics(
        total=price_stats([item.price for item in sample], extrapolation_base),
        new=price_stats(
            [item.price for item in new_items],
            extrapolate_count(extrapolation_base, len(new_items), sample_size),
        ),
        used=price_stats(
            [item.price for item in used_items],
            extrapolate_count(extrapolation_base, len(used_items), sample_size),
        ),
    )
