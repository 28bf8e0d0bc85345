"""
Market Insight Calculator

Occupancy, days on market, rent distribution and popular property types
for a barangay's listings.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from .property_booking import normalize_property_type
from .records import Listing
from .snapshot import MarketAnalytics, PriceRange, PropertyTypeStat
from .stats import finite, mean, percent, positive, round_half_up

logger = logging.getLogger(__name__)


def price_range(rents: List[float]) -> PriceRange:
    """
    Min / max / median of strictly positive rents.

    For an even number of rents the median is the lower of the two middle
    values, not their average.
    """
    values = sorted(float(r) for r in positive(rents))
    if not values:
        return PriceRange()
    return PriceRange(min=values[0], max=values[-1], median=values[(len(values) - 1) // 2])


def average_days_on_market(listings: List[Listing], now: datetime) -> int:
    """Mean whole days since each listing went up; undated listings are skipped."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    days = [max((now - l.listed_at).days, 0) for l in listings if l.listed_at is not None]
    return round_half_up(mean(days))


def popular_property_types(listings: List[Listing], property_types: Dict[str, int]) -> Tuple[PropertyTypeStat, ...]:
    """
    property_types joined with the average positive rent of each type,
    most listed first (ties keep map order).
    """
    if not listings or not property_types:
        return ()

    labels = {label.lower(): label for label in property_types}
    frame = pd.DataFrame({
        "type": [
            labels.get(normalize_property_type(l.property_type).lower(), normalize_property_type(l.property_type))
            for l in listings
        ],
        "rent": [float(l.monthly_rent) if finite(l.monthly_rent, 0) > 0 else np.nan for l in listings],
    })
    average_rent = frame.groupby("type", sort=False)["rent"].mean()

    stats = [
        PropertyTypeStat(
            property_type=label,
            count=count,
            average_rent=round_half_up(finite(average_rent.get(label)), 2),
        )
        for label, count in property_types.items()
    ]
    return tuple(sorted(stats, key=lambda s: -s.count))


def market_analytics(
    listings: List[Listing],
    occupied: int,
    property_types: Dict[str, int],
    now: datetime,
) -> MarketAnalytics:
    return MarketAnalytics(
        occupancy_rate=percent(occupied, len(listings)),
        average_days_on_market=average_days_on_market(listings, now),
        price_range=price_range([l.monthly_rent for l in listings]),
        popular_property_types=popular_property_types(listings, property_types),
    )
