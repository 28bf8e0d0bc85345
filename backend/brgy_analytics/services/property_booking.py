"""
Property & Booking Aggregator

Listing status breakdown, rent average, property type counts, booking
status partition and month-over-month booking trend for one barangay.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from .records import Booking, BookingStatus, DataQualityCounter, Listing
from .snapshot import BookingTrends
from .stats import mean, positive, round_half_up, safe_div

logger = logging.getLogger(__name__)

AVAILABILITY_STATUSES = ("available", "occupied", "reserved")
UNKNOWN_STATUS = "unknown"

# Listing forms used to offer "Condo"; those units are boarding houses
PROPERTY_TYPE_ALIASES = {
    "condo": "Boarding House",
}
UNKNOWN_PROPERTY_TYPE = "Unknown"


def normalize_availability(value: Any) -> str:
    """
    Map free-text availability to available / occupied / reserved / unknown.

    Absent or blank values mean the listing was never marked, i.e. available.
    """
    if value is None:
        return "available"
    text = str(value).strip().lower()
    if not text:
        return "available"
    return text if text in AVAILABILITY_STATUSES else UNKNOWN_STATUS


def normalize_property_type(value: Optional[str]) -> str:
    label = re.sub(r"\s+", " ", str(value)).strip() if value else ""
    if not label:
        return UNKNOWN_PROPERTY_TYPE
    return PROPERTY_TYPE_ALIASES.get(label.lower(), label)


@dataclass
class PropertyStats:
    total: int = 0
    available: int = 0
    occupied: int = 0
    reserved: int = 0
    unknown: int = 0
    average_rent: float = 0.0
    property_types: Dict[str, int] = field(default_factory=dict)


def count_property_types(listings: Iterable[Listing]) -> Dict[str, int]:
    """
    Label -> count, merging aliases and case variants under one key.

    The first spelling seen for a label is the one reported.
    """
    labels: Dict[str, str] = {}
    counts: Dict[str, int] = {}
    for listing in listings:
        label = normalize_property_type(listing.property_type)
        key = label.lower()
        labels.setdefault(key, label)
        counts[key] = counts.get(key, 0) + 1
    return {labels[key]: count for key, count in counts.items()}


def property_statistics(
    listings: List[Listing],
    quality: Optional[DataQualityCounter] = None,
) -> PropertyStats:
    """
    Status breakdown and rent figures for barangay listings.

    available + occupied + reserved + unknown always equals total; a
    mismatch is logged, never raised.
    """
    stats = PropertyStats(total=len(listings))
    for listing in listings:
        status = normalize_availability(listing.availability_status)
        if status == "available":
            stats.available += 1
        elif status == "occupied":
            stats.occupied += 1
        elif status == "reserved":
            stats.reserved += 1
        else:
            stats.unknown += 1
            logger.debug(f"Listing {listing.id} has unrecognised status {listing.availability_status!r}")

    if stats.unknown and quality is not None:
        quality.unknown_status_listings += stats.unknown

    counted = stats.available + stats.occupied + stats.reserved + stats.unknown
    if counted != stats.total:
        logger.warning(f"Status counts ({counted}) do not match total properties ({stats.total})")
        if quality is not None:
            quality.status_count_mismatches += 1

    stats.average_rent = round_half_up(mean(positive(l.monthly_rent for l in listings)), 2)
    stats.property_types = count_property_types(listings)
    return stats


def bookings_for_listings(
    bookings: Iterable[Booking],
    known_listing_ids: Set[str],
    member_listing_ids: Set[str],
    quality: Optional[DataQualityCounter] = None,
) -> List[Booking]:
    """
    Bookings whose listing is in the barangay.

    Bookings pointing at a listing that does not exist anywhere are
    excluded and counted as orphans.
    """
    selected: List[Booking] = []
    orphans = 0
    for booking in bookings:
        if booking.property_id in member_listing_ids:
            selected.append(booking)
        elif booking.property_id not in known_listing_ids:
            orphans += 1
            logger.debug(f"Booking {booking.id} references missing listing {booking.property_id}")
    if orphans:
        logger.warning(f"{orphans} booking(s) reference listings that no longer exist")
        if quality is not None:
            quality.orphan_bookings += orphans
    return selected


@dataclass
class BookingCounts:
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0
    cancelled: int = 0
    completed: int = 0


def booking_counts(bookings: Iterable[Booking]) -> BookingCounts:
    """
    Partition bookings by status.

    Approved excludes soft-deleted rows; every other bucket (and the total)
    keeps them so the audit trail stays complete.
    """
    counts = BookingCounts()
    for booking in bookings:
        counts.total += 1
        status = booking.status
        if status == BookingStatus.APPROVED:
            if not booking.is_deleted:
                counts.approved += 1
        elif status == BookingStatus.PENDING:
            counts.pending += 1
        elif status == BookingStatus.REJECTED:
            counts.rejected += 1
        elif status == BookingStatus.CANCELLED:
            counts.cancelled += 1
        elif status == BookingStatus.COMPLETED:
            counts.completed += 1
    return counts


def month_bounds(now: datetime) -> tuple:
    """(first day of last month, first day of this month), both at midnight."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_month = (this_month - timedelta(days=1)).replace(day=1)
    return last_month, this_month


def booking_trends(bookings: Iterable[Booking], now: datetime) -> BookingTrends:
    last_start, this_start = month_bounds(now)
    this_month = last_month = 0
    for booking in bookings:
        created = booking.created_at
        if created is None:
            continue
        if created >= this_start:
            this_month += 1
        elif created >= last_start:
            last_month += 1

    growth_rate = round_half_up(safe_div(this_month - last_month, last_month) * 100) if last_month else 0
    return BookingTrends(this_month=this_month, last_month=last_month, growth_rate=growth_rate)
