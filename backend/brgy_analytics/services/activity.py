"""
Activity & Financial Aggregates

Revenue, listing views, inquiries and recent (last N days) activity for a
barangay. When the store has no inquiry collection, booking counts stand in
for inquiry counts.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from .records import ApplicationStatus, Booking, BookingStatus, Listing, ListingInquiry, OwnerApplication
from .snapshot import RecentActivity
from .stats import finite, round_half_up, safe_div

logger = logging.getLogger(__name__)

DEFAULT_RECENT_DAYS = 7


@dataclass
class FinancialSummary:
    total_revenue: float = 0.0
    average_booking_value: float = 0.0


@dataclass
class Engagement:
    total_views: int = 0
    average_views_per_property: float = 0.0
    total_inquiries: int = 0


def financial_summary(barangay_bookings: Iterable[Booking]) -> FinancialSummary:
    """Revenue over approved, non-deleted bookings."""
    amounts = [
        max(float(finite(b.total_amount)), 0.0)
        for b in barangay_bookings
        if b.status == BookingStatus.APPROVED and not b.is_deleted
    ]
    total = sum(amounts)
    return FinancialSummary(
        total_revenue=round_half_up(total, 2),
        average_booking_value=round_half_up(safe_div(total, len(amounts)), 2),
    )


def engagement(
    member_listings: List[Listing],
    inquiries: Optional[List[ListingInquiry]],
    total_bookings: int,
) -> Engagement:
    """
    Views and inquiries.

    Args:
        member_listings: Barangay listings
        inquiries: Barangay inquiries, or None when the store keeps none
        total_bookings: Proxy for inquiries when `inquiries` is None
    """
    views = int(sum(max(finite(l.view_count), 0) for l in member_listings))
    return Engagement(
        total_views=views,
        average_views_per_property=round_half_up(safe_div(views, len(member_listings)), 1),
        total_inquiries=len(inquiries) if inquiries is not None else total_bookings,
    )


def _within(moment: Optional[datetime], since: datetime) -> bool:
    return moment is not None and moment >= since


def recent_activity(
    member_listings: List[Listing],
    barangay_bookings: List[Booking],
    applications: Iterable[OwnerApplication],
    inquiries: Optional[List[ListingInquiry]],
    now: datetime,
    days: int = DEFAULT_RECENT_DAYS,
) -> RecentActivity:
    """
    Counts of things that happened in the last `days` days.

    `applications` must already be restricted to the barangay. New owners
    are approvals reviewed in the window (created_at when never stamped).
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    since = now - timedelta(days=days)

    recent_bookings = [b for b in barangay_bookings if _within(b.created_at, since)]
    new_tenants = {b.tenant_id for b in recent_bookings if b.tenant_id}
    new_owners = {
        a.user_id for a in applications
        if a.status == ApplicationStatus.APPROVED and a.user_id
        and _within(a.reviewed_at or a.created_at, since)
    }
    if inquiries is not None:
        new_inquiries = sum(1 for i in inquiries if _within(i.created_at, since))
    else:
        new_inquiries = len(recent_bookings)

    return RecentActivity(
        new_bookings=len(recent_bookings),
        new_properties=sum(1 for l in member_listings if _within(l.listed_at, since)),
        new_owners=len(new_owners),
        new_tenants=len(new_tenants),
        new_inquiries=new_inquiries,
    )
