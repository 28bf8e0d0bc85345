"""
Relationship & Ranking Engine

Per-owner and per-tenant activity inside a barangay, top-N rankings and the
booking ratios shown on the relationship panel.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .records import Booking, BookingStatus, Listing, OwnerApplication, User
from .snapshot import OwnerAnalytics, OwnerRanking, RelationshipAnalytics, TenantRanking, GenderAnalytics
from .stats import finite, percent, round_half_up, safe_div

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5

T = TypeVar("T")


def top_n(items: Sequence[T], key: Callable[[T], float], n: int = DEFAULT_TOP_N) -> List[T]:
    """Highest `key` first; ties keep their input order."""
    return sorted(items, key=lambda item: -key(item))[:max(n, 0)]


def _revenue(booking: Booking) -> float:
    if booking.status != BookingStatus.APPROVED or booking.is_deleted:
        return 0.0
    return float(finite(booking.total_amount))


def owner_rankings(
    owner_ids: List[str],
    member_listings: Iterable[Listing],
    barangay_bookings: Iterable[Booking],
    users_by_id: Dict[str, User],
    applications: Iterable[OwnerApplication] = (),
) -> List[OwnerRanking]:
    """
    Activity for each approved owner, in owner_ids order.

    property_count counts barangay listings owned; booking_count counts the
    owner's barangay bookings; total_revenue sums total_amount over the
    owner's approved, non-deleted bookings.
    """
    property_counts: Dict[str, int] = {}
    for listing in member_listings:
        if listing.user_id:
            property_counts[listing.user_id] = property_counts.get(listing.user_id, 0) + 1

    booking_totals: Dict[str, int] = {}
    revenue: Dict[str, float] = {}
    for booking in barangay_bookings:
        if not booking.owner_id:
            continue
        booking_totals[booking.owner_id] = booking_totals.get(booking.owner_id, 0) + 1
        revenue[booking.owner_id] = revenue.get(booking.owner_id, 0.0) + _revenue(booking)

    application_names = {a.user_id: a.name for a in applications if a.user_id and a.name}

    rankings = []
    for owner_id in owner_ids:
        user = users_by_id.get(owner_id)
        name = (user.name if user else None) or application_names.get(owner_id) or owner_id
        rankings.append(OwnerRanking(
            owner_id=owner_id,
            owner_name=name,
            property_count=property_counts.get(owner_id, 0),
            booking_count=booking_totals.get(owner_id, 0),
            total_revenue=round_half_up(max(revenue.get(owner_id, 0.0), 0.0), 2),
        ))
    return rankings


def tenant_rankings(barangay_bookings: Iterable[Booking], users_by_id: Dict[str, User]) -> List[TenantRanking]:
    """Booking count per unique tenant, in first-seen order."""
    counts: Dict[str, int] = {}
    booking_names: Dict[str, str] = {}
    for booking in barangay_bookings:
        if not booking.tenant_id:
            continue
        counts[booking.tenant_id] = counts.get(booking.tenant_id, 0) + 1
        if booking.tenant_name:
            booking_names.setdefault(booking.tenant_id, booking.tenant_name)

    rankings = []
    for tenant_id, count in counts.items():
        user = users_by_id.get(tenant_id)
        name = (user.name if user else None) or booking_names.get(tenant_id) or tenant_id
        rankings.append(TenantRanking(tenant_id=tenant_id, tenant_name=name, booking_count=count))
    return rankings


def relationship_analytics(
    owners: List[OwnerRanking],
    tenants: List[TenantRanking],
    total_bookings: int,
    approved_bookings: int,
    n: int = DEFAULT_TOP_N,
) -> RelationshipAnalytics:
    return RelationshipAnalytics(
        most_active_owners=tuple(top_n(owners, lambda o: o.booking_count, n)),
        most_active_tenants=tuple(top_n(tenants, lambda t: t.booking_count, n)),
        average_bookings_per_owner=round_half_up(safe_div(total_bookings, len(owners)), 1),
        average_bookings_per_tenant=round_half_up(safe_div(total_bookings, len(tenants)), 1),
        conversion_rate=percent(approved_bookings, total_bookings),
    )


def owner_analytics(
    owners: List[OwnerRanking],
    total_properties: int,
    gender: Optional[GenderAnalytics] = None,
    n: int = DEFAULT_TOP_N,
) -> OwnerAnalytics:
    return OwnerAnalytics(
        total_owners=len(owners),
        average_properties_per_owner=round_half_up(safe_div(total_properties, len(owners)), 1),
        gender=gender or GenderAnalytics(),
        top_owners=tuple(top_n(owners, lambda o: o.property_count, n)),
    )
