"""
Barangay Analytics Service

Builds the analytics snapshot shown on the barangay official's dashboard:
1. Read bookings, listings, users, owner applications, inquiries (concurrently)
2. Validate rows into record types
3. Resolve barangay membership (gates every later step)
4. Demographics, property/booking stats, rankings, market insights, activity
5. Persist genders found through the tenant-profile fallback

compute_analytics() never raises: any failure yields a zero-valued
snapshot of the same shape.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.config import get_settings
from ..core.store import RecordStore, read_optional
from .activity import engagement, financial_summary, recent_activity
from .barangay_resolver import BarangayResolver, normalize_barangay
from .demographics import (
    GenderCache,
    approved_owner_ids,
    owner_gender_analytics,
    resident_tenant_ids,
    tenant_gender_analytics,
)
from .market_insights import market_analytics
from .property_booking import booking_counts, booking_trends, bookings_for_listings, property_statistics
from .rankings import owner_analytics, owner_rankings, relationship_analytics, tenant_rankings
from .records import (
    Booking,
    DataQualityCounter,
    Listing,
    ListingInquiry,
    OwnerApplication,
    User,
    parse_records,
)
from .snapshot import AnalyticsSnapshot

logger = logging.getLogger(__name__)


def _label(barangay: Any) -> str:
    return barangay if isinstance(barangay, str) else ""


async def compute_analytics(
    barangay: str,
    store: Optional[RecordStore] = None,
    now: Optional[datetime] = None,
) -> AnalyticsSnapshot:
    """
    Compute the analytics snapshot for one barangay.

    Args:
        barangay: Barangay name (free text; case and spacing are ignored)
        store: Record store; defaults to the Supabase store
        now: Reference time for trends and recency; defaults to current UTC time

    Returns:
        AnalyticsSnapshot; zero-valued if the barangay is blank or anything fails
    """
    try:
        return await _compute(barangay, store, now)
    except Exception as e:
        logger.error(f"Error computing analytics for barangay {barangay!r}: {e}", exc_info=True)
        return AnalyticsSnapshot.empty(_label(barangay))


async def _compute(barangay: str, store: Optional[RecordStore], now: Optional[datetime]) -> AnalyticsSnapshot:
    label = _label(barangay)
    if not normalize_barangay(label):
        logger.info("No barangay given; returning empty analytics")
        return AnalyticsSnapshot.empty(label)

    settings = get_settings()
    store = store or _default_store()
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    quality = DataQualityCounter()

    logger.info(f"Computing analytics for barangay: {label}")
    booking_rows, listing_rows, user_rows, application_rows, inquiry_collection = await asyncio.gather(
        store.list("bookings"),
        store.list("published_listings"),
        store.list("users"),
        store.list("owner_applications"),
        read_optional(store, "listing_inquiries"),
    )

    users = parse_records(User, user_rows, "users", quality)
    listings = parse_records(Listing, listing_rows, "published_listings", quality)
    bookings = parse_records(Booking, booking_rows, "bookings", quality)
    applications = parse_records(OwnerApplication, application_rows, "owner_applications", quality)
    inquiries = (
        parse_records(ListingInquiry, inquiry_collection.records, "listing_inquiries", quality)
        if inquiry_collection.present else None
    )
    users_by_id = {u.id: u for u in users if u.id}

    # Membership first: every aggregate below works on these subsets
    resolver = BarangayResolver(label, users_by_id, quality, settings.barangay_near_miss_threshold)
    member_listings = resolver.filter_listings(listings)
    member_ids = {l.id for l in member_listings if l.id}
    known_ids = {l.id for l in listings if l.id}
    brgy_bookings = bookings_for_listings(bookings, known_ids, member_ids, quality)
    brgy_applications = [a for a in applications if resolver.application_in_barangay(a)]
    brgy_inquiries = (
        [i for i in inquiries if i.listing_id in member_ids] if inquiries is not None else None
    )
    logger.info(
        f"{label}: {len(member_listings)}/{len(listings)} listings, "
        f"{len(brgy_bookings)}/{len(bookings)} bookings, {len(brgy_applications)} applications"
    )

    # Demographics
    owner_ids = approved_owner_ids(brgy_applications, resolver)
    cache = GenderCache(users_by_id)
    await cache.prefetch(
        store,
        resident_tenant_ids(brgy_bookings) + owner_ids,
        settings.tenant_profile_collection,
        quality,
    )
    tenant_gender = tenant_gender_analytics(brgy_bookings, cache, quality)
    owner_gender = owner_gender_analytics(owner_ids, cache, quality)

    # Properties and bookings
    properties = property_statistics(member_listings, quality)
    counts = booking_counts(brgy_bookings)
    trends = booking_trends(brgy_bookings, now)

    # Rankings
    top_n = settings.analytics_top_n
    owners = owner_rankings(owner_ids, member_listings, brgy_bookings, users_by_id, brgy_applications)
    tenants = tenant_rankings(brgy_bookings, users_by_id)
    relationships = relationship_analytics(owners, tenants, counts.total, counts.approved, top_n)
    owner_summary = owner_analytics(owners, properties.total, owner_gender, top_n)

    # Market and activity
    market = market_analytics(member_listings, properties.occupied, properties.property_types, now)
    financial = financial_summary(brgy_bookings)
    engaged = engagement(member_listings, brgy_inquiries, counts.total)
    recent = recent_activity(
        member_listings, brgy_bookings, brgy_applications, brgy_inquiries, now, settings.recent_activity_days
    )

    await persist_gender_cache(store, cache, user_rows)

    return AnalyticsSnapshot(
        barangay=label,
        gender_analytics=tenant_gender,
        owner_analytics=owner_summary,
        total_properties=properties.total,
        available_properties=properties.available,
        occupied_properties=properties.occupied,
        reserved_properties=properties.reserved,
        unknown_properties=properties.unknown,
        average_rent=properties.average_rent,
        property_types=properties.property_types,
        total_bookings=counts.total,
        approved_bookings=counts.approved,
        pending_bookings=counts.pending,
        rejected_bookings=counts.rejected,
        cancelled_bookings=counts.cancelled,
        completed_bookings=counts.completed,
        booking_trends=trends,
        total_revenue=financial.total_revenue,
        average_booking_value=financial.average_booking_value,
        total_views=engaged.total_views,
        average_views_per_property=engaged.average_views_per_property,
        total_inquiries=engaged.total_inquiries,
        recent_activity=recent,
        relationship_analytics=relationships,
        market_analytics=market,
        data_quality=quality.to_model(),
    )


async def persist_gender_cache(store: RecordStore, cache: GenderCache, raw_users: List[Dict[str, Any]]) -> int:
    """
    Copy genders found in tenant profiles onto their user records.

    Writes are idempotent; a failed write is logged and skipped.

    Returns:
        Number of user records written
    """
    if not cache.pending_writes:
        return 0

    raw_by_id = {
        str(row.get("id")).strip(): row
        for row in raw_users or []
        if isinstance(row, dict) and row.get("id") is not None
    }

    async def write(user_id: str, gender) -> bool:
        record = dict(raw_by_id.get(user_id, {"id": user_id}))
        record["gender"] = gender.value
        try:
            await store.upsert("users", user_id, record)
            return True
        except Exception as e:
            logger.warning(f"Could not cache gender for user {user_id}: {e}")
            return False

    results = await asyncio.gather(*(write(uid, g) for uid, g in cache.pending_writes.items()))
    written = sum(1 for ok in results if ok)
    logger.info(f"Cached gender on {written} user record(s)")
    return written


def _default_store() -> RecordStore:
    from ..core.supabase import get_record_store
    return get_record_store()
