"""
Demographic Aggregator

Gender distribution of a barangay's residents (tenants with an approved,
paid booking) and of its approved property owners.

Gender comes from the user record first and from the tenant profile
second. Profile hits are remembered by GenderCache as pending writes so the
caller can copy them back onto the user record; the aggregation itself
never touches the store.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..core.store import CollectionNotFound, RecordStore
from .barangay_resolver import BarangayResolver
from .records import (
    ApplicationStatus,
    Booking,
    DataQualityCounter,
    Gender,
    OwnerApplication,
    TenantProfile,
    User,
)
from .snapshot import GenderAnalytics
from .stats import percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenderResolution:
    gender: Gender
    should_persist: bool


class GenderCache:
    """
    Read-through gender lookup over user records and tenant profiles.

    Profiles are fetched up front with `prefetch()`; `resolve()` and
    `gender_of()` are synchronous. Genders found only in a profile are
    collected in `pending_writes` (user id -> gender) for the caller to
    persist.
    """

    def __init__(self, users_by_id: Dict[str, User], profiles: Optional[Dict[str, Gender]] = None):
        self.users_by_id = users_by_id
        self.profiles: Dict[str, Gender] = dict(profiles or {})
        self.pending_writes: Dict[str, Gender] = {}

    def needs_profile(self, user_id: str) -> bool:
        user = self.users_by_id.get(user_id)
        return user is None or user.gender == Gender.UNKNOWN

    async def prefetch(
        self,
        store: RecordStore,
        user_ids: Iterable[str],
        collection: str = "tenants",
        quality: Optional[DataQualityCounter] = None,
    ) -> None:
        """Fetch profiles, concurrently, for every user whose record lacks a gender."""
        missing = [
            uid for uid in dict.fromkeys(user_ids)
            if uid and uid not in self.profiles and self.needs_profile(uid)
        ]
        if not missing:
            return

        results = await asyncio.gather(
            *(store.get(collection, uid) for uid in missing),
            return_exceptions=True,
        )
        for uid, result in zip(missing, results):
            if isinstance(result, CollectionNotFound):
                logger.info(f"No '{collection}' collection; profile fallback unavailable")
                return
            if isinstance(result, Exception):
                logger.warning(f"Profile lookup failed for {uid}: {result}")
                if quality is not None:
                    quality.failed_lookups += 1
                continue
            if isinstance(result, dict):
                self.profiles[uid] = TenantProfile.model_validate(result).gender

    def resolve(self, user_id: str) -> GenderResolution:
        user = self.users_by_id.get(user_id)
        if user is not None and user.gender != Gender.UNKNOWN:
            return GenderResolution(user.gender, False)
        if user_id in self.pending_writes:
            return GenderResolution(self.pending_writes[user_id], False)
        gender = self.profiles.get(user_id, Gender.UNKNOWN)
        if gender == Gender.UNKNOWN:
            return GenderResolution(Gender.UNKNOWN, False)
        # Only existing user records get the cached value
        return GenderResolution(gender, user is not None)

    def gender_of(self, user_id: str) -> Gender:
        resolution = self.resolve(user_id)
        if resolution.should_persist:
            self.pending_writes[user_id] = resolution.gender
        return resolution.gender


def build_gender_analytics(genders: Iterable[Gender]) -> GenderAnalytics:
    male = female = unknown = 0
    for gender in genders:
        if gender == Gender.MALE:
            male += 1
        elif gender == Gender.FEMALE:
            female += 1
        else:
            unknown += 1
    total = male + female + unknown
    return GenderAnalytics(
        total=total,
        male=male,
        female=female,
        unknown=unknown,
        male_percentage=percent(male, total),
        female_percentage=percent(female, total),
        unknown_percentage=percent(unknown, total),
    )


def resident_tenant_ids(barangay_bookings: Iterable[Booking]) -> List[str]:
    """Unique tenant ids with an approved, paid booking, in first-seen order."""
    seen: Dict[str, None] = {}
    for booking in barangay_bookings:
        if booking.is_resident and booking.tenant_id:
            seen.setdefault(booking.tenant_id, None)
    return list(seen)


def approved_owner_ids(applications: Iterable[OwnerApplication], resolver: BarangayResolver) -> List[str]:
    """User ids with an approved owner application for the resolver's barangay."""
    seen: Dict[str, None] = {}
    for application in applications:
        if (
            application.status == ApplicationStatus.APPROVED
            and application.user_id
            and resolver.application_in_barangay(application)
        ):
            seen.setdefault(application.user_id, None)
    return list(seen)


def _distribution(user_ids: List[str], cache: GenderCache, quality: Optional[DataQualityCounter]) -> GenderAnalytics:
    genders = [cache.gender_of(uid) for uid in user_ids]
    if quality is not None:
        quality.unresolved_genders += sum(1 for g in genders if g == Gender.UNKNOWN)
    return build_gender_analytics(genders)


def tenant_gender_analytics(
    barangay_bookings: Iterable[Booking],
    cache: GenderCache,
    quality: Optional[DataQualityCounter] = None,
) -> GenderAnalytics:
    """
    Gender distribution of residents.

    Args:
        barangay_bookings: Bookings already restricted to the barangay
        cache: Gender lookup (user record, then tenant profile)
        quality: Receives one unresolved_genders per unknown tenant

    Returns:
        GenderAnalytics counting each tenant once
    """
    tenant_ids = resident_tenant_ids(barangay_bookings)
    analytics = _distribution(tenant_ids, cache, quality)
    logger.info(f"Resident gender analytics: {analytics.model_dump()}")
    return analytics


def owner_gender_analytics(
    owner_ids: List[str],
    cache: GenderCache,
    quality: Optional[DataQualityCounter] = None,
) -> GenderAnalytics:
    """Gender distribution of approved owners."""
    return _distribution(owner_ids, cache, quality)
