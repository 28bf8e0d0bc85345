"""
Barangay Resolver

Decides whether a listing, user or owner application belongs to a target
barangay. Every downstream aggregate joins on this predicate.

Matching is exact after normalization (trim, collapse whitespace,
upper-case). A listing without its own barangay falls back to its owner's
user.barangay. Near-misses ("Talolong" vs "Talolang") are never treated as
members, but they are logged and counted so bad data can be fixed at the
source.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional

from rapidfuzz import fuzz

from .records import DataQualityCounter, Listing, OwnerApplication, User

logger = logging.getLogger(__name__)

DEFAULT_NEAR_MISS_THRESHOLD = 85.0


def normalize_barangay(value: Optional[str]) -> str:
    """Canonical form used for comparison; empty string for absent values."""
    if not value:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip().upper()


class BarangayResolver:
    """
    Membership predicate for one target barangay.

    Args:
        barangay: Target barangay name (free text). Blank matches nothing.
        users_by_id: User lookup for the listing-owner fallback
        quality: Optional counter for near-miss reporting
        near_miss_threshold: rapidfuzz ratio at which a mismatch is reported
    """

    def __init__(
        self,
        barangay: Optional[str],
        users_by_id: Optional[Dict[str, User]] = None,
        quality: Optional[DataQualityCounter] = None,
        near_miss_threshold: float = DEFAULT_NEAR_MISS_THRESHOLD,
    ):
        self.target = normalize_barangay(barangay)
        self.users_by_id = users_by_id or {}
        self.quality = quality
        self.near_miss_threshold = near_miss_threshold
        self._reported: set = set()
        if not self.target:
            logger.debug("Blank barangay requested; nothing will match")

    def matches(self, value: Optional[str]) -> bool:
        """Normalized equality against the target. Absent values never match."""
        if not self.target:
            return False
        candidate = normalize_barangay(value)
        if not candidate:
            return False
        if candidate == self.target:
            return True
        self._check_near_miss(candidate)
        return False

    def _check_near_miss(self, candidate: str) -> None:
        if candidate in self._reported:
            return
        score = fuzz.ratio(candidate, self.target)
        if score >= self.near_miss_threshold:
            self._reported.add(candidate)
            logger.warning(
                f"Barangay '{candidate}' looks like '{self.target}' (score {score:.0f}) but does not match"
            )
            if self.quality is not None:
                self.quality.near_miss_barangays += 1

    def listing_in_barangay(self, listing: Listing) -> bool:
        if listing.barangay:
            return self.matches(listing.barangay)
        owner = self.users_by_id.get(listing.user_id) if listing.user_id else None
        return self.matches(owner.barangay) if owner else False

    def user_in_barangay(self, user: User) -> bool:
        return self.matches(user.barangay)

    def application_in_barangay(self, application: OwnerApplication) -> bool:
        return self.matches(application.barangay)

    def filter_listings(self, listings: Iterable[Listing]) -> List[Listing]:
        return [listing for listing in listings if self.listing_in_barangay(listing)]


def is_in_barangay(record, barangay: Optional[str], users_by_id: Optional[Dict[str, User]] = None) -> bool:
    """
    One-off membership check for a listing or user record.

    Total: any record type other than Listing / User / OwnerApplication
    resolves to False.
    """
    resolver = BarangayResolver(barangay, users_by_id)
    if isinstance(record, Listing):
        return resolver.listing_in_barangay(record)
    if isinstance(record, User):
        return resolver.user_in_barangay(record)
    if isinstance(record, OwnerApplication):
        return resolver.application_in_barangay(record)
    return False
