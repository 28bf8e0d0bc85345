"""
Analytics Snapshot

Immutable result of one compute_analytics() call. Every field has a zero
default, so `AnalyticsSnapshot.empty(barangay)` has exactly the same shape
as a populated snapshot and dashboards can bind to it without null checks.

Serializes with camelCase keys (`model_dump(by_alias=True)`).
"""

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class GenderAnalytics(SnapshotModel):
    """Gender distribution; total includes the unknown bucket."""
    total: int = 0
    male: int = 0
    female: int = 0
    unknown: int = 0
    male_percentage: int = 0
    female_percentage: int = 0
    unknown_percentage: int = 0


class OwnerRanking(SnapshotModel):
    owner_id: str
    owner_name: str
    property_count: int = 0
    booking_count: int = 0
    total_revenue: float = 0.0


class TenantRanking(SnapshotModel):
    tenant_id: str
    tenant_name: str
    booking_count: int = 0


class OwnerAnalytics(SnapshotModel):
    total_owners: int = 0
    average_properties_per_owner: float = 0.0
    gender: GenderAnalytics = Field(default_factory=GenderAnalytics)
    top_owners: Tuple[OwnerRanking, ...] = ()


class BookingTrends(SnapshotModel):
    this_month: int = 0
    last_month: int = 0
    # Signed: negative when bookings fell month over month
    growth_rate: int = 0


class RelationshipAnalytics(SnapshotModel):
    most_active_owners: Tuple[OwnerRanking, ...] = ()
    most_active_tenants: Tuple[TenantRanking, ...] = ()
    average_bookings_per_owner: float = 0.0
    average_bookings_per_tenant: float = 0.0
    conversion_rate: int = 0


class PriceRange(SnapshotModel):
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0


class PropertyTypeStat(SnapshotModel):
    property_type: str = Field(alias="type")
    count: int = 0
    average_rent: float = 0.0


class MarketAnalytics(SnapshotModel):
    occupancy_rate: int = 0
    average_days_on_market: int = 0
    price_range: PriceRange = Field(default_factory=PriceRange)
    popular_property_types: Tuple[PropertyTypeStat, ...] = ()


class RecentActivity(SnapshotModel):
    new_bookings: int = 0
    new_properties: int = 0
    new_owners: int = 0
    new_tenants: int = 0
    new_inquiries: int = 0


class DataQuality(SnapshotModel):
    malformed_records: int = 0
    orphan_bookings: int = 0
    unknown_status_listings: int = 0
    unresolved_genders: int = 0
    status_count_mismatches: int = 0
    near_miss_barangays: int = 0
    failed_lookups: int = 0


class AnalyticsSnapshot(SnapshotModel):
    """Barangay analytics at one point in time."""
    barangay: str = ""

    # Demographics
    gender_analytics: GenderAnalytics = Field(default_factory=GenderAnalytics)
    owner_analytics: OwnerAnalytics = Field(default_factory=OwnerAnalytics)

    # Properties
    total_properties: int = 0
    available_properties: int = 0
    occupied_properties: int = 0
    reserved_properties: int = 0
    unknown_properties: int = 0
    average_rent: float = 0.0
    property_types: Dict[str, int] = Field(default_factory=dict)

    # Bookings
    total_bookings: int = 0
    approved_bookings: int = 0
    pending_bookings: int = 0
    rejected_bookings: int = 0
    cancelled_bookings: int = 0
    completed_bookings: int = 0
    booking_trends: BookingTrends = Field(default_factory=BookingTrends)

    # Financial
    total_revenue: float = 0.0
    average_booking_value: float = 0.0

    # Activity & engagement
    total_views: int = 0
    average_views_per_property: float = 0.0
    total_inquiries: int = 0
    recent_activity: RecentActivity = Field(default_factory=RecentActivity)

    relationship_analytics: RelationshipAnalytics = Field(default_factory=RelationshipAnalytics)
    market_analytics: MarketAnalytics = Field(default_factory=MarketAnalytics)
    data_quality: DataQuality = Field(default_factory=DataQuality)

    @classmethod
    def empty(cls, barangay: str = "") -> "AnalyticsSnapshot":
        """Zero-valued snapshot returned when nothing could be computed."""
        return cls(barangay=barangay or "")

    @property
    def status_counts(self) -> Dict[str, int]:
        return {
            "available": self.available_properties,
            "occupied": self.occupied_properties,
            "reserved": self.reserved_properties,
            "unknown": self.unknown_properties,
        }
