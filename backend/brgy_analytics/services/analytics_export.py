"""
Analytics Export

Text, CSV and JSON views of an AnalyticsSnapshot for download from the
barangay reports screen. Values are passed through unchanged; nothing is
recomputed here.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel

from .snapshot import AnalyticsSnapshot

logger = logging.getLogger(__name__)


class AnalyticsExport(BaseModel):
    """All export formats for one snapshot."""
    summary: str
    csv_data: str
    json_data: Dict[str, Any]


def to_json(snapshot: AnalyticsSnapshot) -> Dict[str, Any]:
    """camelCase dict, field for field."""
    return snapshot.model_dump(mode="json", by_alias=True)


def _peso(value: float) -> str:
    return f"₱{value:,.2f}"


def _rows(snapshot: AnalyticsSnapshot) -> List[Tuple[str, str, Any]]:
    g = snapshot.gender_analytics
    o = snapshot.owner_analytics
    t = snapshot.booking_trends
    r = snapshot.relationship_analytics
    m = snapshot.market_analytics
    a = snapshot.recent_activity

    rows: List[Tuple[str, str, Any]] = [
        ("Demographics", "Total Residents", g.total),
        ("Demographics", "Male Residents", g.male),
        ("Demographics", "Female Residents", g.female),
        ("Demographics", "Unknown Gender", g.unknown),
        ("Demographics", "Male Percentage", g.male_percentage),
        ("Demographics", "Female Percentage", g.female_percentage),
        ("Demographics", "Total Owners", o.total_owners),
        ("Demographics", "Average Properties per Owner", o.average_properties_per_owner),
        ("Properties", "Total Properties", snapshot.total_properties),
        ("Properties", "Available", snapshot.available_properties),
        ("Properties", "Occupied", snapshot.occupied_properties),
        ("Properties", "Reserved", snapshot.reserved_properties),
        ("Properties", "Unknown Status", snapshot.unknown_properties),
        ("Properties", "Average Rent", snapshot.average_rent),
    ]
    rows += [("Property Types", label, count) for label, count in snapshot.property_types.items()]
    rows += [
        ("Bookings", "Total Bookings", snapshot.total_bookings),
        ("Bookings", "Approved", snapshot.approved_bookings),
        ("Bookings", "Pending", snapshot.pending_bookings),
        ("Bookings", "Rejected", snapshot.rejected_bookings),
        ("Bookings", "Cancelled", snapshot.cancelled_bookings),
        ("Bookings", "Completed", snapshot.completed_bookings),
        ("Bookings", "This Month", t.this_month),
        ("Bookings", "Last Month", t.last_month),
        ("Bookings", "Growth Rate", t.growth_rate),
        ("Financial", "Total Revenue", snapshot.total_revenue),
        ("Financial", "Average Booking Value", snapshot.average_booking_value),
        ("Financial", "Conversion Rate", r.conversion_rate),
        ("Activity", "Total Views", snapshot.total_views),
        ("Activity", "Average Views per Property", snapshot.average_views_per_property),
        ("Activity", "Total Inquiries", snapshot.total_inquiries),
        ("Activity", "New Bookings (recent)", a.new_bookings),
        ("Activity", "New Properties (recent)", a.new_properties),
        ("Activity", "New Owners (recent)", a.new_owners),
        ("Activity", "New Tenants (recent)", a.new_tenants),
        ("Activity", "New Inquiries (recent)", a.new_inquiries),
        ("Relationships", "Average Bookings per Owner", r.average_bookings_per_owner),
        ("Relationships", "Average Bookings per Tenant", r.average_bookings_per_tenant),
        ("Market", "Occupancy Rate", m.occupancy_rate),
        ("Market", "Average Days on Market", m.average_days_on_market),
        ("Market", "Min Rent", m.price_range.min),
        ("Market", "Max Rent", m.price_range.max),
        ("Market", "Median Rent", m.price_range.median),
    ]
    rows += [("Top Owners", owner.owner_name, owner.property_count) for owner in o.top_owners]
    rows += [("Most Active Owners", owner.owner_name, owner.booking_count) for owner in r.most_active_owners]
    rows += [("Most Active Tenants", tenant.tenant_name, tenant.booking_count) for tenant in r.most_active_tenants]
    return rows


def to_csv(snapshot: AnalyticsSnapshot) -> str:
    """One row per metric: section, metric, value."""
    frame = pd.DataFrame(_rows(snapshot), columns=["section", "metric", "value"], dtype=object)
    return frame.to_csv(index=False, lineterminator="\n")


def to_text(snapshot: AnalyticsSnapshot, generated_at: Optional[datetime] = None) -> str:
    """Plain-text report."""
    generated_at = generated_at or datetime.now(timezone.utc)
    g = snapshot.gender_analytics
    o = snapshot.owner_analytics
    t = snapshot.booking_trends
    r = snapshot.relationship_analytics
    m = snapshot.market_analytics
    a = snapshot.recent_activity

    lines = [
        "BARANGAY ANALYTICS REPORT",
        "=========================",
        f"Barangay: {snapshot.barangay or '-'}",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')} UTC",
        "",
        "DEMOGRAPHICS",
        "------------",
        f"Total Residents: {g.total} (Male {g.male}, {g.male_percentage}% / "
        f"Female {g.female}, {g.female_percentage}% / Unknown {g.unknown})",
        f"Total Owners: {o.total_owners}",
        f"Average Properties per Owner: {o.average_properties_per_owner}",
        "",
        "PROPERTIES",
        "----------",
        f"Total Properties: {snapshot.total_properties}",
        f"Available: {snapshot.available_properties} | Occupied: {snapshot.occupied_properties} | "
        f"Reserved: {snapshot.reserved_properties} | Unknown: {snapshot.unknown_properties}",
        f"Average Rent: {_peso(snapshot.average_rent)}",
    ]
    for label, count in snapshot.property_types.items():
        lines.append(f"  - {label}: {count}")

    lines += [
        "",
        "BOOKINGS",
        "--------",
        f"Total Bookings: {snapshot.total_bookings}",
        f"Approved: {snapshot.approved_bookings} | Pending: {snapshot.pending_bookings} | "
        f"Rejected: {snapshot.rejected_bookings} | Cancelled: {snapshot.cancelled_bookings} | "
        f"Completed: {snapshot.completed_bookings}",
        f"This Month: {t.this_month} | Last Month: {t.last_month} | Growth: {t.growth_rate}%",
        "",
        "FINANCIAL",
        "---------",
        f"Total Revenue: {_peso(snapshot.total_revenue)}",
        f"Average Booking Value: {_peso(snapshot.average_booking_value)}",
        f"Conversion Rate: {r.conversion_rate}%",
        "",
        "ACTIVITY",
        "--------",
        f"Total Views: {snapshot.total_views} (avg {snapshot.average_views_per_property} per property)",
        f"Total Inquiries: {snapshot.total_inquiries}",
        f"Recent: {a.new_bookings} bookings, {a.new_properties} properties, {a.new_owners} owners, "
        f"{a.new_tenants} tenants, {a.new_inquiries} inquiries",
        "",
        "MARKET",
        "------",
        f"Occupancy Rate: {m.occupancy_rate}%",
        f"Average Days on Market: {m.average_days_on_market}",
        f"Rent Range: {_peso(m.price_range.min)} - {_peso(m.price_range.max)} "
        f"(median {_peso(m.price_range.median)})",
        "",
        "TOP OWNERS",
        "----------",
    ]
    if o.top_owners:
        for i, owner in enumerate(o.top_owners, 1):
            lines.append(
                f"{i}. {owner.owner_name}: {owner.property_count} properties, {_peso(owner.total_revenue)}"
            )
    else:
        lines.append("No approved owners")

    lines += ["", "MOST ACTIVE TENANTS", "-------------------"]
    if r.most_active_tenants:
        for i, tenant in enumerate(r.most_active_tenants, 1):
            lines.append(f"{i}. {tenant.tenant_name}: {tenant.booking_count} bookings")
    else:
        lines.append("No tenant activity")

    return "\n".join(lines) + "\n"


def export_analytics(snapshot: AnalyticsSnapshot, generated_at: Optional[datetime] = None) -> AnalyticsExport:
    """Build every export format for a snapshot."""
    logger.info(f"Exporting analytics for barangay: {snapshot.barangay}")
    return AnalyticsExport(
        summary=to_text(snapshot, generated_at),
        csv_data=to_csv(snapshot),
        json_data=to_json(snapshot),
    )


def dumps(snapshot: AnalyticsSnapshot, indent: int = 2) -> str:
    """JSON text of a snapshot."""
    return json.dumps(to_json(snapshot), indent=indent, ensure_ascii=False)
