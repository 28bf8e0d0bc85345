"""
Barangay Analytics API Routes

Serves the analytics snapshot and its downloadable exports to barangay
officials.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from ..core.auth import get_current_user, User
from ..core.store import RecordStore
from ..services.analytics_export import to_csv, to_json, to_text
from ..services.analytics_service import compute_analytics
from ..services.barangay_resolver import normalize_barangay
from ..services.snapshot import AnalyticsSnapshot

router = APIRouter()


def get_store() -> RecordStore:
    """Record store dependency (overridden in tests)."""
    from ..core.supabase import get_record_store
    return get_record_store()


def _authorize(user: User, barangay: str) -> None:
    """Officials may only read their own barangay."""
    if not user.is_brgy_official:
        raise HTTPException(status_code=403, detail="Barangay officials only")
    if normalize_barangay(user.barangay) != normalize_barangay(barangay):
        raise HTTPException(status_code=403, detail="Access denied for this barangay")


@router.get("/brgy/{barangay}/analytics", response_model=AnalyticsSnapshot)
async def get_barangay_analytics(
    barangay: str,
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
) -> AnalyticsSnapshot:
    """
    Get analytics for a barangay.

    Args:
        barangay: Barangay name
        user: Authenticated barangay official

    Returns:
        AnalyticsSnapshot (all zeros when there is no data)
    """
    _authorize(user, barangay)
    return await compute_analytics(barangay, store=store)


@router.get("/brgy/{barangay}/analytics/export")
async def export_barangay_analytics(
    barangay: str,
    format: Literal["text", "csv", "json"] = "text",
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """Download analytics as text, CSV or JSON."""
    _authorize(user, barangay)
    snapshot = await compute_analytics(barangay, store=store)

    if format == "json":
        return to_json(snapshot)

    filename = normalize_barangay(barangay).lower().replace(" ", "_") or "barangay"
    if format == "csv":
        return PlainTextResponse(
            to_csv(snapshot),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}_analytics.csv"'},
        )
    return PlainTextResponse(to_text(snapshot))
