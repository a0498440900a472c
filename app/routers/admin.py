from fastapi import APIRouter, Depends, Query
from app.api.deps import get_analytics_aggregator, get_listing_service, require_user_type
from app.models.user import Profile, UserType
from app.schemas.property import (
    DuplicateResolution,
    PropertyRecord,
    PropertyStatusChange,
    PropertyVerificationAction,
)
from app.services.analytics import AnalyticsAggregator
from app.services.listings import ListingService
from typing import List
from uuid import UUID

router = APIRouter(tags=["Admin"])

require_admin = require_user_type(UserType.ADMIN)


# ─── Analytics ────────────────────────────────────────────────────────────────

@router.get("/analytics/overview")
async def analytics_overview(
    period: str = Query("30d"),
    include_trends: bool = Query(True),
    current_user: Profile = Depends(require_admin),
    aggregator: AnalyticsAggregator = Depends(get_analytics_aggregator),
):
    """Users, listings, inquiries and admin activity over 7d|30d|90d|1y|all."""
    return await aggregator.overview(period=period, include_trends=include_trends)


# ─── Listing review ───────────────────────────────────────────────────────────

@router.get("/properties/duplicates", response_model=List[PropertyRecord])
async def list_flagged_properties(
    current_user: Profile = Depends(require_admin),
    service: ListingService = Depends(get_listing_service),
):
    """Listings that matched a live listing's address or coordinates on submission."""
    return service.flagged_duplicates()


@router.post("/properties/{property_id}/duplicates/resolve", response_model=PropertyRecord)
async def resolve_duplicate(
    property_id: UUID,
    resolution: DuplicateResolution,
    current_user: Profile = Depends(require_admin),
    service: ListingService = Depends(get_listing_service),
):
    """Take a listing off the duplicate queue: keep_both, keep_master or reject_duplicate."""
    return service.resolve_duplicate(
        current_user,
        property_id,
        resolution.action,
        resolution.master_property_id,
        resolution.notes,
    )


@router.post("/properties/{property_id}/verify", response_model=PropertyRecord)
async def verify_property(
    property_id: UUID,
    verification_action: PropertyVerificationAction,
    current_user: Profile = Depends(require_admin),
    service: ListingService = Depends(get_listing_service),
):
    """Approve (verified + live) or reject (rejected on both axes) a submitted listing."""
    return service.review(current_user, property_id, verification_action.action, verification_action.notes)


@router.post("/properties/{property_id}/status", response_model=PropertyRecord)
async def change_property_status(
    property_id: UUID,
    change: PropertyStatusChange,
    current_user: Profile = Depends(require_admin),
    service: ListingService = Depends(get_listing_service),
):
    return service.set_status(current_user, property_id, change.status, change.notes)
