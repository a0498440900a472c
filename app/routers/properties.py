import math
from fastapi import APIRouter, Body, Depends, Query, status
from app.api.deps import get_current_user, get_listing_service, require_user_type
from app.core.config import settings
from app.models.user import LISTING_ROLES, Profile
from app.schemas.property import PropertyCreatedResponse, PropertyListResponse, PropertyResponse
from app.services.listings import ListingService
from app.services.search import parse_search_filter
from typing import Any, List, Optional
from uuid import UUID

router = APIRouter(prefix="/properties", tags=["Properties"])


# ─── SEARCH (public) ──────────────────────────────────────────────────────────

@router.get("", response_model=PropertyListResponse)
async def list_properties(
    query: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    property_type: Optional[str] = Query(None),
    listing_type: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None),
    max_price: Optional[float] = Query(None),
    bedrooms: Optional[int] = Query(None),
    bathrooms: Optional[int] = Query(None),
    page: int = Query(1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE),
    # Accepted so they can be refused explicitly; see UNSUPPORTED_FILTERS
    nepa_status: Optional[str] = Query(None),
    has_bq: Optional[bool] = Query(None),
    gated_community: Optional[bool] = Query(None),
    service: ListingService = Depends(get_listing_service),
):
    """Live, verified listings matching every supplied filter, newest first."""
    search = parse_search_filter({
        "query": query,
        "state": state,
        "city": city,
        "property_type": property_type,
        "listing_type": listing_type,
        "min_price": min_price,
        "max_price": max_price,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "page": page,
        "limit": limit,
        "nepa_status": nepa_status,
        "has_bq": has_bq,
        "gated_community": gated_community,
    })
    records, total, window = service.search(search)
    return {
        "properties": records,
        "pagination": {
            "page": window.page,
            "limit": window.limit,
            "total": total,
            "pages": math.ceil(total / window.limit),
        },
    }


# ─── CREATE ───────────────────────────────────────────────────────────────────

@router.post("", response_model=PropertyCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: Any = Body(...),
    current_user: Profile = Depends(require_user_type(*LISTING_ROLES)),
    service: ListingService = Depends(get_listing_service),
):
    """
    Create a new listing as a draft awaiting verification.
    Photos and documents are attached through the media service afterwards.
    """
    record = service.create_listing(current_user, payload)
    return {
        "property": record,
        "message": "Property created successfully. Add photos and documents to complete your listing.",
    }


# ─── OWNER views and actions ──────────────────────────────────────────────────

@router.get("/mine", response_model=List[PropertyResponse])
async def list_my_properties(
    current_user: Profile = Depends(require_user_type(*LISTING_ROLES)),
    service: ListingService = Depends(get_listing_service),
):
    """Every listing the caller owns, in any status."""
    return service.list_for_owner(current_user)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    current_user: Optional[Profile] = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
):
    """Public for live, verified listings; owners and admins also see the rest."""
    return service.get_visible(property_id, current_user)


@router.patch("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: UUID,
    payload: Any = Body(...),
    current_user: Profile = Depends(require_user_type(*LISTING_ROLES)),
    service: ListingService = Depends(get_listing_service),
):
    """Edit a draft or live listing. Omitted fields keep their values."""
    return service.edit_listing(current_user, property_id, payload)


@router.post("/{property_id}/submit", response_model=PropertyResponse)
async def submit_property(
    property_id: UUID,
    current_user: Profile = Depends(require_user_type(*LISTING_ROLES)),
    service: ListingService = Depends(get_listing_service),
):
    return service.submit_for_verification(current_user, property_id)


@router.post("/{property_id}/delist", response_model=PropertyResponse)
async def delist_property(
    property_id: UUID,
    current_user: Profile = Depends(require_user_type(*LISTING_ROLES)),
    service: ListingService = Depends(get_listing_service),
):
    return service.delist(current_user, property_id)
