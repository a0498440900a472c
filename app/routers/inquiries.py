from fastapi import APIRouter, Body, Depends, status
from app.api.deps import get_current_active_user, get_inquiry_service
from app.models.user import Profile
from app.schemas.inquiry import InquiryListResponse, InquiryRecord
from app.services.inquiries import InquiryService
from typing import Any
from uuid import UUID

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])


@router.post("", response_model=InquiryRecord, status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    payload: Any = Body(...),
    current_user: Profile = Depends(get_current_active_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    """Ask the owner of a live listing about it. Users only."""
    return service.create(current_user, payload)


@router.get("", response_model=InquiryListResponse)
async def list_inquiries(
    current_user: Profile = Depends(get_current_active_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    """Users see inquiries they sent; owners and agents see inquiries they received."""
    return {"inquiries": service.list_for(current_user)}


@router.post("/{inquiry_id}/respond", response_model=InquiryRecord)
async def respond_to_inquiry(
    inquiry_id: UUID,
    payload: Any = Body(...),
    current_user: Profile = Depends(get_current_active_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.respond(current_user, inquiry_id, payload)


@router.post("/{inquiry_id}/close", response_model=InquiryRecord)
async def close_inquiry(
    inquiry_id: UUID,
    current_user: Profile = Depends(get_current_active_user),
    service: InquiryService = Depends(get_inquiry_service),
):
    return service.close(current_user, inquiry_id)
