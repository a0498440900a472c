from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from app.models.inquiry import InquiryStatus
from app.models.property import PropertyStatus
from app.schemas.user import validate_nigerian_phone


class InquiryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    property_id: UUID
    message: str = Field(..., min_length=10, max_length=2000)
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None

    @field_validator("contact_phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_nigerian_phone(v) if v else None


class InquiryRespond(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    response_message: str = Field(..., min_length=10, max_length=2000)


class InquiryRecord(BaseModel):
    """An inquiry with the linked listing flattened in.

    Built once at the repository boundary so nothing downstream has to care
    whether the listing relation was loaded.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    property_id: UUID
    property_title: Optional[str] = None
    property_status: Optional[PropertyStatus] = None
    message: str
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    status: InquiryStatus
    response_message: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime


class InquiryListResponse(BaseModel):
    inquiries: List[InquiryRecord]
