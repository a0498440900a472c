from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal
from uuid import UUID
from datetime import datetime
from app.models.user import UserType
import re

# Nigerian phone number validation
def validate_nigerian_phone(phone: str) -> str:
    phone = re.sub(r'[\s\-]', '', phone)

    if not re.match(r'^(0|\+234|234)[789]\d{9}$', phone):
        raise ValueError('Invalid Nigerian phone number')

    if phone.startswith('0'):
        phone = '+234' + phone[1:]
    elif phone.startswith('234'):
        phone = '+' + phone

    return phone

class ProfileBase(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = None

class ProfileCreate(ProfileBase):
    password: str = Field(..., min_length=8)
    # Admins are bootstrapped by scripts/create_admin.py, never self-registered
    user_type: Literal["user", "owner", "agent"] = "user"

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return validate_nigerian_phone(v) if v else v

class ProfileLogin(BaseModel):
    email: EmailStr
    password: str

class ProfileResponse(ProfileBase):
    id: UUID
    user_type: UserType
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: ProfileResponse
