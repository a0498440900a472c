from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

class UserType(str, enum.Enum):
    USER = "user"
    OWNER = "owner"
    AGENT = "agent"
    ADMIN = "admin"

# Roles allowed to publish listings
LISTING_ROLES = (UserType.OWNER, UserType.AGENT)

class Profile(BaseModel):
    __tablename__ = "profiles"

    email = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)

    user_type = Column(Enum(UserType), default=UserType.USER, nullable=False, index=True)
    is_active = Column(Boolean, default=True)

    properties = relationship(
        "Property",
        back_populates="owner",
        foreign_keys="Property.owner_id"
    )
