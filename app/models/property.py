from sqlalchemy import Column, String, Integer, Float, Boolean, Text, Enum, ForeignKey, JSON, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.models.user import Profile  # noqa: F401  (registers the "Profile" mapper)
import enum

class PropertyType(str, enum.Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    LAND = "land"
    COMMERCIAL = "commercial"
    DUPLEX = "duplex"
    BUNGALOW = "bungalow"
    FLAT = "flat"
    SELF_CONTAINED = "self_contained"
    MINI_FLAT = "mini_flat"
    ROOM_AND_PARLOR = "room_and_parlor"
    SINGLE_ROOM = "single_room"
    PENTHOUSE = "penthouse"
    TERRACE = "terrace"
    DETACHED_HOUSE = "detached_house"
    SHOP = "shop"
    OFFICE = "office"
    WAREHOUSE = "warehouse"
    SHOWROOM = "showroom"
    EVENT_CENTER = "event_center"
    HOTEL = "hotel"
    RESTAURANT = "restaurant"
    RESIDENTIAL_LAND = "residential_land"
    COMMERCIAL_LAND = "commercial_land"
    MIXED_USE_LAND = "mixed_use_land"
    FARMLAND = "farmland"

class ListingType(str, enum.Enum):
    SALE = "sale"
    RENT = "rent"
    LEASE = "lease"

class PropertyStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_VERIFICATION = "pending_verification"
    LIVE = "live"
    REJECTED = "rejected"
    DELISTED = "delisted"

class PropertyVerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# Lifecycle state machines. Targets not listed here are invalid transitions.
STATUS_TRANSITIONS = {
    PropertyStatus.DRAFT: {
        PropertyStatus.PENDING_VERIFICATION,
        PropertyStatus.REJECTED,
        PropertyStatus.DELISTED,
    },
    PropertyStatus.PENDING_VERIFICATION: {
        PropertyStatus.LIVE,
        PropertyStatus.REJECTED,
        PropertyStatus.DELISTED,
    },
    PropertyStatus.LIVE: {PropertyStatus.DELISTED},
    PropertyStatus.REJECTED: {PropertyStatus.DRAFT, PropertyStatus.DELISTED},
    PropertyStatus.DELISTED: set(),
}

VERIFICATION_TRANSITIONS = {
    PropertyVerificationStatus.PENDING: {
        PropertyVerificationStatus.VERIFIED,
        PropertyVerificationStatus.REJECTED,
    },
    PropertyVerificationStatus.VERIFIED: set(),
    PropertyVerificationStatus.REJECTED: set(),
}

# Owners may edit listing content only in these states
EDITABLE_STATUSES = {PropertyStatus.DRAFT, PropertyStatus.LIVE}


class Property(BaseModel):
    __tablename__ = "properties"

    # Basic Info
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    property_type = Column(Enum(PropertyType), nullable=False, index=True)
    listing_type = Column(Enum(ListingType), nullable=False, index=True)
    status = Column(Enum(PropertyStatus), default=PropertyStatus.DRAFT, nullable=False, index=True)

    # Location
    address = Column(String(255), nullable=False, index=True)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    country = Column(String(2), nullable=False, default="NG")
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    # Pricing
    price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="NGN")

    # Verification
    verification_status = Column(
        Enum(PropertyVerificationStatus),
        default=PropertyVerificationStatus.PENDING,
        nullable=False,
        index=True,
    )
    verification_notes = Column(Text, nullable=True)
    verified_by = Column(Uuid, ForeignKey("profiles.id"), nullable=True)
    verified_at = Column(DateTime, nullable=True)

    # Possible duplicates found at submission: [{"property_id": ..., "match": ...}]
    duplicate_flags = Column(JSON, default=list)
    is_flagged = Column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    owner_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    owner = relationship("Profile", back_populates="properties", foreign_keys=[owner_id])
    details = relationship(
        "PropertyDetails",
        back_populates="property",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="joined",
    )


class PropertyDetails(BaseModel):
    __tablename__ = "property_details"

    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, unique=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    square_feet = Column(Float, nullable=True)

    # Grouped region-specific attributes (power, water, road, security, bq)
    regional_attributes = Column(JSON, default=dict)

    property = relationship("Property", back_populates="details")
