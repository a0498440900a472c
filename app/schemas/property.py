from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any, Literal
from uuid import UUID
from datetime import datetime
from app.core.config import settings
from app.models.property import PropertyType, ListingType, PropertyStatus, PropertyVerificationStatus


def reject_bool(v):
    # bool is an int subclass; true/false must not pass as 1/0
    if isinstance(v, bool):
        raise ValueError("Input should be a number, not a boolean")
    return v


# ─── Region-specific attribute groups ─────────────────────────────────────────
# All optional. When a group is present its own enum/range rules apply.

NepaStatus = Literal["stable", "intermittent", "poor", "none", "generator_only"]
WaterSource = Literal["borehole", "public_water", "well", "water_vendor", "none"]
InternetType = Literal["wi_fi", "fiber", "starlink", "4g", "3g", "none"]
RoadCondition = Literal["paved", "tarred", "untarred", "bad"]
RoadAccessibility = Literal["all_year", "dry_season_only", "limited"]
SecurityType = Literal[
    "gated_community", "security_post", "cctv",
    "perimeter_fence", "security_dogs", "estate_security",
]
SecurityHours = Literal["24/7", "day_only", "night_only", "none"]
BqType = Literal["self_contained", "room_and_parlor", "single_room", "multiple_rooms"]
BqCondition = Literal["excellent", "good", "fair", "needs_renovation"]


class PowerAttributes(BaseModel):
    nepa_status: Optional[NepaStatus] = None
    has_generator: Optional[bool] = None
    has_inverter: Optional[bool] = None
    solar_panels: Optional[bool] = None


class WaterAttributes(BaseModel):
    water_source: Optional[WaterSource] = None
    water_tank_capacity: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    has_water_treatment: Optional[bool] = None
    internet_type: Optional[InternetType] = None

    numbers_not_bool = field_validator("water_tank_capacity", mode="before")(reject_bool)


class RoadAttributes(BaseModel):
    road_condition: Optional[RoadCondition] = None
    road_accessibility: Optional[RoadAccessibility] = None


class SecurityAttributes(BaseModel):
    security_type: Optional[List[SecurityType]] = None
    security_hours: Optional[SecurityHours] = None
    has_security_levy: Optional[bool] = None
    security_levy_amount: Optional[float] = Field(None, gt=0, allow_inf_nan=False)

    numbers_not_bool = field_validator("security_levy_amount", mode="before")(reject_bool)

    @field_validator("security_type")
    @classmethod
    def dedupe_security_type(cls, v):
        # A set from a closed vocabulary; keep first-seen order for stable output
        return list(dict.fromkeys(v)) if v is not None else v


class BqAttributes(BaseModel):
    """Boys' quarters: a separate outbuilding on the plot."""

    has_bq: Optional[bool] = None
    bq_type: Optional[BqType] = None
    bq_bathrooms: Optional[int] = Field(None, ge=0)
    bq_kitchen: Optional[bool] = None
    bq_separate_entrance: Optional[bool] = None
    bq_condition: Optional[BqCondition] = None

    numbers_not_bool = field_validator("bq_bathrooms", mode="before")(reject_bool)


REGIONAL_GROUPS = ("power", "water", "road", "security", "bq")

GROUP_MODELS = {
    "power": PowerAttributes,
    "water": WaterAttributes,
    "road": RoadAttributes,
    "security": SecurityAttributes,
    "bq": BqAttributes,
}

# Regional keys may also arrive at the top level of a payload
FLAT_REGIONAL_FIELDS = {
    field: group
    for group, model in GROUP_MODELS.items()
    for field in model.model_fields
}

NUMERIC_FIELDS = ("price", "latitude", "longitude", "bedrooms", "bathrooms", "square_feet")


class RegionalAttributesMixin(BaseModel):
    power: Optional[PowerAttributes] = None
    water: Optional[WaterAttributes] = None
    road: Optional[RoadAttributes] = None
    security: Optional[SecurityAttributes] = None
    bq: Optional[BqAttributes] = None

    @model_validator(mode="before")
    @classmethod
    def fold_flat_regional_fields(cls, data):
        """Move top-level regional keys into their group so they are validated there.

        A key given both flat and inside its group keeps the grouped value.
        """
        if not isinstance(data, dict) or not FLAT_REGIONAL_FIELDS.keys() & data.keys():
            return data
        data = dict(data)
        for field, group in FLAT_REGIONAL_FIELDS.items():
            if field not in data:
                continue
            nested = data.get(group)
            if nested is None:
                nested = {}
            elif not isinstance(nested, dict):
                # Malformed group; its own error is reported
                continue
            nested = dict(nested)
            nested.setdefault(field, data.pop(field))
            data[group] = nested
        return data

    def regional_attributes(self) -> Dict[str, Any]:
        """Groups that were supplied, with unset keys dropped."""
        groups = {}
        for name in REGIONAL_GROUPS:
            group = getattr(self, name)
            if group is not None:
                groups[name] = group.model_dump(mode="json", exclude_none=True)
        return groups


# ─── Create / Update (the listing validation schema) ─────────────────────────

class PropertyCreate(RegionalAttributesMixin):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=50)
    property_type: PropertyType
    listing_type: ListingType

    price: float = Field(..., gt=0, allow_inf_nan=False)
    currency: str = Field(settings.DEFAULT_CURRENCY, pattern=r"^[A-Z]{3}$")

    address: str = Field(..., min_length=10, max_length=255)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=50)
    country: str = Field("NG", pattern=r"^[A-Z]{2}$")
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    square_feet: Optional[float] = Field(None, gt=0, allow_inf_nan=False)

    numbers_not_bool = field_validator(*NUMERIC_FIELDS, mode="before")(reject_bool)


class PropertyUpdate(RegionalAttributesMixin):
    """Owner edit. Only supplied fields change; the same rules as creation apply."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: Optional[str] = Field(None, min_length=10, max_length=200)
    description: Optional[str] = Field(None, min_length=50)
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    currency: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")
    address: Optional[str] = Field(None, min_length=10, max_length=255)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    state: Optional[str] = Field(None, min_length=2, max_length=50)
    latitude: Optional[float] = Field(None, ge=-90, le=90, allow_inf_nan=False)
    longitude: Optional[float] = Field(None, ge=-180, le=180, allow_inf_nan=False)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    square_feet: Optional[float] = Field(None, gt=0, allow_inf_nan=False)

    numbers_not_bool = field_validator(*NUMERIC_FIELDS, mode="before")(reject_bool)


# ─── Records leaving the repository ──────────────────────────────────────────

class PropertyResponse(BaseModel):
    """Public shape of a listing: the listing row merged with its details row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    title: str
    description: str
    property_type: PropertyType
    listing_type: ListingType
    price: float
    currency: str
    address: str
    city: str
    state: str
    country: str
    latitude: float
    longitude: float
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    square_feet: Optional[float] = None
    regional_attributes: Dict[str, Any] = {}
    status: PropertyStatus
    verification_status: PropertyVerificationStatus
    verification_notes: Optional[str] = None
    verified_by: Optional[UUID] = None
    verified_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class DuplicateFlag(BaseModel):
    property_id: UUID
    match: Literal["address", "coordinates"]


class PropertyRecord(PropertyResponse):
    """Full record, including the admin-only duplicate flags."""

    duplicate_flags: List[DuplicateFlag] = []


class PropertyCreatedResponse(BaseModel):
    property: PropertyResponse
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PropertyListResponse(BaseModel):
    properties: List[PropertyResponse]
    pagination: Pagination


# ─── Admin review ─────────────────────────────────────────────────────────────

class PropertyVerificationAction(BaseModel):
    action: Literal["approve", "reject"]
    notes: Optional[str] = None


class PropertyStatusChange(BaseModel):
    status: PropertyStatus
    notes: Optional[str] = None


class DuplicateResolution(BaseModel):
    """keep_both clears the flag; keep_master and reject_duplicate also reject the listing."""

    action: Literal["keep_both", "keep_master", "reject_duplicate"]
    master_property_id: Optional[UUID] = None
    notes: Optional[str] = None
