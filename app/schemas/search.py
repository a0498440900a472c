from pydantic import BaseModel, ConfigDict, Field, field_validator, ValidationInfo
from typing import Optional
from app.core.config import settings
from app.models.property import PropertyType, ListingType


class SearchFilter(BaseModel):
    """Request-scoped search criteria for the public listing search."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    query: Optional[str] = Field(None, max_length=200)
    state: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    min_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    page: int = Field(1, ge=1)
    limit: int = Field(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1)

    # Regional attributes live in nested JSON; the query builder rejects these
    nepa_status: Optional[str] = None
    has_bq: Optional[bool] = None
    gated_community: Optional[bool] = None

    @field_validator("query", "state", "city", "nepa_status", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("max_price")
    @classmethod
    def price_bounds_ordered(cls, v, info: ValidationInfo):
        low = info.data.get("min_price")
        if v is not None and low is not None and low > v:
            raise ValueError("min_price must not be greater than max_price")
        return v

    @field_validator("limit")
    @classmethod
    def cap_limit(cls, v):
        return min(v, settings.SEARCH_MAX_PAGE_SIZE)
