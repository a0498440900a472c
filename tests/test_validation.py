import math

import pytest

from app.core.exceptions import ValidationError
from app.models.property import ListingType, PropertyType
from app.services.validation import validate_listing, validate_listing_update
from conftest import lekki_listing


def error_fields(exc_info):
    return {d["field"] for d in exc_info.value.details}


def test_valid_listing_is_normalized():
    listing = validate_listing(lekki_listing(title="  Modern 3BR Apartment in Lekki Phase 1  "))

    assert listing.title == "Modern 3BR Apartment in Lekki Phase 1"
    assert listing.property_type == PropertyType.FLAT
    assert listing.listing_type == ListingType.RENT
    assert listing.currency == "NGN"
    assert listing.country == "NG"
    assert listing.regional_attributes() == {}


def test_short_title_names_the_field():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(title="short"))

    assert exc_info.value.message == "Invalid property data"
    assert "title" in error_fields(exc_info)


def test_every_violation_is_reported():
    payload = lekki_listing(price=-5, latitude=91)
    del payload["city"]

    with pytest.raises(ValidationError) as exc_info:
        validate_listing(payload)

    assert {"price", "latitude", "city"} <= error_fields(exc_info)


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_price_rejected(value):
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(price=value))
    assert "price" in error_fields(exc_info)


def test_whitespace_only_title_fails_length_check():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(title="          a "))
    assert "title" in error_fields(exc_info)


def test_unknown_keys_ignored():
    listing = validate_listing(lekki_listing(featured=True, agent_commission=5))
    assert not hasattr(listing, "featured")


def test_unknown_property_type_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(property_type="castle"))
    assert "property_type" in error_fields(exc_info)


def test_regional_groups_validated_when_present():
    payload = lekki_listing(
        power={"nepa_status": "stable", "has_generator": True},
        security={"security_type": ["cctv", "gated_community", "cctv"], "security_hours": "24/7"},
        bq={"has_bq": True, "bq_type": "self_contained", "bq_bathrooms": 1},
    )
    listing = validate_listing(payload)

    assert listing.regional_attributes() == {
        "power": {"nepa_status": "stable", "has_generator": True},
        "security": {"security_type": ["cctv", "gated_community"], "security_hours": "24/7"},
        "bq": {"has_bq": True, "bq_type": "self_contained", "bq_bathrooms": 1},
    }


def test_nested_violation_uses_dotted_path():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(security={"security_type": ["moat"]}))
    assert "security.security_type.0" in error_fields(exc_info)


def test_bad_water_tank_capacity():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(water={"water_tank_capacity": 0}))
    assert "water.water_tank_capacity" in error_fields(exc_info)


def test_flat_regional_keys_folded_into_groups():
    listing = validate_listing(lekki_listing(nepa_status="stable", has_bq=True, water_source="borehole"))

    assert listing.regional_attributes() == {
        "power": {"nepa_status": "stable"},
        "water": {"water_source": "borehole"},
        "bq": {"has_bq": True},
    }


def test_flat_regional_keys_validated():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(nepa_status="bogus", has_bq="not-a-bool"))
    assert {"power.nepa_status", "bq.has_bq"} <= error_fields(exc_info)


def test_grouped_value_wins_over_flat_key():
    listing = validate_listing(lekki_listing(
        power={"nepa_status": "poor"},
        nepa_status="stable",
        has_generator=True,
    ))
    assert listing.regional_attributes() == {"power": {"nepa_status": "poor", "has_generator": True}}


@pytest.mark.parametrize("value", [True, False])
def test_boolean_price_rejected(value):
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(price=value))
    assert "price" in error_fields(exc_info)


def test_boolean_in_numeric_group_field_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(lekki_listing(water={"water_tank_capacity": True}))
    assert "water.water_tank_capacity" in error_fields(exc_info)


def test_non_object_payload():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing(["not", "a", "listing"])
    assert error_fields(exc_info) == {"body"}


def test_update_accepts_partial_payload():
    changes = validate_listing_update({"price": 3000000})
    assert changes.model_dump(exclude_unset=True) == {"price": 3000000}


def test_update_applies_creation_rules():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing_update({"description": "too short"})
    assert "description" in error_fields(exc_info)


def test_update_folds_flat_regional_keys():
    changes = validate_listing_update({"nepa_status": "intermittent"})
    assert changes.model_dump(exclude_unset=True) == {"power": {"nepa_status": "intermittent"}}


def test_update_rejects_flat_regional_violation():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing_update({"security_type": ["moat"]})
    assert "security.security_type.0" in error_fields(exc_info)


def test_update_rejects_boolean_bedrooms():
    with pytest.raises(ValidationError) as exc_info:
        validate_listing_update({"bedrooms": True})
    assert "bedrooms" in error_fields(exc_info)
