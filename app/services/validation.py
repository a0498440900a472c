"""Turn raw request payloads into validated schema objects.

Pydantic does the checking; this module only reshapes its errors into the
flat ``[{"field": ..., "message": ...}]`` list the API returns with a 400.
"""

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.schemas.property import PropertyCreate, PropertyUpdate

ModelT = TypeVar("ModelT", bound=BaseModel)


def field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into dotted field paths."""
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        details.append({"field": field, "message": err["msg"]})
    return details


def validate_payload(payload: Any, schema: Type[ModelT], error: str) -> ModelT:
    if not isinstance(payload, dict):
        raise ValidationError(error, [{"field": "body", "message": "Expected a JSON object"}])
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(error, field_errors(exc)) from exc


def validate_listing(payload: Any) -> PropertyCreate:
    """Validate a listing submission; every violation is reported at once."""
    return validate_payload(payload, PropertyCreate, "Invalid property data")


def validate_listing_update(payload: Any) -> PropertyUpdate:
    return validate_payload(payload, PropertyUpdate, "Invalid property data")
