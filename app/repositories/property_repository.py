"""Property repository: the only code that reads or writes listing rows."""

import uuid
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidTransitionError, NotFoundError, StorageError
from app.core.logging import get_logger
from app.models.admin_action import AdminAction
from app.models.base import utcnow
from app.models.property import (
    EDITABLE_STATUSES,
    STATUS_TRANSITIONS,
    VERIFICATION_TRANSITIONS,
    ListingType,
    Property,
    PropertyDetails,
    PropertyStatus,
    PropertyType,
    PropertyVerificationStatus,
)
from app.schemas.property import REGIONAL_GROUPS, DuplicateFlag, PropertyCreate, PropertyRecord, PropertyUpdate
from app.services.search import TEXT_SEARCH_FIELDS, Predicate, SearchQuery

logger = get_logger(__name__)

DETAIL_FIELDS = ("bedrooms", "bathrooms", "square_feet")
ENUM_FIELDS = {"property_type": PropertyType, "listing_type": ListingType}


def to_record(prop: Property) -> PropertyRecord:
    """Merge a listing row and its details row into one stable shape."""
    details = prop.details
    return PropertyRecord(
        id=prop.id,
        owner_id=prop.owner_id,
        title=prop.title,
        description=prop.description,
        property_type=prop.property_type,
        listing_type=prop.listing_type,
        price=prop.price,
        currency=prop.currency,
        address=prop.address,
        city=prop.city,
        state=prop.state,
        country=prop.country,
        latitude=prop.latitude,
        longitude=prop.longitude,
        bedrooms=details.bedrooms if details else None,
        bathrooms=details.bathrooms if details else None,
        square_feet=details.square_feet if details else None,
        regional_attributes=(details.regional_attributes or {}) if details else {},
        status=prop.status,
        verification_status=prop.verification_status,
        verification_notes=prop.verification_notes,
        verified_by=prop.verified_by,
        verified_at=prop.verified_at,
        duplicate_flags=prop.duplicate_flags or [],
        created_at=prop.created_at,
        updated_at=prop.updated_at,
    )


class PropertyRepository:
    def __init__(self, db: Session):
        self.db = db

    # ─── Writes ───────────────────────────────────────────────────────────────

    def create(
        self,
        owner_id: UUID,
        listing: PropertyCreate,
        duplicate_flags: Iterable[DuplicateFlag] = (),
    ) -> UUID:
        """Store a new listing as draft/pending and return its id.

        The listing and its details row are written in one transaction, so a
        failure leaves neither behind.
        """
        flags = [flag.model_dump(mode="json") for flag in duplicate_flags]
        property_id = uuid.uuid4()
        prop = Property(
            id=property_id,
            owner_id=owner_id,
            title=listing.title,
            description=listing.description,
            property_type=listing.property_type,
            listing_type=listing.listing_type,
            price=listing.price,
            currency=listing.currency,
            address=listing.address,
            city=listing.city,
            state=listing.state,
            country=listing.country,
            latitude=listing.latitude,
            longitude=listing.longitude,
            status=PropertyStatus.DRAFT,
            verification_status=PropertyVerificationStatus.PENDING,
            duplicate_flags=flags,
            is_flagged=bool(flags),
        )
        prop.details = PropertyDetails(
            bedrooms=listing.bedrooms,
            bathrooms=listing.bathrooms,
            square_feet=listing.square_feet,
            regional_attributes=listing.regional_attributes(),
        )
        self.db.add(prop)
        self._commit("create property")
        return property_id

    def update_fields(self, property_id: UUID, changes: PropertyUpdate) -> PropertyRecord:
        prop = self._load(property_id)
        if prop.status not in EDITABLE_STATUSES:
            raise InvalidTransitionError(f"Listing cannot be edited while {prop.status.value}")

        supplied = changes.model_dump(exclude_unset=True, exclude=set(REGIONAL_GROUPS))
        for field, value in supplied.items():
            if field in DETAIL_FIELDS:
                continue
            # Required listing columns cannot be cleared
            if value is not None:
                setattr(prop, field, value)

        if prop.details is None:
            prop.details = PropertyDetails(regional_attributes={})
        for field in DETAIL_FIELDS:
            if field in supplied:
                setattr(prop.details, field, supplied[field])

        regional = changes.regional_attributes()
        if regional:
            merged = dict(prop.details.regional_attributes or {})
            merged.update(regional)
            # Reassign so the JSON column is seen as dirty
            prop.details.regional_attributes = merged

        self._commit("update property")
        return to_record(prop)

    def update_status(self, property_id: UUID, new_status: PropertyStatus, **kwargs) -> PropertyRecord:
        return self.transition(property_id, status=new_status, **kwargs)

    def update_verification(
        self, property_id: UUID, new_status: PropertyVerificationStatus, **kwargs
    ) -> PropertyRecord:
        return self.transition(property_id, verification=new_status, **kwargs)

    def transition(
        self,
        property_id: UUID,
        status: Optional[PropertyStatus] = None,
        verification: Optional[PropertyVerificationStatus] = None,
        actor_id: Optional[UUID] = None,
        action_type: Optional[str] = None,
        notes: Optional[str] = None,
        clear_duplicate_flags: bool = False,
    ) -> PropertyRecord:
        """Apply status and/or verification moves atomically.

        Every move is checked before anything is mutated, so an invalid
        target leaves the record exactly as it was.
        """
        prop = self._load(property_id)

        next_verification = prop.verification_status
        if verification is not None:
            _check_transition(VERIFICATION_TRANSITIONS, prop.verification_status, verification, "verification")
            next_verification = verification
        if status is not None:
            _check_transition(STATUS_TRANSITIONS, prop.status, status, "status")
            if status == PropertyStatus.LIVE and next_verification != PropertyVerificationStatus.VERIFIED:
                raise InvalidTransitionError("Listing must be verified before it can go live")

        previous = (prop.status, prop.verification_status)
        if verification is not None:
            prop.verification_status = verification
            prop.verified_by = actor_id
            prop.verified_at = utcnow()
        if status is not None:
            prop.status = status
        if notes is not None:
            prop.verification_notes = notes
        if clear_duplicate_flags:
            prop.duplicate_flags = []
            prop.is_flagged = False
        if action_type is not None and actor_id is not None:
            self.db.add(AdminAction(
                admin_id=actor_id,
                action_type=action_type,
                target_id=property_id,
                notes=notes,
            ))

        self._commit("transition property")
        logger.info(
            "Property %s moved from %s/%s to %s/%s",
            property_id,
            previous[0].value,
            previous[1].value,
            prop.status.value,
            prop.verification_status.value,
        )
        return to_record(prop)

    # ─── Reads ────────────────────────────────────────────────────────────────

    def get(self, property_id: UUID) -> PropertyRecord:
        return to_record(self._load(property_id))

    def query(self, search: SearchQuery) -> Tuple[List[PropertyRecord], int]:
        """One page of publicly visible listings plus the total match count."""
        clauses = [
            Property.status == PropertyStatus.LIVE,
            Property.verification_status == PropertyVerificationStatus.VERIFIED,
        ]
        clauses.extend(_clause(p) for p in sorted(search.predicates, key=_predicate_key))

        count_stmt = (
            select(func.count(Property.id))
            .select_from(Property)
            .outerjoin(PropertyDetails, PropertyDetails.property_id == Property.id)
            .where(*clauses)
        )
        page_stmt = (
            select(Property)
            .outerjoin(PropertyDetails, PropertyDetails.property_id == Property.id)
            .where(*clauses)
            .order_by(Property.created_at.desc(), Property.id.desc())
            .offset(search.offset)
            .limit(search.limit)
        )
        try:
            total = self.db.scalar(count_stmt) or 0
            rows = self.db.scalars(page_stmt).unique().all()
        except SQLAlchemyError as exc:
            logger.exception("Property search failed")
            raise StorageError("Failed to search properties") from exc
        return [to_record(p) for p in rows], total

    def find_live_by_address(self, address: str, exclude_id: Optional[UUID] = None) -> List[UUID]:
        return self._live_ids(Property.address == address, exclude_id)

    def find_live_by_coordinates(
        self, latitude: float, longitude: float, exclude_id: Optional[UUID] = None
    ) -> List[UUID]:
        return self._live_ids(
            (Property.latitude == latitude) & (Property.longitude == longitude),
            exclude_id,
        )

    def list_flagged(self) -> List[PropertyRecord]:
        return self._list(select(Property).where(Property.is_flagged.is_(True)))

    def list_for_owner(self, owner_id: UUID) -> List[PropertyRecord]:
        return self._list(select(Property).where(Property.owner_id == owner_id))

    # ─── Internals ────────────────────────────────────────────────────────────

    def _load(self, property_id: UUID) -> Property:
        try:
            prop = self.db.get(Property, property_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load property %s", property_id)
            raise StorageError("Failed to load property") from exc
        if prop is None:
            raise NotFoundError("Property not found")
        return prop

    def _live_ids(self, condition, exclude_id: Optional[UUID]) -> List[UUID]:
        stmt = select(Property.id).where(Property.status == PropertyStatus.LIVE, condition)
        if exclude_id is not None:
            stmt = stmt.where(Property.id != exclude_id)
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as exc:
            logger.exception("Duplicate lookup failed")
            raise StorageError("Failed to look up existing listings") from exc

    def _list(self, stmt) -> List[PropertyRecord]:
        stmt = stmt.order_by(Property.created_at.desc(), Property.id.desc())
        try:
            rows = self.db.scalars(stmt).unique().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to list properties")
            raise StorageError("Failed to list properties") from exc
        return [to_record(p) for p in rows]

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to %s", operation)
            raise StorageError(f"Failed to {operation}") from exc


def _check_transition(table, current, target, axis: str) -> None:
    if target not in table[current]:
        raise InvalidTransitionError(
            f"Invalid {axis} transition: {current.value} -> {target.value}"
        )


def _predicate_key(predicate: Predicate):
    return (predicate.field, predicate.op, str(predicate.value))


def _clause(predicate: Predicate):
    if predicate.field == "text":
        return or_(*(
            func.lower(getattr(Property, name)).contains(predicate.value, autoescape=True)
            for name in TEXT_SEARCH_FIELDS
        ))

    if predicate.field in DETAIL_FIELDS:
        column = getattr(PropertyDetails, predicate.field)
    else:
        column = getattr(Property, predicate.field)

    value = predicate.value
    if predicate.field in ENUM_FIELDS:
        value = ENUM_FIELDS[predicate.field](value)

    if predicate.op == "contains":
        return func.lower(column).contains(value, autoescape=True)
    if predicate.op == "iequals":
        return func.lower(column) == value
    if predicate.op == "equals":
        return column == value
    if predicate.op == "gte":
        return column >= value
    if predicate.op == "lte":
        return column <= value
    raise ValueError(f"Unknown predicate operator: {predicate.op}")
