"""Listing workflow: submission, owner edits and administrative review."""

from typing import Any, List, Optional, Tuple
from uuid import UUID

from app.core.exceptions import Forbidden, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.property import STATUS_TRANSITIONS, PropertyStatus, PropertyVerificationStatus
from app.models.user import Profile, UserType
from app.repositories.property_repository import PropertyRepository
from app.schemas.property import PropertyRecord
from app.schemas.search import SearchFilter
from app.services.duplicates import DuplicateDetector
from app.services.search import SearchQuery, build_search_query
from app.services.validation import validate_listing, validate_listing_update

logger = get_logger(__name__)

DEFAULT_REJECTION_NOTE = "Listing did not meet verification requirements."


def is_public(record: PropertyRecord) -> bool:
    return (
        record.status == PropertyStatus.LIVE
        and record.verification_status == PropertyVerificationStatus.VERIFIED
    )


class ListingService:
    def __init__(self, repository: PropertyRepository, detector: Optional[DuplicateDetector] = None):
        self.repository = repository
        self.detector = detector or DuplicateDetector(repository)

    def create_listing(self, owner: Profile, payload: Any) -> PropertyRecord:
        listing = validate_listing(payload)
        flags = self.detector.check(listing.address, listing.latitude, listing.longitude)
        property_id = self.repository.create(owner.id, listing, flags)
        logger.info(
            "Listing %s created by %s (%s, %s)%s",
            property_id,
            owner.id,
            listing.city,
            listing.state,
            f", {len(flags)} duplicate flag(s)" if flags else "",
        )
        return self.repository.get(property_id)

    def search(self, search: SearchFilter) -> Tuple[List[PropertyRecord], int, SearchQuery]:
        query = build_search_query(search)
        records, total = self.repository.query(query)
        return records, total, query

    def get_visible(self, property_id: UUID, viewer: Optional[Profile] = None) -> PropertyRecord:
        record = self.repository.get(property_id)
        if is_public(record):
            return record
        if viewer is not None and (viewer.id == record.owner_id or viewer.user_type == UserType.ADMIN):
            return record
        # Hidden listings look exactly like missing ones to everybody else
        raise NotFoundError("Property not found")

    def list_for_owner(self, owner: Profile) -> List[PropertyRecord]:
        return self.repository.list_for_owner(owner.id)

    def edit_listing(self, owner: Profile, property_id: UUID, payload: Any) -> PropertyRecord:
        changes = validate_listing_update(payload)
        self._owned(owner, property_id)
        return self.repository.update_fields(property_id, changes)

    def submit_for_verification(self, owner: Profile, property_id: UUID) -> PropertyRecord:
        self._owned(owner, property_id)
        return self.repository.update_status(property_id, PropertyStatus.PENDING_VERIFICATION)

    def delist(self, owner: Profile, property_id: UUID) -> PropertyRecord:
        self._owned(owner, property_id)
        return self.repository.update_status(property_id, PropertyStatus.DELISTED)

    # ─── Admin review ─────────────────────────────────────────────────────────

    def review(self, admin: Profile, property_id: UUID, action: str, notes: Optional[str] = None) -> PropertyRecord:
        if action == "approve":
            return self.repository.transition(
                property_id,
                verification=PropertyVerificationStatus.VERIFIED,
                status=PropertyStatus.LIVE,
                actor_id=admin.id,
                action_type="approve_property",
                notes=notes,
            )
        return self.repository.transition(
            property_id,
            verification=PropertyVerificationStatus.REJECTED,
            status=PropertyStatus.REJECTED,
            actor_id=admin.id,
            action_type="reject_property",
            notes=notes or DEFAULT_REJECTION_NOTE,
        )

    def set_status(
        self, admin: Profile, property_id: UUID, status: PropertyStatus, notes: Optional[str] = None
    ) -> PropertyRecord:
        return self.repository.transition(
            property_id,
            status=status,
            actor_id=admin.id,
            action_type="update_property_status",
            notes=notes,
        )

    def flagged_duplicates(self) -> List[PropertyRecord]:
        return self.repository.list_flagged()

    def resolve_duplicate(
        self,
        admin: Profile,
        property_id: UUID,
        action: str,
        master_property_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> PropertyRecord:
        """Clear a listing's duplicate flags, rejecting it unless both are kept."""
        record = self.repository.get(property_id)
        if not record.duplicate_flags:
            raise NotFoundError("Duplicate property not found")

        if action == "keep_both":
            return self.repository.transition(
                property_id,
                actor_id=admin.id,
                action_type="resolve_duplicate_keep_both",
                notes=notes,
                clear_duplicate_flags=True,
            )

        if action == "keep_master":
            if master_property_id is None or master_property_id == property_id:
                raise ValidationError(
                    "Master property ID required for keep_master action",
                    [{"field": "master_property_id", "message": "Give the id of the listing to keep"}],
                )
            self.repository.get(master_property_id)
            notes = notes or f"Duplicate of property {master_property_id}"
        elif not notes:
            raise ValidationError(
                "Rejection reason required for reject_duplicate action",
                [{"field": "notes", "message": "Give the reason for rejecting the listing"}],
            )

        status, verification = _rejection_targets(record)
        return self.repository.transition(
            property_id,
            status=status,
            verification=verification,
            actor_id=admin.id,
            action_type=f"resolve_duplicate_{action}",
            notes=notes,
            clear_duplicate_flags=True,
        )

    def _owned(self, owner: Profile, property_id: UUID) -> PropertyRecord:
        record = self.repository.get(property_id)
        if record.owner_id != owner.id and owner.user_type != UserType.ADMIN:
            raise Forbidden("You can only manage your own listings")
        return record


def _rejection_targets(record: PropertyRecord):
    """Where a rejected duplicate ends up; live listings can only be delisted."""
    verification = None
    if record.verification_status == PropertyVerificationStatus.PENDING:
        verification = PropertyVerificationStatus.REJECTED

    allowed = STATUS_TRANSITIONS[record.status]
    if PropertyStatus.REJECTED in allowed:
        return PropertyStatus.REJECTED, verification
    if PropertyStatus.DELISTED in allowed:
        return PropertyStatus.DELISTED, verification
    return None, verification
