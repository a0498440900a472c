from typing import Any, List
from uuid import UUID

from app.core.exceptions import Forbidden, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.inquiry import InquiryStatus
from app.models.user import Profile, UserType
from app.repositories.inquiry_repository import InquiryRepository
from app.repositories.property_repository import PropertyRepository
from app.schemas.inquiry import InquiryCreate, InquiryRecord, InquiryRespond
from app.services.listings import is_public
from app.services.validation import validate_payload

logger = get_logger(__name__)


class InquiryService:
    def __init__(self, inquiries: InquiryRepository, properties: PropertyRepository):
        self.inquiries = inquiries
        self.properties = properties

    def create(self, sender: Profile, payload: Any) -> InquiryRecord:
        if sender.user_type != UserType.USER:
            raise Forbidden("Only users can send inquiries")
        data = validate_payload(payload, InquiryCreate, "Invalid inquiry data")

        listing = self.properties.get(data.property_id)
        if not is_public(listing):
            raise NotFoundError("Property not found")
        if listing.owner_id == sender.id:
            raise Forbidden("You cannot send an inquiry about your own listing")
        if self.inquiries.find_pending(sender.id, listing.id) is not None:
            raise ValidationError(
                "You already have a pending inquiry for this property",
                [{"field": "property_id", "message": "A pending inquiry already exists"}],
            )

        record = self.inquiries.create(sender.id, listing.owner_id, data)
        logger.info("Inquiry %s sent on property %s", record.id, listing.id)
        return record

    def list_for(self, profile: Profile) -> List[InquiryRecord]:
        if profile.user_type == UserType.USER:
            return self.inquiries.list_sent(profile.id)
        return self.inquiries.list_received(profile.id)

    def respond(self, receiver: Profile, inquiry_id: UUID, payload: Any) -> InquiryRecord:
        data = validate_payload(payload, InquiryRespond, "Invalid response data")
        self._received(receiver, inquiry_id)
        return self.inquiries.update_status(inquiry_id, InquiryStatus.RESPONDED, data.response_message)

    def close(self, receiver: Profile, inquiry_id: UUID) -> InquiryRecord:
        self._received(receiver, inquiry_id)
        return self.inquiries.update_status(inquiry_id, InquiryStatus.CLOSED)

    def _received(self, profile: Profile, inquiry_id: UUID) -> InquiryRecord:
        record = self.inquiries.get(inquiry_id)
        if record.receiver_id != profile.id:
            raise Forbidden("Only the listing owner can act on this inquiry")
        return record
