from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidTransitionError, NotFoundError, StorageError
from app.core.logging import get_logger
from app.models.base import utcnow
from app.models.inquiry import INQUIRY_TRANSITIONS, Inquiry, InquiryStatus
from app.schemas.inquiry import InquiryCreate, InquiryRecord

logger = get_logger(__name__)


def to_record(inquiry: Inquiry) -> InquiryRecord:
    prop = inquiry.property
    return InquiryRecord(
        id=inquiry.id,
        sender_id=inquiry.sender_id,
        receiver_id=inquiry.receiver_id,
        property_id=inquiry.property_id,
        property_title=prop.title if prop is not None else None,
        property_status=prop.status if prop is not None else None,
        message=inquiry.message,
        contact_phone=inquiry.contact_phone,
        contact_email=inquiry.contact_email,
        status=inquiry.status,
        response_message=inquiry.response_message,
        responded_at=inquiry.responded_at,
        created_at=inquiry.created_at,
    )


class InquiryRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, sender_id: UUID, receiver_id: UUID, data: InquiryCreate) -> InquiryRecord:
        inquiry = Inquiry(
            sender_id=sender_id,
            receiver_id=receiver_id,
            property_id=data.property_id,
            message=data.message,
            contact_phone=data.contact_phone,
            contact_email=data.contact_email,
            status=InquiryStatus.PENDING,
        )
        self.db.add(inquiry)
        self._commit("create inquiry")
        return to_record(inquiry)

    def get(self, inquiry_id: UUID) -> InquiryRecord:
        return to_record(self._load(inquiry_id))

    def find_pending(self, sender_id: UUID, property_id: UUID) -> Optional[InquiryRecord]:
        """The sender's open inquiry on this listing, if any."""
        stmt = select(Inquiry).where(
            Inquiry.sender_id == sender_id,
            Inquiry.property_id == property_id,
            Inquiry.status == InquiryStatus.PENDING,
        )
        try:
            inquiry = self.db.scalars(stmt).first()
        except SQLAlchemyError as exc:
            logger.exception("Failed to look up pending inquiry")
            raise StorageError("Failed to fetch inquiries") from exc
        return to_record(inquiry) if inquiry is not None else None

    def list_sent(self, sender_id: UUID) -> List[InquiryRecord]:
        return self._list(Inquiry.sender_id == sender_id)

    def list_received(self, receiver_id: UUID) -> List[InquiryRecord]:
        return self._list(Inquiry.receiver_id == receiver_id)

    def update_status(
        self, inquiry_id: UUID, new_status: InquiryStatus, response_message: Optional[str] = None
    ) -> InquiryRecord:
        inquiry = self._load(inquiry_id)
        if new_status not in INQUIRY_TRANSITIONS[inquiry.status]:
            raise InvalidTransitionError(
                f"Invalid inquiry transition: {inquiry.status.value} -> {new_status.value}"
            )
        inquiry.status = new_status
        if new_status == InquiryStatus.RESPONDED:
            inquiry.response_message = response_message
            inquiry.responded_at = utcnow()
        self._commit("update inquiry")
        return to_record(inquiry)

    def _load(self, inquiry_id: UUID) -> Inquiry:
        try:
            inquiry = self.db.get(Inquiry, inquiry_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load inquiry %s", inquiry_id)
            raise StorageError("Failed to load inquiry") from exc
        if inquiry is None:
            raise NotFoundError("Inquiry not found")
        return inquiry

    def _list(self, condition) -> List[InquiryRecord]:
        stmt = select(Inquiry).where(condition).order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
        try:
            rows = self.db.scalars(stmt).unique().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to list inquiries")
            raise StorageError("Failed to fetch inquiries") from exc
        return [to_record(i) for i in rows]

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to %s", operation)
            raise StorageError(f"Failed to {operation}") from exc
