from sqlalchemy import Column, String, Text, Enum, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.models.property import Property  # noqa: F401
import enum

class InquiryStatus(str, enum.Enum):
    PENDING = "pending"
    RESPONDED = "responded"
    CLOSED = "closed"

INQUIRY_TRANSITIONS = {
    InquiryStatus.PENDING: {InquiryStatus.RESPONDED, InquiryStatus.CLOSED},
    InquiryStatus.RESPONDED: {InquiryStatus.CLOSED},
    InquiryStatus.CLOSED: set(),
}

class Inquiry(BaseModel):
    __tablename__ = "inquiries"

    sender_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    receiver_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)

    message = Column(Text, nullable=False)
    contact_phone = Column(String(20), nullable=True)
    contact_email = Column(String(100), nullable=True)

    status = Column(Enum(InquiryStatus), default=InquiryStatus.PENDING, nullable=False)
    response_message = Column(Text, nullable=True)
    responded_at = Column(DateTime, nullable=True)

    property = relationship("Property", lazy="joined")
