from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from app.models.base import BaseModel


class AdminAction(BaseModel):
    """Audit row written for every administrative review action."""

    __tablename__ = "admin_actions"

    admin_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    action_type = Column(String(50), nullable=False)
    target_id = Column(Uuid, nullable=True)
    notes = Column(Text, nullable=True)
