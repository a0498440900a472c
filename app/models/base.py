import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Uuid
from app.core.database import Base


def utcnow() -> datetime:
    # Naive UTC everywhere; SQLite drops tzinfo on the way back anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(Base):
    __abstract__ = True

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=None, onupdate=utcnow, nullable=True)
