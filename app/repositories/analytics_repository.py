"""Read-only data source for the analytics aggregator.

Each fetch is a blocking call that opens its own session and returns plain
named tuples, so the aggregator can run several of them in worker threads at
once and never touches ORM rows.
"""

from datetime import datetime
from typing import List, NamedTuple, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import StorageError
from app.core.logging import get_logger
from app.models.admin_action import AdminAction
from app.models.inquiry import Inquiry
from app.models.property import Property
from app.models.user import Profile

logger = get_logger(__name__)


class UserStat(NamedTuple):
    user_type: str
    created_at: datetime


class PropertyStat(NamedTuple):
    status: str
    verification_status: str
    property_type: str
    state: str
    price: float
    created_at: datetime


class InquiryStat(NamedTuple):
    status: str
    property_status: Optional[str]
    created_at: datetime


class AdminActionStat(NamedTuple):
    action_type: str
    created_at: datetime


ENTITY_MODELS = {
    "users": Profile,
    "properties": Property,
    "inquiries": Inquiry,
    "admin_actions": AdminAction,
}


def _value(member):
    return member.value if member is not None else None


class AnalyticsRepository:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def fetch_users(self, since: datetime) -> List[UserStat]:
        rows = self._rows(select(Profile.user_type, Profile.created_at).where(Profile.created_at >= since))
        return [UserStat(_value(r.user_type), r.created_at) for r in rows]

    def fetch_properties(self, since: datetime) -> List[PropertyStat]:
        rows = self._rows(
            select(
                Property.status,
                Property.verification_status,
                Property.property_type,
                Property.state,
                Property.price,
                Property.created_at,
            ).where(Property.created_at >= since)
        )
        return [
            PropertyStat(
                _value(r.status),
                _value(r.verification_status),
                _value(r.property_type),
                r.state,
                r.price or 0.0,
                r.created_at,
            )
            for r in rows
        ]

    def fetch_inquiries(self, since: datetime) -> List[InquiryStat]:
        rows = self._rows(
            select(
                Inquiry.status,
                Property.status.label("property_status"),
                Inquiry.created_at,
            )
            .outerjoin(Property, Property.id == Inquiry.property_id)
            .where(Inquiry.created_at >= since)
        )
        return [InquiryStat(_value(r.status), _value(r.property_status), r.created_at) for r in rows]

    def fetch_admin_actions(self, since: datetime) -> List[AdminActionStat]:
        rows = self._rows(
            select(AdminAction.action_type, AdminAction.created_at).where(AdminAction.created_at >= since)
        )
        return [AdminActionStat(r.action_type, r.created_at) for r in rows]

    def count_created(
        self,
        entity: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> int:
        """Rows of ``entity`` created in [since, until)."""
        model = ENTITY_MODELS[entity]
        stmt = select(func.count(model.id))
        if since is not None:
            stmt = stmt.where(model.created_at >= since)
        if until is not None:
            stmt = stmt.where(model.created_at < until)
        try:
            with self.session_factory() as db:
                return db.scalar(stmt) or 0
        except SQLAlchemyError as exc:
            logger.exception("Analytics count failed for %s", entity)
            raise StorageError("Failed to fetch analytics data") from exc

    def _rows(self, stmt):
        try:
            with self.session_factory() as db:
                return db.execute(stmt).all()
        except SQLAlchemyError as exc:
            logger.exception("Analytics fetch failed")
            raise StorageError("Failed to fetch analytics data") from exc
