from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, sessionmaker
from app.core.database import SessionLocal, get_db
from app.core.exceptions import Forbidden, Unauthorized
from app.models.user import Profile, UserType
from app.repositories.analytics_repository import AnalyticsRepository
from app.repositories.inquiry_repository import InquiryRepository
from app.repositories.property_repository import PropertyRepository
from app.services.analytics import AnalyticsAggregator
from app.services.inquiries import InquiryService
from app.services.listings import ListingService
from app.utils.auth import decode_token
from typing import Optional
from uuid import UUID

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

async def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme)
) -> Optional[Profile]:
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    try:
        return db.get(Profile, UUID(user_id))
    except ValueError:
        return None

async def get_current_active_user(
    current_user: Optional[Profile] = Depends(get_current_user)
) -> Profile:
    if not current_user:
        raise Unauthorized("Not authenticated")
    if not current_user.is_active:
        raise Forbidden("Account is deactivated")
    return current_user

def require_user_type(*allowed: UserType):
    async def user_type_checker(
        current_user: Profile = Depends(get_current_active_user)
    ) -> Profile:
        if current_user.user_type not in allowed:
            raise Forbidden(
                "Requires one of: " + ", ".join(t.value for t in allowed)
            )
        return current_user
    return user_type_checker


# ─── Service wiring ───────────────────────────────────────────────────────────
# Storage is handed to every service per request; nothing holds a global client.

def get_listing_service(db: Session = Depends(get_db)) -> ListingService:
    return ListingService(PropertyRepository(db))

def get_inquiry_service(db: Session = Depends(get_db)) -> InquiryService:
    return InquiryService(InquiryRepository(db), PropertyRepository(db))

def get_session_factory() -> sessionmaker:
    return SessionLocal

def get_analytics_aggregator(
    session_factory: sessionmaker = Depends(get_session_factory)
) -> AnalyticsAggregator:
    # Fetches run concurrently in threads, so each opens its own session
    return AnalyticsAggregator(AnalyticsRepository(session_factory))
