from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import Forbidden, StorageError, Unauthorized, ValidationError
from app.core.logging import get_logger
from app.models.user import Profile
from app.schemas.user import ProfileCreate, ProfileLogin, TokenResponse, ProfileResponse
from app.utils.auth import get_password_hash, verify_password, create_access_token
from app.api.deps import get_current_active_user
from typing import Optional

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = get_logger(__name__)


def email_taken() -> ValidationError:
    return ValidationError(
        "Email already registered",
        [{"field": "email", "message": "Email already registered"}],
    )


def find_profile_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.scalars(select(Profile).where(Profile.email == email)).first()


def authenticate(db: Session, email: str, password: str) -> Profile:
    """Check credentials; raises Unauthorized/Forbidden on failure."""
    user = find_profile_by_email(db, email)

    if not user or not verify_password(password, user.password_hash):
        raise Unauthorized("Incorrect email or password")

    if not user.is_active:
        raise Forbidden("Account is deactivated")

    return user


def issue_token(user: Profile) -> str:
    return create_access_token(
        data={
            "sub": str(user.id),
            "user_type": user.user_type.value,
        }
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: ProfileCreate, db: Session = Depends(get_db)):
    if find_profile_by_email(db, user_data.email):
        raise email_taken()

    user = Profile(
        email=user_data.email,
        phone=user_data.phone,
        full_name=user_data.full_name,
        password_hash=get_password_hash(user_data.password),
        user_type=user_data.user_type,
    )

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Another request registered the same email after our lookup
        db.rollback()
        raise email_taken() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to register profile")
        raise StorageError("Failed to register profile") from exc
    db.refresh(user)
    logger.info("Registered %s profile %s", user.user_type.value, user.id)

    return TokenResponse(
        access_token=issue_token(user),
        user=ProfileResponse.model_validate(user)
    )

@router.post("/login", response_model=TokenResponse)
async def login(user_data: ProfileLogin, db: Session = Depends(get_db)):
    user = authenticate(db, user_data.email, user_data.password)

    return TokenResponse(
        access_token=issue_token(user),
        user=ProfileResponse.model_validate(user)
    )

@router.post("/token", response_model=dict)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """OAuth2 compatible token endpoint for Swagger UI"""
    user = authenticate(db, form_data.username, form_data.password)

    return {
        "access_token": issue_token(user),
        "token_type": "bearer"
    }

@router.get("/me", response_model=ProfileResponse)
async def get_current_user_info(
    current_user: Profile = Depends(get_current_active_user)
):
    return current_user
