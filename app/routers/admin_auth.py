from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import Unauthorized
from app.core.logging import get_logger
from app.models.user import UserType
from app.routers.auth import authenticate, issue_token

router = APIRouter(tags=["Admin Auth"])

logger = get_logger(__name__)


@router.post("/auth/token")
async def admin_login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Admin-only login. Rejects any profile whose user_type is not admin.
    Used by the admin dashboard.
    """
    try:
        user = authenticate(db, form_data.username, form_data.password)
    except Unauthorized:
        # Generic error, don't reveal whether the email exists
        raise Unauthorized("Invalid credentials or insufficient permissions")

    if user.user_type != UserType.ADMIN:
        logger.warning("Non-admin profile %s attempted admin login", user.id)
        raise Unauthorized("Invalid credentials or insufficient permissions")

    return {
        "access_token": issue_token(user),
        "token_type": "bearer",
        "user": {
            "id": str(user.id),
            "full_name": user.full_name,
            "email": user.email,
            "user_type": user.user_type.value,
        },
    }
