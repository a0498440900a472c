"""
scripts/create_admin.py

Run this once from your project root to create the first admin profile:

    python -m scripts.create_admin

You will be prompted for name, email, phone, and password.
Admins cannot self-register through /api/auth/register.
"""

import sys
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.database import SessionLocal, init_db
from app.core.exceptions import ValidationError
from app.models.user import Profile, UserType
from app.schemas.user import validate_nigerian_phone
from app.utils.auth import get_password_hash


def create_admin_profile(
    db: Session,
    full_name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
) -> Profile:
    """Insert an active admin profile; raises ValidationError on bad input."""
    if not full_name or not email or not password:
        raise ValidationError("Full name, email and password are required.")

    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters.")

    if db.scalars(select(Profile).where(Profile.email == email)).first():
        raise ValidationError(f"Email '{email}' is already registered.")

    if phone:
        try:
            phone = validate_nigerian_phone(phone)
        except ValueError as e:
            raise ValidationError(str(e))

    admin = Profile(
        full_name=full_name,
        email=email,
        phone=phone or None,
        password_hash=get_password_hash(password),
        user_type=UserType.ADMIN,
        is_active=True,
    )

    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def create_admin():
    print("\n── Create Admin Profile ──────────────────")

    full_name = input("Full name:       ").strip()
    email     = input("Email:           ").strip()
    phone     = input("Phone (+234...): ").strip()
    password  = input("Password:        ").strip()

    init_db()
    db = SessionLocal()
    try:
        admin = create_admin_profile(db, full_name, email, password, phone or None)
    except ValidationError as e:
        db.rollback()
        print(f"❌ {e.message}")
        sys.exit(1)
    finally:
        db.close()

    print("\n✅ Admin profile created successfully!")
    print(f"   ID:    {admin.id}")
    print(f"   Name:  {admin.full_name}")
    print(f"   Email: {admin.email}")
    print("\nYou can now log in at your admin dashboard.\n")


if __name__ == "__main__":
    create_admin()
