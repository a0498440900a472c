import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_session_factory
from app.core.database import Base, get_db, init_db
from app.main import app
from app.models.property import PropertyStatus, PropertyVerificationStatus
from app.models.user import Profile, UserType
from app.repositories.property_repository import PropertyRepository
from app.services.validation import validate_listing
from app.utils.auth import create_access_token, get_password_hash

PASSWORD = "lagos-secret-1"


def lekki_listing(**overrides):
    payload = {
        "title": "Modern 3BR Apartment in Lekki Phase 1",
        "description": "Spacious serviced flat with 24/7 power, borehole water and a fitted kitchen.",
        "price": 2500000,
        "address": "12 Admiralty Way",
        "city": "Lagos",
        "state": "Lagos",
        "latitude": 6.4281,
        "longitude": 3.4219,
        "property_type": "flat",
        "listing_type": "rent",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def engine(tmp_path):
    # A file database so analytics worker threads get their own connections
    engine = create_engine(
        f"sqlite:///{tmp_path / 'realest.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(db, engine):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: sessionmaker(bind=engine)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def repository(db):
    return PropertyRepository(db)


@pytest.fixture
def make_profile(db):
    def factory(user_type=UserType.OWNER, email=None, is_active=True):
        profile = Profile(
            email=email or f"{user_type.value}-{uuid.uuid4().hex[:8]}@realest.com.ng",
            password_hash=get_password_hash(PASSWORD),
            full_name=f"Test {user_type.value.title()}",
            user_type=user_type,
            is_active=is_active,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile
    return factory


@pytest.fixture
def owner(make_profile):
    return make_profile(UserType.OWNER)


@pytest.fixture
def admin(make_profile):
    return make_profile(UserType.ADMIN)


@pytest.fixture
def buyer(make_profile):
    return make_profile(UserType.USER)


def auth_headers(profile):
    token = create_access_token({"sub": str(profile.id), "user_type": profile.user_type.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_live_listing(repository):
    """Store a listing and walk it through review so it is publicly visible."""
    def factory(owner, **overrides):
        property_id = repository.create(owner.id, validate_listing(lekki_listing(**overrides)))
        repository.update_status(property_id, PropertyStatus.PENDING_VERIFICATION)
        repository.transition(
            property_id,
            verification=PropertyVerificationStatus.VERIFIED,
            status=PropertyStatus.LIVE,
        )
        return property_id
    return factory
