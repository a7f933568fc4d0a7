"""
Shared fixtures.

The app is wired to an in-memory SQLite database (see app/database.py);
every test starts from freshly created tables. Tokens are minted with the
same secret the auth dependency verifies against.
"""
import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "http://supabase.test"
os.environ["SUPABASE_JWT_SECRET"] = "test-secret"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from app.database import engine
from app.main import app
from app.models.pet import Pet
from app.models.user import User
from app.repositories.pet_repo import PetRepository
from app.repositories.user_repo import UserRepository


def make_token(user_id: uuid.UUID, email: str) -> str:
    claims = {
        "sub": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def auth_header(user_id: uuid.UUID, email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


@pytest.fixture(autouse=True)
def fresh_db():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(fresh_db):
    with Session(engine) as s:
        yield s


@pytest.fixture
def test_client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin(session: Session) -> User:
    return UserRepository().save(
        session,
        User(id=uuid.uuid4(), email="admin@petmart.io", username="admin", role="admin"),
    )


@pytest.fixture
def customer(session: Session) -> User:
    return UserRepository().save(
        session,
        User(id=uuid.uuid4(), email="alice@petmart.io", username="alice", role="user"),
    )


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_header(admin.id, admin.email)


@pytest.fixture
def customer_headers(customer: User) -> dict[str, str]:
    return auth_header(customer.id, customer.email)


@pytest.fixture
def make_pet(session: Session, admin: User):
    """Factory: insert a pet straight through the repository."""
    repo = PetRepository()

    def _make(
        name: str = "Rex",
        price: float = 10.0,
        status: str = "available",
        species: str = "dog",
        breed: str = "beagle",
        description: str = "Friendly and house trained",
        image_url: str | None = "https://img.petmart.io/rex.jpg",
    ) -> Pet:
        return repo.create(
            session,
            Pet(
                name=name,
                species=species,
                breed=breed,
                age=12,
                price=price,
                description=description,
                image_url=image_url,
                status=status,
                seller_id=admin.id,
            ),
        )

    return _make


@pytest.fixture
def headers_for():
    """Factory: bearer headers for an arbitrary (possibly new) identity."""
    return auth_header
