# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

ROLE_USER = "user"
ROLE_ADMIN = "admin"

USERNAME_MAX_LENGTH = 50


class User(SQLModel, table=True):
    """
    Marketplace account, keyed by the Supabase auth user id (JWT `sub`).

    Credentials stay in Supabase Auth. Customers (`role="user"`) own one
    cart each; admins list and manage pets.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(primary_key=True)
    email: str = Field(unique=True, index=True)
    username: str = Field(max_length=USERNAME_MAX_LENGTH)
    role: str = Field(default=ROLE_USER, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
