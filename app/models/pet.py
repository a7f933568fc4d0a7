# app/models/pet.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

PET_STATUS_AVAILABLE = "available"
PET_STATUS_SOLD = "sold"


class Pet(SQLModel, table=True):
    """
    Catalog entry: a pet listed for sale.

    A pet is purchasable only while status == "available".
    Cart items reference pets weakly (see CartItem.pet_id), so a pet can
    be sold or deleted without touching any cart.
    """

    __tablename__ = "pets"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the pet",
    )

    species: str = Field(
        max_length=50,
        index=True,
        description="e.g. dog, cat, parrot",
    )

    breed: str = Field(
        max_length=100,
        index=True,
    )

    age: int = Field(
        ge=0,
        description="Age in months",
    )

    price: float = Field(
        gt=0,
        description="Unit price",
    )

    description: str = Field(
        description="Long description shown on the detail page",
    )

    image_url: str | None = Field(
        default=None,
        description="Public image URL (Supabase Storage or external)",
    )

    status: str = Field(
        default=PET_STATUS_AVAILABLE,
        index=True,
        description="available | sold",
    )

    seller_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
        description="Admin who listed the pet",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    @property
    def is_available(self) -> bool:
        return self.status == PET_STATUS_AVAILABLE
