# app/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    Shopping cart header. Exactly one row per owner.

    total_amount is derived: it is recomputed from the cart's items by
    CartService after every mutation and never set independently.
    """

    __tablename__ = "carts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    owner_id: uuid.UUID = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    total_amount: float = Field(
        default=0.0,
        ge=0,
        description="Sum of quantity * price over all items",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartItem(SQLModel, table=True):
    """
    Line item inside a cart.
    One cart cannot have 2 rows for the same pet.

    pet_id is a weak reference (no foreign key): the pet may be deleted
    from the catalog while the item still sits in a cart. pet_name and
    pet_image_url keep a display snapshot for that case.
    """

    __tablename__ = "cart_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    cart_id: uuid.UUID = Field(
        foreign_key="carts.id",
        index=True,
    )

    pet_id: uuid.UUID = Field(index=True)

    quantity: int = Field(
        gt=0,
        description="Must be >= 1",
    )

    price: float = Field(
        description="Unit price when added to cart",
    )

    pet_name: str | None = None
    pet_image_url: str | None = None

    position: int = Field(
        default=0,
        description="Insertion order within the cart",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
