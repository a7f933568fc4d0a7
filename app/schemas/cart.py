# app/schemas/cart.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

# "unavailable" marks an item whose pet has been removed from the catalog.
PetDisplayStatus = Literal["available", "sold", "unavailable"]


class CartItemCreate(SQLModel):
    """
    Payload for adding a pet to the cart.
    """

    model_config = ConfigDict(extra="forbid")

    pet_id: uuid.UUID
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0)


class CartPetRead(SQLModel):
    """
    Display projection of the pet behind a cart item.
    """

    id: uuid.UUID
    name: str | None = None
    price: float | None = None
    image_url: str | None = None
    status: PetDisplayStatus


class CartItemRead(SQLModel):
    """
    Read model for a single cart item, including line_total.

    `price` is the unit price frozen at add time; `pet.price` is the
    catalog's current price (absent once the pet is deleted).
    """

    id: uuid.UUID
    pet: CartPetRead
    quantity: int
    price: float
    line_total: float
    created_at: datetime


class CartRead(SQLModel):
    """
    Full cart response model with totals.
    """

    id: uuid.UUID
    owner_id: uuid.UUID
    items: list[CartItemRead]
    total_quantity: int
    total_amount: float
    updated_at: datetime


class MessageRead(SQLModel):
    message: str
