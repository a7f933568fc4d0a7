# app/schemas/pet.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

PetStatus = Literal["available", "sold"]


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class PetCreate(SQLModel):
    """
    Payload for listing a new pet (admin).

    The seller is the authenticated admin; status starts as 'available'.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    species: str = Field(max_length=50)
    breed: str = Field(max_length=100)
    age: int = Field(ge=0)
    price: float = Field(gt=0)
    description: str
    image_url: str | None = None

    @field_validator("name", "species", "breed", "description")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class PetUpdate(SQLModel):
    """
    Partial update payload for pets.
    All fields are optional; omitted fields keep their value.
    `image_url: null` clears the image reference.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    species: str | None = Field(default=None, max_length=50)
    breed: str | None = Field(default=None, max_length=100)
    age: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, gt=0)
    description: str | None = None
    image_url: str | None = None
    status: PetStatus | None = None

    @field_validator("name", "species", "breed", "description")
    @classmethod
    def not_empty(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("field cannot be null")
        return _strip_required(v)

    @field_validator("age", "price", "status")
    @classmethod
    def not_null(cls, v):
        # Only image_url may be cleared with an explicit null
        if v is None:
            raise ValueError("field cannot be null")
        return v


class PetRead(SQLModel):
    """
    Pet representation for clients.
    """

    id: uuid.UUID
    name: str
    species: str
    breed: str
    age: int
    price: float
    description: str
    image_url: str | None = None
    status: PetStatus
    seller_id: uuid.UUID
    created_at: datetime
