# app/repositories/pet_repo.py
import uuid

from sqlmodel import Session, col, or_, select

from app.database import commit_or_raise
from app.models.pet import Pet


class PetRepository:
    """
    Data access layer for the pet catalog.

    - Pure DB operations (CRUD + filtered listing).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, pet_id: uuid.UUID) -> Pet | None:
        return session.get(Pet, pet_id)

    def get_many(self, session: Session, pet_ids: list[uuid.UUID]) -> dict[uuid.UUID, Pet]:
        """Batch lookup keyed by id; missing ids are simply absent."""
        if not pet_ids:
            return {}
        stmt = select(Pet).where(col(Pet.id).in_(pet_ids))
        return {pet.id: pet for pet in session.exec(stmt).all()}

    def list(
        self,
        session: Session,
        *,
        species: str | None = None,
        breed: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Pet]:
        stmt = select(Pet)
        if species:
            stmt = stmt.where(Pet.species == species)
        if breed:
            stmt = stmt.where(Pet.breed == breed)
        if min_price is not None:
            stmt = stmt.where(Pet.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Pet.price <= max_price)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    col(Pet.name).ilike(pattern),
                    col(Pet.species).ilike(pattern),
                    col(Pet.breed).ilike(pattern),
                    col(Pet.description).ilike(pattern),
                )
            )
        stmt = stmt.order_by(col(Pet.created_at).desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, pet: Pet) -> Pet:
        session.add(pet)
        commit_or_raise(session)
        session.refresh(pet)
        return pet

    def update(self, session: Session, pet: Pet) -> Pet:
        session.add(pet)
        commit_or_raise(session)
        session.refresh(pet)
        return pet

    def delete(self, session: Session, pet: Pet) -> None:
        session.delete(pet)
        commit_or_raise(session)
