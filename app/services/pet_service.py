# app/services/pet_service.py
import logging
import uuid

from sqlmodel import Session

from app.core import storage_utils
from app.core.errors import InvalidArgumentError, NotFoundError
from app.models.pet import Pet
from app.models.user import User
from app.repositories.pet_repo import PetRepository
from app.schemas.pet import PetCreate, PetUpdate

logger = logging.getLogger(__name__)

# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class PetService:
    """
    Business logic for the pet catalog.

    Responsibilities:
      - filtered listing and lookup (public)
      - create / partial update / delete (admin, enforced at router)
      - image upload orchestration with Supabase Storage

    Carts are never touched here: deleting or selling a pet leaves
    existing cart items in place with their frozen price.
    """

    def __init__(self, repo: PetRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise InvalidArgumentError(
                "Unsupported image type. Allowed: JPEG, PNG, WEBP."
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise InvalidArgumentError("Image too large (max 5MB).")

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    # ----- Pets -----

    def list_pets(
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
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidArgumentError("min_price cannot be greater than max_price")

        return self.repo.list(
            session,
            species=species,
            breed=breed,
            min_price=min_price,
            max_price=max_price,
            search=search,
            skip=skip,
            limit=limit,
        )

    def get_pet(self, session: Session, pet_id: uuid.UUID) -> Pet:
        pet = self.repo.get_by_id(session, pet_id)
        if not pet:
            raise NotFoundError("Pet not found")
        return pet

    def create_pet(
        self,
        session: Session,
        payload: PetCreate,
        seller: User,
    ) -> Pet:
        pet = Pet(
            name=payload.name,
            species=payload.species,
            breed=payload.breed,
            age=payload.age,
            price=payload.price,
            description=payload.description,
            image_url=payload.image_url,
            seller_id=seller.id,
        )
        pet = self.repo.create(session, pet)
        logger.info("Pet %s listed by %s", pet.id, seller.id)
        return pet

    def update_pet(
        self,
        session: Session,
        pet_id: uuid.UUID,
        payload: PetUpdate,
    ) -> Pet:
        """
        Partial update: only fields present in the payload change.
        """
        pet = self.get_pet(session, pet_id)

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(pet, field, value)

        return self.repo.update(session, pet)

    def delete_pet(self, session: Session, pet_id: uuid.UUID) -> None:
        """
        Delete a pet and, best-effort, its stored image.
        """
        pet = self.get_pet(session, pet_id)

        if pet.image_url:
            storage_utils.delete_public_url(pet.image_url)

        self.repo.delete(session, pet)
        logger.info("Pet %s deleted", pet_id)

    # ----- Image -----

    def set_image(
        self,
        session: Session,
        pet_id: uuid.UUID,
        content_type: str,
        file_bytes: bytes,
    ) -> Pet:
        """
        Upload or replace the pet's image.

        - Validates content type + size.
        - Uploads to the deterministic path pets/<pet_id>/image.<ext>.
        - Only then deletes the previous object, unless the upload
          overwrote it in place.
        """
        pet = self.get_pet(session, pet_id)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        previous_url = pet.image_url
        path = f"pets/{pet.id}/image.{ext}"
        pet.image_url = storage_utils.upload_to_storage(path, file_bytes)

        if previous_url and previous_url != pet.image_url:
            storage_utils.delete_public_url(previous_url)

        return self.repo.update(session, pet)
