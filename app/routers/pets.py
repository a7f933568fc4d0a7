# app/routers/pets.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.pet_repo import PetRepository
from app.schemas.pet import PetCreate, PetRead, PetUpdate
from app.services.pet_service import PetService

router = APIRouter(prefix="/pets", tags=["Pets"])

repo = PetRepository()
service = PetService(repo)


# -------- Public endpoints --------


@router.get("", response_model=list[PetRead])
def list_pets(
    session: Session = Depends(get_session),
    species: str | None = None,
    breed: str | None = None,
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    search: str | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List pets, newest first.

    Filters (all optional):
      - species, breed: exact match
      - min_price / max_price: inclusive bounds
      - search: case-insensitive text over name, species, breed, description
    """
    return service.list_pets(
        session,
        species=species,
        breed=breed,
        min_price=min_price,
        max_price=max_price,
        search=search,
        skip=skip,
        limit=limit,
    )


@router.get("/{pet_id}", response_model=PetRead)
def get_pet(
    pet_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single pet by id.
    """
    return service.get_pet(session, pet_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=PetRead,
    status_code=status.HTTP_201_CREATED,
)
def create_pet(
    payload: PetCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    List a new pet (admin only). The admin becomes the seller.
    """
    return service.create_pet(session, payload, admin)


@router.patch(
    "/{pet_id}",
    response_model=PetRead,
    dependencies=[Depends(require_admin)],
)
def update_pet(
    pet_id: uuid.UUID,
    payload: PetUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing pet (admin only). Omitted fields are unchanged.
    """
    return service.update_pet(session, pet_id, payload)


@router.delete(
    "/{pet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_pet(
    pet_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a pet (admin only). Cart items keep their snapshot.
    """
    service.delete_pet(session, pet_id)
    return None


@router.post(
    "/{pet_id}/image",
    response_model=PetRead,
    dependencies=[Depends(require_admin)],
    summary="Upload or replace the image of a pet",
)
def upload_pet_image(
    pet_id: uuid.UUID,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    """
    Upload a new image for the pet.

    - Accepts JPEG, PNG, WEBP (max 5MB).
    - Overwrites any previous image.
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )

    file_bytes = file.file.read()
    return service.set_image(
        session=session,
        pet_id=pet_id,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )
