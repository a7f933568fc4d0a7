# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_user
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.pet_repo import PetRepository
from app.schemas.cart import CartRead, CartItemCreate, CartItemUpdate, MessageRead
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
pet_repo = PetRepository()
service = CartService(cart_repo, pet_repo)


@router.get("", response_model=CartRead)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Get current user's cart, creating an empty one on first access.

    Auth:
      - Only role='user' (customer) can access.
      - Admins are forbidden.
    """
    return service.get_cart(session, current_user.id)


@router.post("", response_model=CartRead)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Add a pet to the current user's cart.

    If the pet is already in the cart its quantity is replaced
    with the given one. Returns the updated cart.
    """
    return service.add_item(
        session, current_user.id, payload.pet_id, payload.quantity
    )


@router.put("/{item_id}", response_model=CartRead)
def update_cart_item(
    item_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Update quantity of a cart item.

    Returns the updated cart.
    """
    return service.update_item_quantity(
        session=session,
        owner_id=current_user.id,
        item_id=item_id,
        quantity=payload.quantity,
    )


@router.delete("/{item_id}", response_model=CartRead)
def remove_cart_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Remove an item from the cart. Unknown ids leave the cart unchanged.

    Returns the updated cart.
    """
    return service.remove_item(session, current_user.id, item_id)


@router.delete("", response_model=MessageRead)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Clear the entire cart.
    """
    service.clear(session, current_user.id)
    return {"message": "Cart cleared"}
