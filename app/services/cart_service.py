# app/services/cart_service.py
import logging
import uuid
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.errors import (
    InvalidArgumentError,
    NotFoundError,
    StorageError,
    UnavailableError,
)
from app.core.locks import OwnerLocks
from app.models.cart import Cart, CartItem
from app.repositories.cart_repo import CartRepository
from app.repositories.pet_repo import PetRepository
from app.schemas.cart import CartItemRead, CartPetRead, CartRead

logger = logging.getLogger(__name__)


class CartService:
    """
    Cart engine: the only place that mutates carts.

    Rules:
      - one cart per owner, created lazily (empty, total 0)
      - at most one item per pet; re-adding a pet REPLACES its quantity
      - unit price is frozen when the item is first added
      - quantity >= 1 on every write path
      - total_amount = sum(quantity * price) over the current items,
        recomputed on every mutation, never from catalog prices
      - each mutation holds the owner's lock and a row lock on the cart

    Domain failures raise NotFoundError / UnavailableError /
    InvalidArgumentError; storage failures surface as StorageError.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        pet_repo: PetRepository,
        locks: OwnerLocks | None = None,
    ):
        self.cart_repo = cart_repo
        self.pet_repo = pet_repo
        self.locks = locks or OwnerLocks()

    # ---- internal helpers ----

    @staticmethod
    def compute_total(items: Iterable[CartItem]) -> float:
        return float(sum(item.quantity * item.price for item in items))

    @staticmethod
    def _validate_quantity(quantity) -> None:
        # bool is an int subclass; True must not mean "1"
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidArgumentError("Quantity must be a positive integer")

    def _load_cart(
        self,
        session: Session,
        owner_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Cart:
        cart = self.cart_repo.get_by_owner(session, owner_id, for_update=for_update)
        if cart is None:
            raise NotFoundError("Cart not found")
        return cart

    def _get_or_create(
        self,
        session: Session,
        owner_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Cart:
        cart = self.cart_repo.get_by_owner(session, owner_id, for_update=for_update)
        if cart is not None:
            return cart

        try:
            cart = self.cart_repo.create(session, owner_id)
        except StorageError as exc:
            # Another process created it first (unique owner_id).
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            cart = self.cart_repo.get_by_owner(session, owner_id, for_update=for_update)
            if cart is None:
                raise
            return cart

        logger.info("Created cart %s for owner %s", cart.id, owner_id)
        return cart

    def _persist(self, session: Session, cart: Cart, items: list[CartItem]) -> Cart:
        cart.total_amount = self.compute_total(items)
        return self.cart_repo.save(session, cart, items)

    def _present(self, session: Session, cart: Cart) -> CartRead:
        """
        Resolve every item's pet to a display projection.

        Pets deleted from the catalog fall back to the snapshot taken at
        add time with status 'unavailable' instead of failing the read.
        """
        items = self.cart_repo.list_items(session, cart.id)
        pets = self.pet_repo.get_many(session, [it.pet_id for it in items])

        item_reads: list[CartItemRead] = []
        total_qty = 0

        for it in items:
            pet = pets.get(it.pet_id)
            if pet is not None:
                pet_read = CartPetRead(
                    id=pet.id,
                    name=pet.name,
                    price=pet.price,
                    image_url=pet.image_url,
                    status=pet.status,
                )
            else:
                pet_read = CartPetRead(
                    id=it.pet_id,
                    name=it.pet_name,
                    image_url=it.pet_image_url,
                    status="unavailable",
                )

            total_qty += it.quantity
            item_reads.append(
                CartItemRead(
                    id=it.id,
                    pet=pet_read,
                    quantity=it.quantity,
                    price=it.price,
                    line_total=it.quantity * it.price,
                    created_at=it.created_at,
                )
            )

        return CartRead(
            id=cart.id,
            owner_id=cart.owner_id,
            items=item_reads,
            total_quantity=total_qty,
            total_amount=cart.total_amount,
            updated_at=cart.updated_at,
        )

    # ---- public operations ----

    def get_or_create(self, session: Session, owner_id: uuid.UUID) -> Cart:
        """Return the owner's cart, creating an empty one if absent."""
        with self.locks.hold(owner_id):
            return self._get_or_create(session, owner_id)

    def get_cart(self, session: Session, owner_id: uuid.UUID) -> CartRead:
        cart = self.get_or_create(session, owner_id)
        return self._present(session, cart)

    def add_item(
        self,
        session: Session,
        owner_id: uuid.UUID,
        pet_id: uuid.UUID,
        quantity: int,
    ) -> CartRead:
        """
        Put a pet in the owner's cart.

        - pet must exist and be available
        - new pet => new item with the current catalog price frozen
        - pet already in cart => its quantity is replaced (not added to)
        """
        self._validate_quantity(quantity)

        pet = self.pet_repo.get_by_id(session, pet_id)
        if pet is None:
            raise NotFoundError("Pet not found")
        if not pet.is_available:
            raise UnavailableError("Pet is not available for purchase")

        with self.locks.hold(owner_id):
            cart = self._get_or_create(session, owner_id, for_update=True)
            items = self.cart_repo.list_items(session, cart.id)

            existing = next((it for it in items if it.pet_id == pet.id), None)
            if existing is not None:
                logger.debug(
                    "Cart %s: pet %s quantity %s -> %s",
                    cart.id, pet.id, existing.quantity, quantity,
                )
                existing.quantity = quantity
            else:
                items.append(
                    CartItem(
                        cart_id=cart.id,
                        pet_id=pet.id,
                        quantity=quantity,
                        price=pet.price,
                        pet_name=pet.name,
                        pet_image_url=pet.image_url,
                    )
                )

            cart = self._persist(session, cart, items)
            logger.info("Cart %s: added pet %s x%s", cart.id, pet_id, quantity)
            return self._present(session, cart)

    def update_item_quantity(
        self,
        session: Session,
        owner_id: uuid.UUID,
        item_id: uuid.UUID,
        quantity: int,
    ) -> CartRead:
        """Set the quantity of an existing item."""
        self._validate_quantity(quantity)

        with self.locks.hold(owner_id):
            cart = self._load_cart(session, owner_id, for_update=True)
            items = self.cart_repo.list_items(session, cart.id)

            item = next((it for it in items if it.id == item_id), None)
            if item is None:
                raise NotFoundError("Item not found in cart")

            item.quantity = quantity
            cart = self._persist(session, cart, items)
            logger.info("Cart %s: item %s quantity set to %s", cart.id, item_id, quantity)
            return self._present(session, cart)

    def remove_item(
        self,
        session: Session,
        owner_id: uuid.UUID,
        item_id: uuid.UUID,
    ) -> CartRead:
        """
        Drop an item from the cart.
        Unknown item ids leave the cart unchanged.
        """
        with self.locks.hold(owner_id):
            cart = self._load_cart(session, owner_id, for_update=True)
            items = self.cart_repo.list_items(session, cart.id)

            remaining = [it for it in items if it.id != item_id]
            if len(remaining) == len(items):
                logger.debug("Cart %s: item %s not present, nothing removed", cart.id, item_id)

            cart = self._persist(session, cart, remaining)
            return self._present(session, cart)

    def clear(self, session: Session, owner_id: uuid.UUID) -> None:
        """Empty the cart; the cart row itself is kept."""
        with self.locks.hold(owner_id):
            cart = self._load_cart(session, owner_id, for_update=True)
            self._persist(session, cart, [])
            logger.info("Cart %s cleared", cart.id)
