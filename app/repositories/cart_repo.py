# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.database import commit_or_raise
from app.models.cart import Cart, CartItem


class CartRepository:
    """
    Cart Store: persistence for Cart and its CartItem rows.

    - Pure DB operations (load / create / save).
    - Business rules (quantities, totals) live in CartService.
    """

    def get_by_owner(
        self,
        session: Session,
        owner_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Cart | None:
        """
        Load the owner's cart header, or None.

        for_update=True issues SELECT ... FOR UPDATE so concurrent writers
        on PostgreSQL wait for this transaction. SQLite ignores it.
        """
        stmt = select(Cart).where(Cart.owner_id == owner_id)
        if for_update:
            stmt = stmt.with_for_update()
        return session.exec(stmt).first()

    # Items in display order
    def list_items(self, session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.position, CartItem.created_at)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, owner_id: uuid.UUID) -> Cart:
        """Insert an empty cart (no items, total 0) for the owner."""
        cart = Cart(owner_id=owner_id, total_amount=0.0)
        session.add(cart)
        commit_or_raise(session)
        session.refresh(cart)
        return cart

    def save(self, session: Session, cart: Cart, items: list[CartItem]) -> Cart:
        """
        Persist the cart header and make its stored items match `items`.

        Rows of this cart that are no longer in `items` are deleted;
        everything in `items` is inserted or updated.
        """
        keep = {item.id for item in items}
        stmt = select(CartItem).where(CartItem.cart_id == cart.id)
        for row in session.exec(stmt).all():
            if row.id not in keep:
                session.delete(row)

        for position, item in enumerate(items):
            item.cart_id = cart.id
            item.position = position
            session.add(item)

        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)
        commit_or_raise(session)
        session.refresh(cart)
        return cart

    def delete_for_owner(self, session: Session, owner_id: uuid.UUID) -> None:
        """Drop the owner's cart and items (used when the account is deleted)."""
        cart = self.get_by_owner(session, owner_id)
        if cart is None:
            return
        for row in self.list_items(session, cart.id):
            session.delete(row)
        session.flush()
        session.delete(cart)
        commit_or_raise(session)
