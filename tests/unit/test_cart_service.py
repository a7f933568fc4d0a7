"""
Unit tests for CartService (the cart engine)
"""
import threading
import uuid

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine

from app.core.errors import (
    InvalidArgumentError,
    NotFoundError,
    StorageError,
    UnavailableError,
)
from app.models.cart import CartItem
from app.models.pet import Pet
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.pet_repo import PetRepository
from app.schemas.cart import CartRead
from app.services.cart_service import CartService


@pytest.fixture
def service() -> CartService:
    return CartService(CartRepository(), PetRepository())


def assert_consistent(cart: CartRead):
    """Total matches the items and no pet appears twice."""
    assert cart.total_amount == sum(it.quantity * it.price for it in cart.items)
    pet_ids = [it.pet.id for it in cart.items]
    assert len(pet_ids) == len(set(pet_ids))


class TestGetOrCreate:

    def test_fresh_owner_gets_empty_cart(self, session, service, customer):
        """No cart record -> empty cart, and the record now exists"""
        assert CartRepository().get_by_owner(session, customer.id) is None

        cart = service.get_or_create(session, customer.id)

        assert cart.owner_id == customer.id
        assert cart.total_amount == 0
        assert CartRepository().get_by_owner(session, customer.id) is not None

    def test_is_idempotent(self, session, service, customer):
        first = service.get_or_create(session, customer.id)
        second = service.get_or_create(session, customer.id)

        assert first.id == second.id

    def test_get_cart_presents_empty_items(self, session, service, customer):
        cart = service.get_cart(session, customer.id)

        assert cart.items == []
        assert cart.total_quantity == 0
        assert cart.total_amount == 0


class TestAddItem:

    def test_add_new_pet(self, session, service, customer, make_pet):
        """Empty cart, add p1 (price 10) x3 -> one item, total 30"""
        p1 = make_pet(price=10.0)

        cart = service.add_item(session, customer.id, p1.id, 3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert cart.items[0].price == 10.0
        assert cart.items[0].line_total == 30.0
        assert cart.total_amount == 30.0
        assert_consistent(cart)

    def test_re_add_replaces_quantity(self, session, service, customer, make_pet):
        """Pet p1 x3 then add p1 x5 -> quantity 5 (not 8), total 50"""
        p1 = make_pet(price=10.0)
        first = service.add_item(session, customer.id, p1.id, 3)

        cart = service.add_item(session, customer.id, p1.id, 5)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart.items[0].id == first.items[0].id
        assert cart.total_amount == 50.0

    def test_creates_cart_lazily(self, session, service, customer, make_pet):
        p1 = make_pet()

        service.add_item(session, customer.id, p1.id, 1)

        assert CartRepository().get_by_owner(session, customer.id) is not None

    def test_multiple_pets_keep_insertion_order(self, session, service, customer, make_pet):
        rex = make_pet(name="Rex", price=10.0)
        tom = make_pet(name="Tom", price=25.5, species="cat", breed="siamese")
        kiwi = make_pet(name="Kiwi", price=4.0, species="bird", breed="parrot")

        service.add_item(session, customer.id, rex.id, 1)
        service.add_item(session, customer.id, tom.id, 2)
        cart = service.add_item(session, customer.id, kiwi.id, 3)

        assert [it.pet.name for it in cart.items] == ["Rex", "Tom", "Kiwi"]
        assert cart.total_quantity == 6
        assert cart.total_amount == 10.0 + 51.0 + 12.0
        assert_consistent(cart)

    def test_unknown_pet_is_not_found(self, session, service, customer):
        with pytest.raises(NotFoundError):
            service.add_item(session, customer.id, uuid.uuid4(), 1)

    def test_sold_pet_is_unavailable_and_cart_unchanged(
        self, session, service, customer, make_pet
    ):
        """Sold pet -> Unavailable; cart unchanged"""
        rex = make_pet(price=10.0)
        service.add_item(session, customer.id, rex.id, 2)
        sold = make_pet(name="Ghost", status="sold")

        with pytest.raises(UnavailableError):
            service.add_item(session, customer.id, sold.id, 1)

        cart = service.get_cart(session, customer.id)
        assert len(cart.items) == 1
        assert cart.total_amount == 20.0

    @pytest.mark.parametrize("quantity", [0, -2, True, 1.5, "3"])
    def test_rejects_bad_quantity(self, session, service, customer, make_pet, quantity):
        rex = make_pet()

        with pytest.raises(InvalidArgumentError):
            service.add_item(session, customer.id, rex.id, quantity)

        assert CartRepository().get_by_owner(session, customer.id) is None

    def test_price_is_frozen_at_add_time(self, session, service, customer, make_pet):
        rex = make_pet(price=10.0)
        service.add_item(session, customer.id, rex.id, 2)

        rex.price = 99.0
        PetRepository().update(session, rex)
        cart = service.get_cart(session, customer.id)

        assert cart.items[0].price == 10.0
        assert cart.items[0].pet.price == 99.0
        assert cart.total_amount == 20.0

    def test_re_add_keeps_original_price(self, session, service, customer, make_pet):
        rex = make_pet(price=10.0)
        service.add_item(session, customer.id, rex.id, 1)
        rex.price = 15.0
        PetRepository().update(session, rex)

        cart = service.add_item(session, customer.id, rex.id, 4)

        assert cart.items[0].price == 10.0
        assert cart.total_amount == 40.0

    def test_does_not_touch_pet_state(self, session, service, customer, make_pet):
        rex = make_pet(price=10.0)

        service.add_item(session, customer.id, rex.id, 1)

        session.refresh(rex)
        assert rex.status == "available"
        assert rex.price == 10.0


class TestUpdateItemQuantity:

    def test_update_quantity(self, session, service, customer, make_pet):
        """Pet p1 x5, set quantity 1 -> total 10"""
        p1 = make_pet(price=10.0)
        service.add_item(session, customer.id, p1.id, 3)
        cart = service.add_item(session, customer.id, p1.id, 5)

        cart = service.update_item_quantity(session, customer.id, cart.items[0].id, 1)

        assert cart.items[0].quantity == 1
        assert cart.total_amount == 10.0

    @pytest.mark.parametrize("quantity", [0, -1, False])
    def test_rejects_quantity_below_one(self, session, service, customer, make_pet, quantity):
        p1 = make_pet(price=10.0)
        cart = service.add_item(session, customer.id, p1.id, 2)

        with pytest.raises(InvalidArgumentError):
            service.update_item_quantity(session, customer.id, cart.items[0].id, quantity)

        cart = service.get_cart(session, customer.id)
        assert cart.items[0].quantity == 2
        assert cart.total_amount == 20.0

    def test_unknown_item_is_not_found(self, session, service, customer, make_pet):
        service.add_item(session, customer.id, make_pet().id, 1)

        with pytest.raises(NotFoundError):
            service.update_item_quantity(session, customer.id, uuid.uuid4(), 2)

    def test_missing_cart_is_not_found(self, session, service, customer):
        with pytest.raises(NotFoundError):
            service.update_item_quantity(session, customer.id, uuid.uuid4(), 2)

    def test_other_owner_cannot_touch_item(self, session, service, customer, admin, make_pet):
        cart = service.add_item(session, customer.id, make_pet().id, 1)
        service.get_or_create(session, admin.id)

        with pytest.raises(NotFoundError):
            service.update_item_quantity(session, admin.id, cart.items[0].id, 7)


class TestRemoveItem:

    def test_add_then_remove_restores_empty_cart(self, session, service, customer, make_pet):
        """Round trip: add x2 then remove -> empty items, total 0"""
        p = make_pet(price=12.5)
        cart = service.add_item(session, customer.id, p.id, 2)

        cart = service.remove_item(session, customer.id, cart.items[0].id)

        assert cart.items == []
        assert cart.total_amount == 0

    def test_unknown_item_is_a_no_op(self, session, service, customer, make_pet):
        """Removing an unknown id leaves the cart unchanged"""
        before = service.add_item(session, customer.id, make_pet(price=10.0).id, 3)

        after = service.remove_item(session, customer.id, uuid.uuid4())

        assert [(it.id, it.quantity) for it in after.items] == [
            (it.id, it.quantity) for it in before.items
        ]
        assert after.total_amount == before.total_amount

    def test_remove_one_keeps_others(self, session, service, customer, make_pet):
        rex = make_pet(name="Rex", price=10.0)
        tom = make_pet(name="Tom", price=20.0)
        service.add_item(session, customer.id, rex.id, 1)
        cart = service.add_item(session, customer.id, tom.id, 2)

        cart = service.remove_item(session, customer.id, cart.items[0].id)

        assert [it.pet.name for it in cart.items] == ["Tom"]
        assert cart.total_amount == 40.0

    def test_missing_cart_is_not_found(self, session, service, customer):
        with pytest.raises(NotFoundError):
            service.remove_item(session, customer.id, uuid.uuid4())


class TestClear:

    def test_clear_twice_is_idempotent(self, session, service, customer, make_pet):
        service.add_item(session, customer.id, make_pet().id, 2)

        service.clear(session, customer.id)
        first = service.get_cart(session, customer.id)
        service.clear(session, customer.id)
        second = service.get_cart(session, customer.id)

        assert first.items == second.items == []
        assert first.total_amount == second.total_amount == 0
        assert first.id == second.id

    def test_missing_cart_is_not_found(self, session, service, customer):
        with pytest.raises(NotFoundError):
            service.clear(session, customer.id)


class TestOrphanedItems:

    def test_deleted_pet_degrades_to_snapshot(self, session, service, customer, make_pet):
        rex = make_pet(name="Rex", price=10.0, image_url="https://img.petmart.io/rex.jpg")
        rex_id = rex.id
        service.add_item(session, customer.id, rex_id, 2)

        PetRepository().delete(session, rex)
        cart = service.get_cart(session, customer.id)

        item = cart.items[0]
        assert item.pet.id == rex_id
        assert item.pet.status == "unavailable"
        assert item.pet.name == "Rex"
        assert item.pet.image_url == "https://img.petmart.io/rex.jpg"
        assert item.pet.price is None
        assert cart.total_amount == 20.0

    def test_sold_pet_stays_in_cart(self, session, service, customer, make_pet):
        rex = make_pet(price=10.0)
        service.add_item(session, customer.id, rex.id, 1)

        rex.status = "sold"
        PetRepository().update(session, rex)
        cart = service.get_cart(session, customer.id)

        assert cart.items[0].pet.status == "sold"
        assert cart.total_amount == 10.0

    def test_orphaned_item_can_still_be_updated(self, session, service, customer, make_pet):
        rex = make_pet(price=10.0)
        cart = service.add_item(session, customer.id, rex.id, 1)
        PetRepository().delete(session, rex)

        cart = service.update_item_quantity(session, customer.id, cart.items[0].id, 3)

        assert cart.total_amount == 30.0


class TestTotals:

    def test_compute_total(self):
        items = [
            CartItem(cart_id=uuid.uuid4(), pet_id=uuid.uuid4(), quantity=2, price=7.5),
            CartItem(cart_id=uuid.uuid4(), pet_id=uuid.uuid4(), quantity=1, price=3.0),
        ]

        assert CartService.compute_total(items) == 18.0
        assert CartService.compute_total([]) == 0.0

    def test_invariant_holds_across_a_session(self, session, service, customer, make_pet):
        rex = make_pet(price=10.0)
        tom = make_pet(name="Tom", price=3.25)

        states = [
            service.add_item(session, customer.id, rex.id, 2),
            service.add_item(session, customer.id, tom.id, 4),
            service.add_item(session, customer.id, rex.id, 1),
        ]
        states.append(
            service.update_item_quantity(session, customer.id, states[-1].items[1].id, 9)
        )
        states.append(service.remove_item(session, customer.id, states[-1].items[0].id))

        for cart in states:
            assert_consistent(cart)
        assert states[-1].total_amount == 9 * 3.25


class TestStorageFailures:

    def test_commit_failure_surfaces_as_storage_error(
        self, session, service, customer, make_pet, monkeypatch
    ):
        rex = make_pet()

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "commit", broken_commit)

        with pytest.raises(StorageError):
            service.add_item(session, customer.id, rex.id, 1)


class TestConcurrency:

    def test_concurrent_adds_for_one_owner_never_duplicate(self, tmp_path):
        file_engine = create_engine(
            f"sqlite:///{tmp_path / 'carts.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        SQLModel.metadata.create_all(file_engine)

        owner_id = uuid.uuid4()
        pet_id = uuid.uuid4()
        with Session(file_engine) as s:
            s.add(User(id=owner_id, email="bob@petmart.io", username="bob"))
            s.add(
                Pet(
                    id=pet_id,
                    name="Rex",
                    species="dog",
                    breed="beagle",
                    age=3,
                    price=10.0,
                    description="good boy",
                    seller_id=owner_id,
                )
            )
            s.commit()

        service = CartService(CartRepository(), PetRepository())
        errors: list[Exception] = []

        def worker(quantity: int):
            try:
                with Session(file_engine) as s:
                    service.add_item(s, owner_id, pet_id, quantity)
            except Exception as exc:  # collected and asserted below
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(q,)) for q in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with Session(file_engine) as s:
            cart = service.get_cart(s, owner_id)

        assert len(cart.items) == 1
        assert cart.items[0].quantity in range(1, 9)
        assert cart.total_amount == cart.items[0].quantity * 10.0
        file_engine.dispose()
