# tableflow/modules/orders/tests/test_cart_service.py

"""
Tests for per-table carts.
"""

import pytest

from tableflow.core.exceptions import InvalidArgumentError, NotFoundError
from tableflow.modules.menu.models.menu_models import Destination
from tableflow.modules.orders.services.cart_service import (
    Cart,
    CartRegistry,
    compute_order_total,
)
from tests.factories import MenuItemSnapshotFactory


@pytest.fixture
def burger():
    return MenuItemSnapshotFactory(id="burger", name="Burger", price=12.5)


@pytest.fixture
def cola():
    return MenuItemSnapshotFactory(id="cola", name="Cola", price=3.0, drink=True)


class TestCart:
    def test_same_item_folds_into_one_line(self, burger):
        cart = Cart("table-1")
        cart.add(burger)
        cart.add(burger, quantity=2)

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 3

    def test_different_notes_or_seat_make_new_lines(self, burger):
        cart = Cart("table-1")
        cart.add(burger)
        cart.add(burger, notes="well done")
        cart.add(burger, seat_number=2)

        assert len(cart.lines) == 3

    def test_blank_notes_count_as_no_notes(self, burger):
        cart = Cart("table-1")
        cart.add(burger, notes="   ")
        cart.add(burger)

        assert len(cart.lines) == 1
        assert cart.lines[0].notes is None

    def test_rejects_zero_quantity(self, burger):
        with pytest.raises(InvalidArgumentError):
            Cart("table-1").add(burger, quantity=0)

    def test_update_quantity_below_one_removes(self, burger, cola):
        cart = Cart("table-1")
        line = cart.add(burger)
        cart.add(cola)

        cart.update_quantity(line.id, 0)

        assert [l.menu_item.id for l in cart.lines] == ["cola"]

    def test_remove_unknown_line(self):
        with pytest.raises(NotFoundError):
            Cart("table-1").remove("nope")

    def test_total_and_destination_counts(self, burger, cola):
        cart = Cart("table-1")
        cart.add(burger, quantity=2)
        cart.add(cola)

        assert cart.total == 28.0
        assert cart.destination_counts() == {Destination.BAR: 1, Destination.KITCHEN: 1}

    def test_items_without_price_are_free(self):
        water = MenuItemSnapshotFactory(id="water", price=None, drink=True)
        cart = Cart("table-1")
        cart.add(water, quantity=3)

        assert compute_order_total(cart.lines) == 0.0
        assert cart.lines[0].line_total == 0.0


class TestCartRegistry:
    def test_carts_are_kept_per_table(self, burger):
        registry = CartRegistry()
        registry.cart_for("table-1").add(burger)

        assert registry.cart_for("table-2").is_empty
        assert not registry.cart_for("table-1").is_empty

        registry.discard("table-1")
        assert registry.cart_for("table-1").is_empty
