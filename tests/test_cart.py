"""
Test order capture: cart quantities, special items and checkout refusal.
"""

import pytest

from services.cart import Cart, CartError

WIDGET = {"product_id": "p-widget", "name": "Widget", "unit": "PCS", "price": 10}
GADGET = {"product_id": "p-gadget", "name": "Gadget", "unit": "Box", "price": 4}


def _quantity(cart, product_id):
    return sum(line.quantity for line in cart.to_line_items() if line.product_id == product_id)


class TestCartQuantities:
    """Increment/decrement behaviour of catalog lines"""

    def test_increment_accumulates(self):
        cart = Cart("vendor-1")
        cart.add(WIDGET, 1)
        cart.add(WIDGET, 2)

        assert _quantity(cart, "p-widget") == 3
        lines = cart.to_line_items()
        assert len(lines) == 1
        assert lines[0].product_name == "Widget"
        assert lines[0].unit == "PCS"

    def test_decrement_to_zero_removes_line(self):
        cart = Cart("vendor-1")
        cart.add(WIDGET, 2)
        cart.add(WIDGET, -1)
        assert _quantity(cart, "p-widget") == 1

        cart.add(WIDGET, -1)

        assert _quantity(cart, "p-widget") == 0
        assert cart.to_line_items() == []
        assert cart.is_empty

    def test_decrement_below_zero_is_clamped(self):
        cart = Cart("vendor-1")
        cart.add(WIDGET, 1)

        result = cart.add(WIDGET, -5)

        assert result == 0
        assert _quantity(cart, "p-widget") == 0
        assert all(line.quantity > 0 for line in cart.to_line_items())

    def test_decrement_unknown_product_never_creates_line(self):
        cart = Cart("vendor-1")
        cart.add(GADGET, -1)
        assert cart.is_empty

    def test_lines_are_unpriced_snapshots(self):
        cart = Cart("vendor-1")
        cart.add(WIDGET, 3)
        line = cart.to_line_items()[0]

        assert line.unit_price is None
        assert line.total is None

        # Mutating the returned snapshot does not touch the cart
        line.quantity = 99
        assert _quantity(cart, "p-widget") == 3


class TestSpecialItems:
    def test_special_item_has_fixed_quantity_and_no_price(self):
        cart = Cart("vendor-1")
        cart.add_special_item("  Fresh basil  ")

        line = cart.to_line_items()[0]
        assert line.product_id is None
        assert line.product_name == "Fresh basil"
        assert line.quantity == 1
        assert line.unit_price is None

    def test_blank_special_item_is_rejected(self):
        cart = Cart("vendor-1")
        with pytest.raises(CartError):
            cart.add_special_item("   ")

    def test_catalog_lines_come_before_special_items(self):
        cart = Cart("vendor-1")
        cart.add_special_item("Mint")
        cart.add(WIDGET, 1)

        names = [line.product_name for line in cart.to_line_items()]
        assert names == ["Widget", "Mint"]


class TestCheckoutValidation:
    def test_empty_cart_is_refused(self):
        with pytest.raises(CartError, match="empty"):
            Cart("vendor-1").validate_for_checkout()

    def test_missing_vendor_is_refused(self):
        cart = Cart(None)
        cart.add(WIDGET, 1)
        with pytest.raises(CartError, match="vendor"):
            cart.validate_for_checkout()

    def test_special_item_alone_is_enough(self):
        cart = Cart("vendor-1")
        cart.add_special_item("Ice")
        cart.validate_for_checkout()
