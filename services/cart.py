"""
Order capture: a client's pending cart against one vendor's catalog.

Catalog lines hold a signed running quantity that never goes below zero;
a line that reaches zero is dropped. Special items are free text with a
fixed quantity of one and no price.
"""

from typing import Dict, List, Optional
import logging

from models.order import LineItem

logger = logging.getLogger(__name__)

SPECIAL_ITEM_UNIT = "Unit"


class CartError(ValueError):
    """Checkout refused before any write"""


class Cart:
    def __init__(self, vendor_id: Optional[str] = None):
        self.vendor_id = vendor_id
        self._lines: Dict[str, LineItem] = {}
        self._special: List[LineItem] = []

    def add(self, product: dict, quantity: float) -> float:
        """
        Apply a quantity delta (positive or negative) to a catalog product.

        Returns the resulting quantity for the product.
        """
        product_id = product["product_id"]
        current = self._lines.get(product_id)
        new_quantity = max((current.quantity if current else 0) + quantity, 0)

        if new_quantity == 0:
            self._lines.pop(product_id, None)
            return 0

        if current:
            current.quantity = new_quantity
        else:
            self._lines[product_id] = LineItem(
                product_id=product_id,
                product_name=product["name"],
                unit=product.get("unit") or "PCS",
                quantity=new_quantity,
            )
        return new_quantity

    def add_special_item(self, name: str) -> None:
        name = (name or "").strip()
        if not name:
            raise CartError("Special item name cannot be empty")
        self._special.append(
            LineItem(product_id=None, product_name=name, unit=SPECIAL_ITEM_UNIT, quantity=1)
        )

    @property
    def is_empty(self) -> bool:
        return not self._lines and not self._special

    def to_line_items(self) -> List[LineItem]:
        """Snapshot lines, unpriced, catalog items first"""
        return [line.copy() for line in self._lines.values()] + [line.copy() for line in self._special]

    def validate_for_checkout(self) -> None:
        if not self.vendor_id:
            raise CartError("Please select a vendor before placing an order")
        if self.is_empty:
            raise CartError("Your cart is empty")
