"""Order pricing arithmetic and invoice-code numbering"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from models.order import InvoiceType, LineItem

INVOICE_NUMBER_WIDTH = 4
DEFAULT_INVOICE_PREFIX = "INV-"

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def _money(value: float) -> float:
    return round(value, 2)


def apply_unit_prices(line_items: Sequence[LineItem], unit_prices: Sequence[float]) -> List[LineItem]:
    """Attach one unit price per line; names and quantities stay as captured"""
    if len(unit_prices) != len(line_items):
        raise ValueError(
            f"Expected {len(line_items)} unit prices, got {len(unit_prices)}"
        )
    priced = []
    for item, price in zip(line_items, unit_prices):
        if price is None or price < 0:
            raise ValueError(f"Invalid unit price for '{item.product_name}'")
        priced.append(item.copy(update={"unit_price": float(price)}))
    return priced


def compute_totals(
    line_items: Sequence[LineItem],
    invoice_type: InvoiceType,
    vat_rate: float,
) -> Tuple[List[LineItem], float, float, float]:
    """
    Price every line and derive order figures.

    Returns (line_items, sub_total, vat_amount, total_amount). VAT applies
    only to VAT invoices; total is always sub_total + vat_amount.
    """
    lines = []
    sub_total = 0.0
    for item in line_items:
        unit_price = item.unit_price or 0.0
        line_total = _money(item.quantity * unit_price)
        lines.append(item.copy(update={"unit_price": unit_price, "total": line_total}))
        sub_total += line_total

    sub_total = _money(sub_total)
    vat_amount = _money(sub_total * vat_rate) if invoice_type == InvoiceType.VAT else 0.0
    # exactly sub_total + vat_amount, not re-rounded
    total_amount = sub_total + vat_amount
    return lines, sub_total, vat_amount, total_amount


def parse_invoice_number(code: Optional[str]) -> int:
    """Trailing numeric suffix of an invoice code, 0 when there is none"""
    if not code:
        return 0
    match = _TRAILING_DIGITS.search(code.strip())
    return int(match.group(1)) if match else 0


def max_invoice_number(codes: Iterable[Optional[str]]) -> int:
    return max((parse_invoice_number(c) for c in codes), default=0)


def format_invoice_code(number: int, prefix: Optional[str] = None) -> str:
    return f"{prefix or DEFAULT_INVOICE_PREFIX}{str(number).zfill(INVOICE_NUMBER_WIDTH)}"
