"""Invoice view data: every figure is read from the stored order"""

from typing import Any, Dict, Optional

from models.country import get_country
from models.order import InvoiceType, Order

ONES = ["", "ONE", "TWO", "THREE", "FOUR", "FIVE", "SIX", "SEVEN", "EIGHT", "NINE"]
TEENS = ["TEN", "ELEVEN", "TWELVE", "THIRTEEN", "FOURTEEN", "FIFTEEN",
         "SIXTEEN", "SEVENTEEN", "EIGHTEEN", "NINETEEN"]
TENS = ["", "", "TWENTY", "THIRTY", "FORTY", "FIFTY", "SIXTY", "SEVENTY", "EIGHTY", "NINETY"]
SCALES = ["", "THOUSAND", "MILLION", "BILLION"]


def _hundreds_to_words(num: int) -> str:
    words = []
    if num >= 100:
        words += [ONES[num // 100], "HUNDRED"]
        num %= 100
    if 10 <= num <= 19:
        words.append(TEENS[num - 10])
    else:
        if num >= 20:
            words.append(TENS[num // 10])
            num %= 10
        if num > 0:
            words.append(ONES[num])
    return " ".join(words)


def number_to_words(num: int) -> str:
    if num == 0:
        return "ZERO"
    parts = []
    scale = 0
    while num > 0:
        chunk = num % 1000
        if chunk:
            words = _hundreds_to_words(chunk)
            if SCALES[scale]:
                words += " " + SCALES[scale]
            parts.insert(0, words)
        scale += 1
        num //= 1000
    return " ".join(parts)


def amount_to_words(amount: float) -> str:
    """e.g. 36.5 -> 'THIRTY SIX AND 50/100 ONLY'"""
    if amount is None or amount < 0:
        return ""
    cents = int(round(amount * 100))
    integer_part, fractional_part = divmod(cents, 100)
    words = number_to_words(integer_part)
    if fractional_part > 0:
        words += f" AND {fractional_part}/100"
    return words + " ONLY"


def build_invoice(
    order: Order,
    vendor_doc: Dict[str, Any],
    client_doc: Optional[Dict[str, Any]] = None,
    default_country: str = "AE",
) -> Dict[str, Any]:
    country = get_country(vendor_doc.get("country"), default_country)
    invoice_settings = vendor_doc.get("invoice_settings") or {}
    client_doc = client_doc or {}

    title = "TAX INVOICE" if order.invoice_type == InvoiceType.VAT else "INVOICE"
    return {
        "title": title,
        "invoice_code": order.invoice_code,
        "order_id": order.order_id,
        "order_date": order.order_date,
        "delivery_date": order.delivery_date,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "vendor": {
            "name": vendor_doc.get("company_name") or vendor_doc.get("name"),
            "address": vendor_doc.get("billing_address") or vendor_doc.get("address"),
            "phone": vendor_doc.get("phone"),
            "email": vendor_doc.get("email"),
            "website": vendor_doc.get("website"),
            "tax_id": vendor_doc.get("trn"),
            "tax_id_label": country.tax_id_label,
        },
        "client": {
            "name": order.client_name,
            "address": client_doc.get("delivery_address"),
            "phone": client_doc.get("phone"),
            "email": client_doc.get("contact_email"),
            "tax_id": client_doc.get("trn"),
        },
        "line_items": [item.dict() for item in order.line_items],
        "currency": country.currency_code,
        "vat_label": country.vat_label,
        "vat_rate": country.vat_rate if order.invoice_type == InvoiceType.VAT else 0,
        "sub_total": order.sub_total,
        "vat_amount": order.vat_amount,
        "total_amount": order.total_amount,
        "amount_in_words": f"{country.currency_code} {amount_to_words(order.total_amount)}",
        "notes": invoice_settings.get("notes"),
        "layout": invoice_settings.get("layout", "standard"),
    }
