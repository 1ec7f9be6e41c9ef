"""CSV report builders"""

import csv
import io
import re
from collections import defaultdict
from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from urllib.parse import quote

from models.order import Order, PaymentStatus
from models.purchase_bill import PurchaseBill

SALES_HEADERS = ["Order ID", "Client Name", "Order Date", "Status", "Payment Status", "Subtotal", "VAT", "Total"]
PURCHASE_HEADERS = ["Vendor Name", "Bill Date", "Subtotal", "VAT", "Total"]
CLIENT_HEADERS = ["Order ID", "Order Date", "Status", "Total Amount"]
CLIENT_PNL_HEADERS = ["Client Name", "Orders", "Revenue", "VAT", "Paid", "Outstanding"]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _order_ref(order: Order) -> str:
    return order.invoice_code or order.order_id[:6]


def to_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    """Header row plus one line per row; commas and quotes are quoted"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def report_filename(kind: str, today: Optional[datetime] = None, subject: Optional[str] = None) -> str:
    """e.g. sales_report_2024-07-09.csv, client_report_Corner_Cafe_2024-07-09.csv"""
    today = today or datetime.utcnow()
    parts = [kind.strip(), "report"]
    if subject:
        parts.append(subject.strip())
    stem = "_".join(parts).replace(" ", "_")
    return f"{stem}_{today.strftime('%Y-%m-%d')}.csv"


def content_disposition(filename: str) -> str:
    """
    Attachment header safe for any filename.

    Headers are latin-1 on the wire, so `filename` carries an ASCII-only
    fallback and `filename*` the UTF-8 name (RFC 5987).
    """
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def sales_report(orders: List[Order]) -> str:
    rows = [
        [
            _order_ref(o),
            o.client_name,
            _date(o.order_date),
            o.status.value,
            o.payment_status.value,
            f"{o.sub_total:.2f}",
            f"{o.vat_amount:.2f}",
            f"{o.total_amount:.2f}",
        ]
        for o in orders
    ]
    return to_csv(SALES_HEADERS, rows)


def purchases_report(bills: List[PurchaseBill]) -> str:
    rows = [
        [
            b.vendor_name,
            _date(b.bill_date),
            f"{b.sub_total:.2f}",
            f"{b.vat_amount:.2f}",
            f"{b.total_amount:.2f}",
        ]
        for b in bills
    ]
    return to_csv(PURCHASE_HEADERS, rows)


def client_report(orders: List[Order], client_id: str) -> str:
    rows = [
        [_order_ref(o), _date(o.order_date), o.status.value, f"{o.total_amount:.2f}"]
        for o in orders
        if o.client_id == client_id
    ]
    return to_csv(CLIENT_HEADERS, rows)


def client_pnl_report(orders: List[Order]) -> str:
    """Revenue per client, split into paid and outstanding"""
    totals = defaultdict(lambda: {"name": "", "orders": 0, "revenue": 0.0, "vat": 0.0, "paid": 0.0})
    for o in orders:
        entry = totals[o.client_id]
        entry["name"] = o.client_name
        entry["orders"] += 1
        entry["revenue"] += o.total_amount
        entry["vat"] += o.vat_amount
        if o.payment_status == PaymentStatus.PAID:
            entry["paid"] += o.total_amount

    rows = [
        [
            e["name"],
            e["orders"],
            f"{e['revenue']:.2f}",
            f"{e['vat']:.2f}",
            f"{e['paid']:.2f}",
            f"{e['revenue'] - e['paid']:.2f}",
        ]
        for e in sorted(totals.values(), key=lambda e: e["revenue"], reverse=True)
    ]
    return to_csv(CLIENT_PNL_HEADERS, rows)
