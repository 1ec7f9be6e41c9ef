"""
Test CSV report generation
"""

import csv
import io
from datetime import datetime

from models.order import InvoiceType, Order, OrderStatus, PaymentStatus
from models.purchase_bill import BillLineItem, PurchaseBill
from services.report_service import (
    PURCHASE_HEADERS,
    SALES_HEADERS,
    client_pnl_report,
    client_report,
    content_disposition,
    purchases_report,
    report_filename,
    sales_report,
    to_csv,
)


def _order(order_id, client_id, client_name, total, vat=0.0, code=None, payment=PaymentStatus.UNPAID):
    return Order(
        order_id=order_id,
        invoice_code=code,
        vendor_id="vendor-1",
        client_id=client_id,
        client_name=client_name,
        sub_total=total - vat,
        vat_amount=vat,
        total_amount=total,
        status=OrderStatus.PRICED,
        payment_status=payment,
        invoice_type=InvoiceType.VAT if vat else InvoiceType.NORMAL,
        created_at=datetime(2024, 3, 1),
        order_date=datetime(2024, 3, 1, 15, 30),
    )


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


class TestCsvWriter:
    def test_commas_and_quotes_are_quoted(self):
        text = to_csv(["Name", "Note"], [['Smith, Jones & Co', 'said "hi"']])

        assert text == 'Name,Note\n"Smith, Jones & Co","said ""hi"""\n'
        assert _rows(text)[1] == ['Smith, Jones & Co', 'said "hi"']

    def test_filename(self):
        assert report_filename("sales", datetime(2024, 7, 9)) == "sales_report_2024-07-09.csv"
        assert report_filename("client pnl", datetime(2024, 7, 9)) == "client_pnl_report_2024-07-09.csv"

    def test_client_filename_carries_name(self):
        name = report_filename("client", datetime(2024, 7, 9), subject="Corner Cafe")
        assert name == "client_report_Corner_Cafe_2024-07-09.csv"


class TestContentDisposition:
    def test_ascii_name(self):
        header = content_disposition("sales_report_2024-07-09.csv")
        assert header == (
            "attachment; filename=\"sales_report_2024-07-09.csv\"; "
            "filename*=UTF-8''sales_report_2024-07-09.csv"
        )

    def test_arabic_name_is_latin1_safe(self):
        filename = report_filename("client", datetime(2024, 7, 9), subject="مطعم الريف")
        header = content_disposition(filename)

        header.encode("latin-1")
        assert 'filename="client_report_' in header
        assert "filename*=UTF-8''client_report_%D9%85%D8%B7" in header

    def test_quote_in_name_cannot_break_header(self):
        header = content_disposition('client_report_Bob"s Diner_2024-07-09.csv')

        fallback = header.split("; ")[1]
        assert fallback == 'filename="client_report_Bob_s_Diner_2024-07-09.csv"'
        assert "%22" in header


class TestSalesReport:
    def test_one_row_per_order(self):
        orders = [
            _order("a1b2c3d4e5", "c1", "Corner Cafe, Marina", 105, vat=5, code="INV-0001"),
            _order("f6e5d4c3b2", "c2", "Diner", 36),
        ]
        rows = _rows(sales_report(orders))

        assert rows[0] == SALES_HEADERS
        assert rows[1] == ["INV-0001", "Corner Cafe, Marina", "2024-03-01", "Priced", "Unpaid", "100.00", "5.00", "105.00"]
        # Unnumbered orders fall back to a short id
        assert rows[2][0] == "f6e5d4"

    def test_empty_report_has_header(self):
        assert _rows(sales_report([])) == [SALES_HEADERS]


class TestPurchasesReport:
    def test_bill_rows(self):
        bill = PurchaseBill(
            bill_id="b1",
            vendor_id="vendor-1",
            vendor_name="Al Noor",
            bill_date=datetime(2024, 2, 10),
            line_items=[BillLineItem(item_name="Tomato", quantity=2, cost_per_unit=5)],
            vat_amount=0.5,
            sub_total=10,
            total_amount=10.5,
            created_at=datetime(2024, 2, 10),
            updated_at=datetime(2024, 2, 10),
        )
        rows = _rows(purchases_report([bill]))
        assert rows[0] == PURCHASE_HEADERS
        assert rows[1] == ["Al Noor", "2024-02-10", "10.00", "0.50", "10.50"]


class TestClientReports:
    def test_client_statement_filters_client(self):
        orders = [
            _order("o1", "c1", "Cafe", 10, code="INV-0001"),
            _order("o2", "c2", "Diner", 20, code="INV-0002"),
        ]
        rows = _rows(client_report(orders, "c1"))
        assert len(rows) == 2
        assert rows[1] == ["INV-0001", "2024-03-01", "Priced", "10.00"]

    def test_pnl_splits_paid_and_outstanding(self):
        orders = [
            _order("o1", "c1", "Cafe", 10, payment=PaymentStatus.PAID),
            _order("o2", "c1", "Cafe", 30),
            _order("o3", "c2", "Diner", 5, payment=PaymentStatus.PAID),
        ]
        rows = _rows(client_pnl_report(orders))

        assert rows[1] == ["Cafe", "2", "40.00", "0.00", "10.00", "30.00"]
        assert rows[2] == ["Diner", "1", "5.00", "0.00", "5.00", "0.00"]
