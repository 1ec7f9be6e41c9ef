"""
Test purchase bill capture and its catalog side effects
"""

import asyncio
from datetime import datetime

import pytest

from models.purchase_bill import BillLineItem, BillSource, PurchaseBillCreate
from services.purchase_service import (
    PurchaseBillNotFound,
    PurchaseBillService,
    bill_totals,
    synthesize_sku,
)

VENDOR_ID = "vendor-0123456789abcdef"


def run(coro):
    return asyncio.run(coro)


def _bill(*items, vat_amount=0):
    return PurchaseBillCreate(
        vendor_name="Al Noor Wholesale",
        bill_date=datetime(2024, 5, 2),
        line_items=list(items),
        vat_amount=vat_amount,
    )


@pytest.fixture
def bills(db):
    db.products.docs.append({
        "_id": "p-tomato",
        "product_id": "p-tomato",
        "vendor_id": VENDOR_ID,
        "sku": "SKU-TOM-001",
        "name": "Tomato",
        "unit": "kg",
        "price": 4.0,
        "cost_price": 2.5,
    })
    return PurchaseBillService(db, markup=1.3)


class TestHelpers:
    def test_sku_format(self):
        assert synthesize_sku("cucumber", 7) == "SKU-CUC-007"
        assert synthesize_sku("Ox", 12) == "SKU-OX-012"

    def test_bill_totals(self):
        totals = bill_totals([BillLineItem(item_name="A", quantity=3, cost_per_unit=2.5)], vat_amount=0.5)
        assert totals == {"sub_total": 7.5, "vat_amount": 0.5, "total_amount": 8.0}


class TestProductSync:
    def test_case_insensitive_match_updates_cost_only(self, db, bills):
        _, summary = run(bills.create_bill(VENDOR_ID, _bill(BillLineItem(item_name="TOMATO", cost_per_unit=3.1))))

        assert summary.updated == ["Tomato"]
        assert summary.created == []
        assert len(db.products.docs) == 1
        tomato = db.products.docs[0]
        assert tomato["cost_price"] == 3.1
        assert tomato["price"] == 4.0

    def test_unknown_item_creates_product(self, db, bills):
        _, summary = run(bills.create_bill(VENDOR_ID, _bill(BillLineItem(item_name="Cucumber", cost_per_unit=10))))

        assert summary.created == ["Cucumber"]
        created = next(p for p in db.products.docs if p["name"] == "Cucumber")
        assert created["price"] == 13.0
        assert created["cost_price"] == 10
        assert created["unit"] == "PCS"
        assert created["sku"] == "SKU-CUC-002"
        assert created["vendor_id"] == VENDOR_ID

    def test_unit_from_bill_is_kept(self, db, bills):
        run(bills.create_bill(VENDOR_ID, _bill(BillLineItem(item_name="Rice", unit="bag", cost_per_unit=40))))
        rice = next(p for p in db.products.docs if p["name"] == "Rice")
        assert rice["unit"] == "bag"

    def test_repeated_name_in_one_bill_creates_once(self, db, bills):
        _, summary = run(bills.create_bill(VENDOR_ID, _bill(
            BillLineItem(item_name="Onion", cost_per_unit=1),
            BillLineItem(item_name="onion", cost_per_unit=1.2),
        )))

        onions = [p for p in db.products.docs if p["name"].lower() == "onion"]
        assert len(onions) == 1
        assert onions[0]["cost_price"] == 1.2
        assert summary.created == ["Onion"]
        assert summary.updated == ["Onion"]

    def test_failed_product_write_keeps_bill(self, db, bills, caplog):
        db.products.fail_when = lambda op, query: op == "insert"

        bill, summary = run(bills.create_bill(VENDOR_ID, _bill(
            BillLineItem(item_name="Tomato", cost_per_unit=3),
            BillLineItem(item_name="Garlic", cost_per_unit=9),
        )))

        assert summary.failed == ["Garlic"]
        assert summary.updated == ["Tomato"]
        assert len(db.purchase_bills.docs) == 1
        assert bill.total_amount == 12
        assert "Product sync failed for 'Garlic'" in caplog.text


class TestBillCrud:
    def test_create_computes_totals(self, bills):
        bill, _ = run(bills.create_bill(VENDOR_ID, _bill(
            BillLineItem(item_name="Tomato", quantity=10, cost_per_unit=2),
            vat_amount=1,
        )))
        assert bill.sub_total == 20
        assert bill.total_amount == 21
        assert bill.source == BillSource.MANUAL

    def test_update_does_not_resync_catalog(self, db, bills):
        bill, _ = run(bills.create_bill(VENDOR_ID, _bill(BillLineItem(item_name="Tomato", cost_per_unit=3))))

        updated = run(bills.update_bill(
            VENDOR_ID, bill.bill_id, _bill(BillLineItem(item_name="Tomato", quantity=2, cost_per_unit=99))
        ))

        assert updated.total_amount == 198
        assert db.products.docs[0]["cost_price"] == 3

    def test_bills_are_vendor_scoped(self, bills):
        bill, _ = run(bills.create_bill(VENDOR_ID, _bill(BillLineItem(item_name="Tomato", cost_per_unit=3))))

        assert run(bills.list_bills("someone-else")) == []
        with pytest.raises(PurchaseBillNotFound):
            run(bills.get_bill("someone-else", bill.bill_id))

    def test_delete(self, db, bills):
        bill, _ = run(bills.create_bill(VENDOR_ID, _bill(BillLineItem(item_name="Tomato", cost_per_unit=3))))
        run(bills.delete_bill(VENDOR_ID, bill.bill_id))

        assert db.purchase_bills.docs == []
        with pytest.raises(PurchaseBillNotFound):
            run(bills.delete_bill(VENDOR_ID, bill.bill_id))
