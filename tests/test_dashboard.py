"""
Test the vendor dashboard figures
"""

import asyncio
from datetime import date, datetime

import pytest

from services.dashboard_service import DashboardService, one_month_before, recent_months

TODAY = date(2024, 7, 15)


def _order_doc(vendor_id, order_id, total, order_date, copy="vendor", owner_id=None):
    owner_id = owner_id or vendor_id
    return {
        "_id": f"{owner_id}:{order_id}",
        "order_id": order_id,
        "ledger_owner_id": owner_id,
        "ledger_copy": copy,
        "vendor_id": vendor_id,
        "client_id": "client-1",
        "client_name": "Corner Cafe",
        "total_amount": total,
        "status": "Priced",
        "created_at": order_date,
        "order_date": order_date,
    }


def _bill_doc(vendor_id, bill_id, total, bill_date):
    return {
        "_id": bill_id,
        "bill_id": bill_id,
        "vendor_id": vendor_id,
        "vendor_name": "Wholesale Co",
        "bill_date": bill_date,
        "line_items": [{"item_name": "Tomatoes", "quantity": 1, "cost_per_unit": total}],
        "sub_total": total,
        "total_amount": total,
        "created_at": bill_date,
        "updated_at": bill_date,
    }


@pytest.fixture
def ledger(db, vendor):
    db.orders.docs.extend([
        _order_doc(vendor.id, "o1", 100.0, datetime(2024, 7, 1, 9, 30)),
        _order_doc(vendor.id, "o1", 100.0, datetime(2024, 7, 1, 9, 30), copy="client", owner_id="client-1"),
        _order_doc(vendor.id, "o2", 50.5, datetime(2024, 7, 10, 23, 59)),
        _order_doc(vendor.id, "o3", 80.0, datetime(2024, 5, 20)),
        _order_doc(vendor.id, "o4", 999.0, datetime(2023, 12, 31)),
        _order_doc("other-vendor", "o5", 500.0, datetime(2024, 7, 2)),
    ])
    db.purchase_bills.docs.extend([
        _bill_doc(vendor.id, "b1", 40.0, datetime(2024, 7, 10)),
        _bill_doc(vendor.id, "b2", 120.0, datetime(2024, 5, 3)),
        _bill_doc("other-vendor", "b3", 75.0, datetime(2024, 7, 3)),
    ])
    db.clients.docs.extend([
        {"_id": "c1", "vendor_id": vendor.id, "name": "Corner Cafe"},
        {"_id": "c2", "vendor_id": vendor.id, "name": "Harbor Grill"},
        {"_id": "c3", "vendor_id": "other-vendor", "name": "Elsewhere"},
    ])
    return db


class TestDateHelpers:
    def test_one_month_before_clamps_day(self):
        assert one_month_before(date(2024, 3, 31)) == date(2024, 2, 29)
        assert one_month_before(date(2024, 1, 15)) == date(2023, 12, 15)

    def test_recent_months_cross_year(self):
        assert recent_months(date(2024, 2, 10), 4) == [(2023, 11), (2023, 12), (2024, 1), (2024, 2)]


class TestDashboardSummary:
    def test_range_totals(self, ledger, vendor):
        summary = asyncio.run(
            DashboardService(ledger).summary(vendor.id, date(2024, 7, 1), date(2024, 7, 10), today=TODAY)
        )

        # vendor copies only, whole days inclusive
        assert summary["total_revenue"] == 150.5
        assert summary["order_count"] == 2
        assert summary["total_purchases"] == 40.0
        assert summary["total_profit"] == 110.5
        assert summary["client_count"] == 2

    def test_range_can_show_a_loss(self, ledger, vendor):
        summary = asyncio.run(
            DashboardService(ledger).summary(vendor.id, date(2024, 5, 1), date(2024, 5, 31), today=TODAY)
        )

        assert summary["total_revenue"] == 80.0
        assert summary["total_purchases"] == 120.0
        assert summary["total_profit"] == -40.0

    def test_default_range_is_last_month(self, ledger, vendor):
        summary = asyncio.run(DashboardService(ledger).summary(vendor.id, today=TODAY))

        assert (summary["from"], summary["to"]) == ("2024-06-15", "2024-07-15")
        assert summary["total_revenue"] == 150.5

    def test_monthly_series_covers_six_months(self, ledger, vendor):
        summary = asyncio.run(
            DashboardService(ledger).summary(vendor.id, date(2024, 7, 1), date(2024, 7, 1), today=TODAY)
        )
        monthly = summary["monthly"]

        assert [m["month"] for m in monthly] == [
            "Feb 2024", "Mar 2024", "Apr 2024", "May 2024", "Jun 2024", "Jul 2024",
        ]
        assert monthly[-1] == {"month": "Jul 2024", "sales": 150.5, "purchases": 40.0, "profit": 110.5, "loss": 0}
        assert monthly[3] == {"month": "May 2024", "sales": 80.0, "purchases": 120.0, "profit": 0, "loss": 40.0}
        assert monthly[0]["sales"] == 0

    def test_reversed_range_is_rejected(self, ledger, vendor):
        with pytest.raises(ValueError):
            asyncio.run(DashboardService(ledger).summary(vendor.id, date(2024, 7, 10), date(2024, 7, 1)))
