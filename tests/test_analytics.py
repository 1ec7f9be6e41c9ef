"""
Test admin usage analytics
"""

import asyncio

from services.analytics_service import AnalyticsService


def _order(vendor_id, owner_id, copy, total, status):
    return {
        "_id": f"{owner_id}:{vendor_id}-{total}",
        "vendor_id": vendor_id,
        "ledger_owner_id": owner_id,
        "ledger_copy": copy,
        "total_amount": total,
        "status": status,
    }


def test_usage_counts_vendor_copies_only(db):
    db.vendors.docs.extend([
        {"_id": "v1", "name": "Fresh Farms LLC", "country": "AE"},
        {"_id": "v2", "name": "Spice Route", "country": "IN"},
    ])
    db.orders.docs.extend([
        _order("v1", "v1", "vendor", 100, "Priced"),
        _order("v1", "client-1", "client", 100, "Priced"),
        _order("v1", "v1", "vendor", 50.25, "Delivered"),
        _order("v2", "v2", "vendor", 0, "Awaiting Pricing"),
    ])
    db.products.docs.append({"_id": "p1", "vendor_id": "v2"})

    usage = asyncio.run(AnalyticsService(db).usage())

    assert usage["total_vendors"] == 2
    assert usage["total_orders"] == 3
    assert usage["total_revenue"] == 150.25
    assert {"status": "Priced", "count": 1} in usage["status_distribution"]
    assert [v["vendor_id"] for v in usage["vendor_stats"]] == ["v1", "v2"]
    assert usage["vendor_stats"][1]["products"] == 1
    assert usage["vendor_stats"][0]["orders"] == 2
