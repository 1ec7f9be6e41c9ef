"""Platform usage analytics for admins"""

import logging
from collections import Counter
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from services.ledger_service import VENDOR_COPY

logger = logging.getLogger(__name__)


class AnalyticsService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def usage(self) -> Dict[str, Any]:
        """Per-vendor activity and platform-wide order status distribution"""
        vendors = [doc async for doc in self.db.vendors.find({})]

        order_counts: Counter = Counter()
        revenue: Counter = Counter()
        statuses: Counter = Counter()
        async for order in self.db.orders.find({"ledger_copy": VENDOR_COPY}):
            vendor_id = order.get("vendor_id")
            order_counts[vendor_id] += 1
            revenue[vendor_id] += order.get("total_amount") or 0
            statuses[order.get("status")] += 1

        vendor_stats: List[Dict[str, Any]] = []
        for vendor in vendors:
            vendor_id = vendor["_id"]
            vendor_stats.append({
                "vendor_id": vendor_id,
                "name": vendor.get("name"),
                "country": vendor.get("country"),
                "orders": order_counts.get(vendor_id, 0),
                "revenue": round(revenue.get(vendor_id, 0), 2),
                "products": await self.db.products.count_documents({"vendor_id": vendor_id}),
                "clients": await self.db.clients.count_documents({"vendor_id": vendor_id}),
            })
        vendor_stats.sort(key=lambda v: v["revenue"], reverse=True)

        return {
            "total_vendors": len(vendors),
            "total_orders": sum(order_counts.values()),
            "total_revenue": round(sum(revenue.values()), 2),
            "status_distribution": [
                {"status": status, "count": count} for status, count in statuses.most_common()
            ],
            "vendor_stats": vendor_stats,
        }
