"""
Vendor dashboard: revenue, purchases and profit over a date range, plus
month-by-month sales against purchases for the last six months.
"""

import calendar
import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from models.order import Order
from models.purchase_bill import PurchaseBill
from services.ledger_service import OrderLedger
from services.purchase_service import PurchaseBillService

logger = logging.getLogger(__name__)

MONTHS_SHOWN = 6


def one_month_before(day: date) -> date:
    """Same day of the previous month, clamped to that month's length"""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


def recent_months(today: date, count: int = MONTHS_SHOWN) -> List[Tuple[int, int]]:
    """(year, month) pairs ending with today's month, oldest first"""
    year, month = today.year, today.month
    months = []
    for _ in range(count):
        months.append((year, month))
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    return list(reversed(months))


def build_dashboard(
    orders: List[Order],
    bills: List[PurchaseBill],
    client_count: int,
    date_from: date,
    date_to: date,
    today: date,
) -> Dict[str, Any]:
    """
    Totals cover orders and bills dated within [date_from, date_to], whole
    days inclusive. The monthly series ignores the range and always shows
    the last six months up to today.
    """
    start = datetime.combine(date_from, time.min)
    end = datetime.combine(date_to, time.max)

    orders_in_range = [o for o in orders if start <= o.order_date <= end]
    bills_in_range = [b for b in bills if start <= b.bill_date <= end]

    revenue = round(sum(o.total_amount for o in orders_in_range), 2)
    purchases = round(sum(b.total_amount for b in bills_in_range), 2)

    monthly = {key: {"sales": 0.0, "purchases": 0.0} for key in recent_months(today)}
    for o in orders:
        key = (o.order_date.year, o.order_date.month)
        if key in monthly:
            monthly[key]["sales"] += o.total_amount
    for b in bills:
        key = (b.bill_date.year, b.bill_date.month)
        if key in monthly:
            monthly[key]["purchases"] += b.total_amount

    performance = []
    for (year, month), figures in monthly.items():
        net = figures["sales"] - figures["purchases"]
        performance.append({
            "month": date(year, month, 1).strftime("%b %Y"),
            "sales": round(figures["sales"], 2),
            "purchases": round(figures["purchases"], 2),
            "profit": round(max(net, 0), 2),
            "loss": round(max(-net, 0), 2),
        })

    return {
        "from": date_from.isoformat(),
        "to": date_to.isoformat(),
        "total_revenue": revenue,
        "total_purchases": purchases,
        "total_profit": round(revenue - purchases, 2),
        "order_count": len(orders_in_range),
        "client_count": client_count,
        "monthly": performance,
    }


class DashboardService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def summary(
        self,
        vendor_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Defaults to the month up to today"""
        today = today or datetime.utcnow().date()
        date_to = date_to or today
        date_from = date_from or one_month_before(date_to)
        if date_from > date_to:
            raise ValueError("The start date must not be after the end date")

        orders = await OrderLedger(self.db).list_orders(owner_id=vendor_id, vendor_copies_only=True)
        bills = await PurchaseBillService(self.db).list_bills(vendor_id)
        client_count = await self.db.clients.count_documents({"vendor_id": vendor_id})

        logger.info(f"Dashboard for vendor {vendor_id}: {date_from} to {date_to}")
        return build_dashboard(orders, bills, client_count, date_from, date_to, today)
