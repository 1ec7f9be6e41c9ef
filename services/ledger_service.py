"""
Order ledger for TradeLedger

Every order lives in the vendor's ledger (authoritative) and, when the
client is a registered account, in a mirrored copy in the client's ledger.
Both copies share the order id and sit in the `orders` collection, keyed by
`{ledger_owner_id}:{order_id}`.

Writes to the two copies are submitted together but are NOT transactional:
one side may succeed while the other fails. Nothing is retried or rolled
back. The outcome of each side is reported in a LedgerWriteResult so the
caller decides what to surface.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from models.order import (
    InvoiceType,
    LedgerWriteResult,
    Order,
    OrderStatus,
    PaymentStatus,
)
from services.pricing import (
    apply_unit_prices,
    compute_totals,
    format_invoice_code,
    max_invoice_number,
)

logger = logging.getLogger(__name__)

VENDOR_COPY = "vendor"
CLIENT_COPY = "client"

ADHOC_CLIENT_PREFIX = "adhoc-"
MIN_ACCOUNT_ID_LENGTH = 20

# Keeps fire-and-forget tasks referenced until they finish
_background_tasks: Set[asyncio.Task] = set()


class OrderNotFound(LookupError):
    pass


class OrderStateError(ValueError):
    pass


def is_registered_account(client_id: Optional[str]) -> bool:
    """
    Guess whether a client id belongs to a real account.

    Account ids are long opaque strings; ad hoc clients created while
    invoicing get a short or `adhoc-` prefixed id.
    """
    if not client_id:
        return False
    if client_id.startswith(ADHOC_CLIENT_PREFIX):
        return False
    return len(client_id) >= MIN_ACCOUNT_ID_LENGTH


def ledger_doc_id(owner_id: str, order_id: str) -> str:
    return f"{owner_id}:{order_id}"


class OrderLedger:
    """Reads and best-effort dual writes of orders"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    # ============== READS ==============

    async def get(self, owner_id: str, order_id: str) -> Optional[Order]:
        doc = await self.db.orders.find_one({"_id": ledger_doc_id(owner_id, order_id)})
        return Order.from_doc(doc) if doc else None

    async def get_vendor_order(self, vendor_id: str, order_id: str) -> Order:
        doc = await self.db.orders.find_one({
            "_id": ledger_doc_id(vendor_id, order_id),
            "ledger_copy": VENDOR_COPY,
        })
        if not doc:
            raise OrderNotFound(order_id)
        return Order.from_doc(doc)

    async def find_vendor_copy(self, order_id: str) -> Order:
        """Authoritative copy of an order regardless of vendor (admin use)"""
        doc = await self.db.orders.find_one({"order_id": order_id, "ledger_copy": VENDOR_COPY})
        if not doc:
            raise OrderNotFound(order_id)
        return Order.from_doc(doc)

    async def list_orders(
        self,
        owner_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        search: Optional[str] = None,
        vendor_copies_only: bool = False,
    ) -> List[Order]:
        query: Dict[str, Any] = {}
        if owner_id:
            query["ledger_owner_id"] = owner_id
        if vendor_copies_only:
            query["ledger_copy"] = VENDOR_COPY
        if status:
            query["status"] = status.value
        if payment_status:
            query["payment_status"] = payment_status.value

        cursor = self.db.orders.find(query).sort("created_at", -1)
        orders = [Order.from_doc(doc) async for doc in cursor]

        if search:
            needle = search.lower()
            orders = [
                o for o in orders
                if needle in (o.invoice_code or "").lower() or needle in o.client_name.lower()
            ]
        return orders

    # ============== INVOICE NUMBERING ==============

    async def allocate_invoice_code(self, vendor_id: str, prefix: Optional[str] = None) -> str:
        """
        Next invoice code for a vendor.

        The per-vendor counter is first raised to the highest number already
        present in the vendor's ledger, then incremented atomically, so
        numbering stays max-plus-one and concurrent pricings cannot collide.
        """
        codes = [
            doc.get("invoice_code")
            async for doc in self.db.orders.find(
                {"ledger_owner_id": vendor_id, "ledger_copy": VENDOR_COPY},
                {"invoice_code": 1},
            )
        ]
        await self.db.invoice_counters.update_one(
            {"_id": vendor_id},
            {"$max": {"seq": max_invoice_number(codes)}},
            upsert=True,
        )
        counter = await self.db.invoice_counters.find_one_and_update(
            {"_id": vendor_id},
            {"$inc": {"seq": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return format_invoice_code(counter["seq"], prefix)

    # ============== DUAL WRITES ==============

    async def _apply(
        self,
        order: Order,
        operation: Callable[[str, str], Awaitable[Any]],
        action: str,
    ) -> LedgerWriteResult:
        """Run `operation(owner_id, copy)` on the vendor copy and, if registered, the client copy"""
        targets: List[Tuple[str, str]] = [(order.vendor_id, VENDOR_COPY)]
        mirror = is_registered_account(order.client_id) and order.client_id != order.vendor_id
        if mirror:
            targets.append((order.client_id, CLIENT_COPY))

        outcomes = await asyncio.gather(
            *(operation(owner_id, copy) for owner_id, copy in targets),
            return_exceptions=True,
        )

        result = LedgerWriteResult(order_id=order.order_id, mirror_attempted=mirror)
        for (owner_id, copy), outcome in zip(targets, outcomes):
            ok = not isinstance(outcome, BaseException)
            if not ok:
                result.errors.append(f"{copy} ledger: {outcome}")
                logger.error(f"Order {action} failed on {copy} ledger {owner_id} for order {order.order_id}: {outcome}")
            if copy == VENDOR_COPY:
                result.vendor_written = ok
            else:
                result.mirror_written = ok

        if result.partial:
            logger.warning(
                f"Partial dual-write on order {order.order_id} ({action}): "
                f"vendor={result.vendor_written} client={result.mirror_written}"
            )
        elif result.vendor_written:
            logger.info(f"Order {order.order_id} {action} written (mirrored={result.mirror_written})")
        return result

    async def create(self, order: Order) -> LedgerWriteResult:
        body = order.dict()

        async def write(owner_id: str, copy: str):
            doc = {**body, "_id": ledger_doc_id(owner_id, order.order_id),
                   "ledger_owner_id": owner_id, "ledger_copy": copy}
            return await self.db.orders.replace_one({"_id": doc["_id"]}, doc, upsert=True)

        return await self._apply(order, write, "create")

    async def _update_fields(self, order: Order, fields: Dict[str, Any], action: str) -> LedgerWriteResult:
        async def write(owner_id: str, copy: str):
            res = await self.db.orders.update_one(
                {"_id": ledger_doc_id(owner_id, order.order_id)},
                {"$set": fields},
            )
            if res.matched_count == 0:
                raise OrderNotFound(f"{order.order_id} missing from {copy} ledger")
            return res

        return await self._apply(order, write, action)

    async def price(
        self,
        order: Order,
        unit_prices: List[float],
        invoice_type: InvoiceType,
        vat_rate: float,
        prefix: Optional[str] = None,
    ) -> Tuple[Order, LedgerWriteResult]:
        """
        Price an order: per-line unit prices, totals, status Priced/Unpaid.

        An invoice code is allocated the first time only; re-pricing keeps it.
        """
        lines = apply_unit_prices(order.line_items, unit_prices)
        lines, sub_total, vat_amount, total_amount = compute_totals(lines, invoice_type, vat_rate)
        invoice_code = order.invoice_code or await self.allocate_invoice_code(order.vendor_id, prefix)

        fields = {
            "line_items": [line.dict() for line in lines],
            "sub_total": sub_total,
            "vat_amount": vat_amount,
            "total_amount": total_amount,
            "invoice_type": invoice_type.value,
            "invoice_code": invoice_code,
            "status": OrderStatus.PRICED.value,
            "payment_status": PaymentStatus.UNPAID.value,
        }
        result = await self._update_fields(order, fields, "price")
        priced = order.copy(update={
            **fields,
            "line_items": lines,
            "invoice_type": invoice_type,
            "status": OrderStatus.PRICED,
            "payment_status": PaymentStatus.UNPAID,
        })
        return priced, result

    async def update_status(
        self,
        order: Order,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Tuple[Order, LedgerWriteResult]:
        """Any status may move to any other; there is no transition graph."""
        fields: Dict[str, Any] = {}
        if status is not None:
            fields["status"] = status.value
        if payment_status is not None:
            fields["payment_status"] = payment_status.value
        if not fields:
            raise OrderStateError("Nothing to update")

        result = await self._update_fields(order, fields, "status update")
        update: Dict[str, Any] = {}
        if status is not None:
            update["status"] = status
        if payment_status is not None:
            update["payment_status"] = payment_status
        return order.copy(update=update), result

    async def delete(self, order: Order) -> LedgerWriteResult:
        async def write(owner_id: str, copy: str):
            return await self.db.orders.delete_one({"_id": ledger_doc_id(owner_id, order.order_id)})

        return await self._apply(order, write, "delete")

    # ============== NON-BLOCKING SUBMISSION ==============

    def submit(self, write: Awaitable[Any], description: str) -> asyncio.Task:
        """Schedule a ledger write without awaiting it; the outcome is logged."""
        task = asyncio.ensure_future(write)
        _background_tasks.add(task)

        def _done(t: asyncio.Task):
            _background_tasks.discard(t)
            if t.cancelled():
                logger.warning(f"Background ledger write cancelled: {description}")
                return
            exc = t.exception()
            if exc is not None:
                logger.error(f"Background ledger write failed: {description}: {exc}")
                return
            outcome = t.result()
            if isinstance(outcome, tuple):
                outcome = outcome[-1]
            if isinstance(outcome, LedgerWriteResult) and outcome.errors:
                logger.error(f"Background ledger write incomplete: {description}: {outcome.errors}")

        task.add_done_callback(_done)
        return task
