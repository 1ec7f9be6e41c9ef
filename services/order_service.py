"""
Order lifecycle: client checkout, vendor manual invoices, pricing,
status changes and deletion. Ledger writes go through OrderLedger.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from config import Settings
from models.country import get_country
from models.order import (
    InvoiceType,
    LedgerWriteResult,
    LineItem,
    ManualOrderCreate,
    Order,
    OrderStatus,
    PaymentStatus,
    PlaceOrderRequest,
    PriceOrderRequest,
    StatusUpdate,
)
from models.user import User, UserRole
from services.cart import Cart, CartError
from services.ledger_service import ADHOC_CLIENT_PREFIX, OrderLedger
from services.pricing import compute_totals

logger = logging.getLogger(__name__)


class VendorNotFound(LookupError):
    pass


class ProductNotFound(LookupError):
    pass


class ClientNotFound(LookupError):
    pass


def new_order_id() -> str:
    return uuid.uuid4().hex


def new_adhoc_client_id() -> str:
    return f"{ADHOC_CLIENT_PREFIX}{uuid.uuid4().hex[:8]}"


class OrderService:
    def __init__(self, db: AsyncIOMotorDatabase, settings: Settings):
        self.db = db
        self.settings = settings
        self.ledger = OrderLedger(db)

    def vat_rate_for(self, vendor: User) -> float:
        return get_country(vendor.country, self.settings.default_country).vat_rate

    def invoice_prefix_for(self, vendor: User) -> str:
        return vendor.invoice_settings.prefix or self.settings.default_invoice_prefix

    # ============== CLIENT CHECKOUT ==============

    async def build_cart(self, request: PlaceOrderRequest) -> Cart:
        """Resolve catalog items against the vendor and apply quantity deltas"""
        cart = Cart(request.vendor_id)
        for item in request.items:
            product = await self.db.products.find_one({
                "vendor_id": request.vendor_id,
                "product_id": item.product_id,
            })
            if not product:
                raise ProductNotFound(item.product_id)
            cart.add(product, item.quantity)

        for name in request.special_items:
            cart.add_special_item(name)

        cart.validate_for_checkout()
        return cart

    async def place_order(self, client: User, request: PlaceOrderRequest) -> Tuple[Order, LedgerWriteResult]:
        """
        Checkout a cart. The order starts in Awaiting Pricing, carries no
        prices and no invoice code. The client's contact details are
        upserted into the vendor's client list.
        """
        if not request.vendor_id:
            raise CartError("Please select a vendor before placing an order")

        vendor_doc = await self.db.users.find_one({"_id": request.vendor_id, "role": UserRole.VENDOR.value})
        if not vendor_doc:
            raise VendorNotFound(request.vendor_id)

        cart = await self.build_cart(request)

        now = datetime.utcnow()
        order = Order(
            order_id=new_order_id(),
            invoice_code=None,
            vendor_id=request.vendor_id,
            client_id=client.id,
            client_name=client.company_name or client.name,
            line_items=cart.to_line_items(),
            status=OrderStatus.AWAITING_PRICING,
            payment_status=PaymentStatus.UNPAID,
            invoice_type=InvoiceType.NORMAL,
            payment_method=request.payment_method,
            created_at=now,
            order_date=now,
            delivery_date=request.delivery_date,
        )

        await self.sync_client_profile(request.vendor_id, client)
        result = await self.ledger.create(order)
        logger.info(f"Client {client.id} placed order {order.order_id} with vendor {request.vendor_id}")
        return order, result

    async def sync_client_profile(self, vendor_id: str, client: User) -> None:
        now = datetime.utcnow()
        await self.db.clients.update_one(
            {"vendor_id": vendor_id, "client_id": client.id},
            {
                "$set": {
                    "name": client.company_name or client.name,
                    "contact_email": client.email,
                    "phone": client.phone,
                    "delivery_address": client.address,
                    "trn": client.trn,
                    "is_registered": True,
                    "updated_at": now,
                },
                "$setOnInsert": {
                    "vendor_id": vendor_id,
                    "client_id": client.id,
                    "credit_limit": 0,
                    "default_payment_terms": "COD",
                    "created_at": now,
                },
            },
            upsert=True,
        )

    # ============== VENDOR INVOICING ==============

    async def resolve_client(self, vendor: User, client_id: Optional[str], client_name: Optional[str]) -> dict:
        """Find the vendor's client by id or name; an unknown name becomes an ad hoc client"""
        if client_id:
            doc = await self.db.clients.find_one({"vendor_id": vendor.id, "client_id": client_id})
            if not doc:
                raise ClientNotFound(client_id)
            return doc

        name = (client_name or "").strip()
        if not name:
            raise CartError("A client is required to create an invoice")

        async for doc in self.db.clients.find({"vendor_id": vendor.id}):
            if (doc.get("name") or "").lower() == name.lower():
                return doc

        now = datetime.utcnow()
        doc = {
            "vendor_id": vendor.id,
            "client_id": new_adhoc_client_id(),
            "name": name,
            "is_registered": False,
            "credit_limit": 0,
            "default_payment_terms": "COD",
            "created_at": now,
            "updated_at": now,
        }
        await self.db.clients.insert_one(doc)
        logger.info(f"Ad hoc client '{name}' created for vendor {vendor.id}")
        return doc

    async def create_manual_order(self, vendor: User, data: ManualOrderCreate) -> Tuple[Order, LedgerWriteResult]:
        """A vendor-issued invoice, priced and numbered at creation"""
        client = await self.resolve_client(vendor, data.client_id, data.client_name)

        lines: List[LineItem] = [LineItem(**item.dict()) for item in data.line_items]
        lines, sub_total, vat_amount, total_amount = compute_totals(
            lines, data.invoice_type, self.vat_rate_for(vendor)
        )
        invoice_code = await self.ledger.allocate_invoice_code(vendor.id, self.invoice_prefix_for(vendor))

        now = datetime.utcnow()
        order = Order(
            order_id=new_order_id(),
            invoice_code=invoice_code,
            vendor_id=vendor.id,
            client_id=client["client_id"],
            client_name=client["name"],
            line_items=lines,
            sub_total=sub_total,
            vat_amount=vat_amount,
            total_amount=total_amount,
            status=OrderStatus.PRICED,
            payment_status=PaymentStatus.UNPAID,
            invoice_type=data.invoice_type,
            payment_method=data.payment_method,
            created_at=now,
            order_date=data.order_date or now,
            delivery_date=data.delivery_date,
        )
        result = await self.ledger.create(order)
        return order, result

    async def price_order(self, vendor: User, order_id: str, data: PriceOrderRequest) -> Tuple[Order, LedgerWriteResult]:
        order = await self.ledger.get_vendor_order(vendor.id, order_id)
        return await self.ledger.price(
            order,
            data.unit_prices,
            data.invoice_type,
            self.vat_rate_for(vendor),
            self.invoice_prefix_for(vendor),
        )

    # ============== STATUS / DELETE ==============

    async def order_for_actor(self, actor: User, order_id: str) -> Order:
        """Vendor copy an actor may manage: vendors their own, admins any"""
        if actor.role == UserRole.VENDOR:
            return await self.ledger.get_vendor_order(actor.id, order_id)
        return await self.ledger.find_vendor_copy(order_id)

    async def update_status(self, actor: User, order_id: str, data: StatusUpdate) -> Tuple[Order, LedgerWriteResult]:
        order = await self.order_for_actor(actor, order_id)
        return await self.ledger.update_status(order, data.status, data.payment_status)

    async def delete_order(self, actor: User, order_id: str) -> LedgerWriteResult:
        order = await self.order_for_actor(actor, order_id)
        return await self.ledger.delete(order)
