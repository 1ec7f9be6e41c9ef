"""
Order Routes for TradeLedger
Checkout, manual invoices, pricing, status tracking and deletion
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from config import Settings, get_settings
from database.mongodb import get_database
from models.order import (
    LedgerWriteResult,
    ManualOrderCreate,
    Order,
    OrderStatus,
    OrderWriteResponse,
    PaymentStatus,
    PlaceOrderRequest,
    PriceOrderRequest,
    StatusUpdate,
)
from models.user import User
from services.auth_deps import (
    capabilities_for,
    get_current_client,
    get_current_user,
    get_current_vendor,
)
from services.cart import CartError
from services.invoice_service import build_invoice
from services.ledger_service import OrderNotFound, OrderStateError
from services.order_service import (
    ClientNotFound,
    OrderService,
    ProductNotFound,
    VendorNotFound,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_order_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
    settings: Settings = Depends(get_settings)
) -> OrderService:
    return OrderService(db, settings)


def _not_found(detail: str = "Order not found") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _require_order_manager(user: User) -> None:
    caps = capabilities_for(user.role)
    if not (caps.owns_ledger or caps.manages_all_orders):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{user.role.value}' cannot manage orders"
        )


def _ensure_vendor_written(result: LedgerWriteResult) -> None:
    """The vendor copy is authoritative: if it failed, the write failed"""
    if not result.vendor_written:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Order write failed: {'; '.join(result.errors)}"
        )


# ============== READS ==============

@router.get("", response_model=List[Order])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Orders in the caller's own ledger"""
    caps = capabilities_for(current_user.role)
    if caps.manages_all_orders:
        return await service.ledger.list_orders(
            status=status_filter, payment_status=payment_status, search=search, vendor_copies_only=True
        )
    return await service.ledger.list_orders(
        owner_id=current_user.id,
        status=status_filter,
        payment_status=payment_status,
        search=search,
    )


async def _visible_order(service: OrderService, user: User, order_id: str) -> Order:
    if capabilities_for(user.role).manages_all_orders:
        try:
            return await service.ledger.find_vendor_copy(order_id)
        except OrderNotFound:
            raise _not_found()
    order = await service.ledger.get(user.id, order_id)
    if not order:
        raise _not_found()
    return order


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    return await _visible_order(service, current_user, order_id)


@router.get("/{order_id}/invoice")
async def get_invoice(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Invoice view of a priced order, figures taken from the stored order"""
    order = await _visible_order(service, current_user, order_id)
    if order.status == OrderStatus.AWAITING_PRICING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order has not been priced yet"
        )

    vendor_doc = await service.db.users.find_one({"_id": order.vendor_id}) or {}
    client_doc = await service.db.clients.find_one({"vendor_id": order.vendor_id, "client_id": order.client_id})
    return build_invoice(order, vendor_doc, client_doc, service.settings.default_country)


# ============== CREATION ==============

@router.post("/place", response_model=OrderWriteResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    request: PlaceOrderRequest,
    current_user: User = Depends(get_current_client),
    service: OrderService = Depends(get_order_service)
):
    """Client checkout: the order is sent to the vendor for pricing"""
    try:
        order, result = await service.place_order(current_user, request)
    except CartError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except VendorNotFound:
        raise _not_found("Vendor not found")
    except ProductNotFound as e:
        raise _not_found(f"Product not found: {e}")

    _ensure_vendor_written(result)
    return OrderWriteResponse(order=order, ledger=result)


@router.post("", response_model=OrderWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_manual_order(
    data: ManualOrderCreate,
    current_user: User = Depends(get_current_vendor),
    service: OrderService = Depends(get_order_service)
):
    """Vendor-issued invoice, priced and numbered immediately"""
    try:
        order, result = await service.create_manual_order(current_user, data)
    except CartError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ClientNotFound:
        raise _not_found("Client not found")

    _ensure_vendor_written(result)
    return OrderWriteResponse(order=order, ledger=result)


# ============== PRICING ==============

@router.post("/{order_id}/price", response_model=OrderWriteResponse)
async def price_order(
    order_id: str,
    data: PriceOrderRequest,
    current_user: User = Depends(get_current_vendor),
    service: OrderService = Depends(get_order_service)
):
    """Set unit prices; the invoice code is assigned on first pricing only"""
    try:
        order, result = await service.price_order(current_user, order_id, data)
    except OrderNotFound:
        raise _not_found()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    _ensure_vendor_written(result)
    logger.info(f"Order {order_id} priced as {order.invoice_code}: total {order.total_amount}")
    return OrderWriteResponse(order=order, ledger=result)


# ============== STATUS / DELETE ==============

@router.patch("/{order_id}/status", response_model=OrderWriteResponse)
async def update_order_status(
    order_id: str,
    data: StatusUpdate,
    wait: bool = True,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Move an order to any fulfillment or payment status.

    With wait=false the write is scheduled and 202 is returned at once;
    its outcome is only logged.
    """
    _require_order_manager(current_user)
    if data.status is None and data.payment_status is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")

    try:
        order = await service.order_for_actor(current_user, order_id)
    except OrderNotFound:
        raise _not_found()

    if not wait:
        service.ledger.submit(
            service.ledger.update_status(order, data.status, data.payment_status),
            f"status update of order {order_id}",
        )
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"order_id": order_id, "accepted": True})

    try:
        updated, result = await service.ledger.update_status(order, data.status, data.payment_status)
    except OrderStateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    _ensure_vendor_written(result)
    return OrderWriteResponse(order=updated, ledger=result)


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    wait: bool = True,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Delete an order from the vendor ledger and its client mirror"""
    _require_order_manager(current_user)
    try:
        order = await service.order_for_actor(current_user, order_id)
    except OrderNotFound:
        raise _not_found()

    if not wait:
        service.ledger.submit(service.ledger.delete(order), f"delete of order {order_id}")
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"order_id": order_id, "accepted": True})

    result = await service.ledger.delete(order)
    _ensure_vendor_written(result)
    logger.info(f"Deleted order {order_id}")
    return {"message": "Order deleted successfully", "ledger": result.dict()}
