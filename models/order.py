"""Order Models for TradeLedger"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    AWAITING_PRICING = "Awaiting Pricing"
    PRICED = "Priced"
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    INVOICED = "Invoiced"
    PAID = "Paid"
    OVERDUE = "Overdue"


class InvoiceType(str, Enum):
    NORMAL = "Normal"
    VAT = "VAT"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CARD = "Card"
    BANK_TRANSFER = "Bank Transfer"
    CREDIT = "Credit"


class LineItem(BaseModel):
    """Snapshot of one ordered item; never a live catalog reference"""
    product_id: Optional[str] = None  # None for ad hoc items
    product_name: str
    unit: str = "Unit"
    quantity: float = Field(..., gt=0)
    unit_price: Optional[float] = None
    total: Optional[float] = None


class CartItem(BaseModel):
    product_id: str
    quantity: float


class PlaceOrderRequest(BaseModel):
    """Client checkout"""
    vendor_id: str = ""
    items: List[CartItem] = []
    special_items: List[str] = []
    delivery_date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None


class ManualLineItem(BaseModel):
    product_id: Optional[str] = None
    product_name: str
    unit: str = "Unit"
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)


class ManualOrderCreate(BaseModel):
    """Vendor-issued invoice, priced at creation"""
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    line_items: List[ManualLineItem] = Field(..., min_length=1)
    invoice_type: InvoiceType = InvoiceType.NORMAL
    payment_method: PaymentMethod = PaymentMethod.CASH
    order_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None


class PriceOrderRequest(BaseModel):
    unit_prices: List[float] = Field(..., min_length=1)
    invoice_type: InvoiceType = InvoiceType.NORMAL


class StatusUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None


class Order(BaseModel):
    order_id: str
    invoice_code: Optional[str] = None
    vendor_id: str
    client_id: str
    client_name: str
    line_items: List[LineItem] = []
    sub_total: float = 0.0
    vat_amount: float = 0.0
    total_amount: float = 0.0
    status: OrderStatus
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    invoice_type: InvoiceType = InvoiceType.NORMAL
    payment_method: Optional[PaymentMethod] = None
    created_at: datetime
    order_date: datetime
    delivery_date: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "Order":
        return cls(**{k: v for k, v in doc.items() if k not in ("_id", "ledger_owner_id")})


class LedgerWriteResult(BaseModel):
    """Outcome of a best-effort vendor + client ledger write"""
    order_id: str
    vendor_written: bool = False
    mirror_attempted: bool = False
    mirror_written: bool = False
    errors: List[str] = []

    @property
    def partial(self) -> bool:
        return self.mirror_attempted and self.vendor_written != self.mirror_written


class OrderWriteResponse(BaseModel):
    order: Optional[Order] = None
    ledger: LedgerWriteResult
