"""Purchase Bill Models for TradeLedger"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class BillSource(str, Enum):
    MANUAL = "manual"
    OCR = "ocr"


class BillLineItem(BaseModel):
    """Cost-side line captured from a supplier bill"""
    item_name: str = Field(..., min_length=1)
    unit: Optional[str] = None
    quantity: float = Field(default=1, gt=0)
    cost_per_unit: float = Field(default=0, ge=0)


class PurchaseBillCreate(BaseModel):
    vendor_name: str = Field(..., min_length=1)
    vendor_trn: Optional[str] = None
    vendor_address: Optional[str] = None
    vendor_phone: Optional[str] = None
    bill_date: datetime
    line_items: List[BillLineItem] = Field(..., min_length=1)
    vat_amount: float = Field(default=0, ge=0)
    source: BillSource = BillSource.MANUAL


class PurchaseBill(PurchaseBillCreate):
    bill_id: str
    vendor_id: str
    sub_total: float
    total_amount: float
    created_at: datetime
    updated_at: datetime


class ProductSyncSummary(BaseModel):
    """Catalog side effects of saving a bill"""
    updated: List[str] = []
    created: List[str] = []
    failed: List[str] = []


class PurchaseBillResponse(BaseModel):
    bill: PurchaseBill
    product_sync: ProductSyncSummary


class BillScanRequest(BaseModel):
    image_data_uri: str = Field(..., min_length=1)
