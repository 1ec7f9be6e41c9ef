"""Catalog Models for TradeLedger"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

PRODUCT_UNITS = [
    "KG", "Box", "Crate", "Piece", "PCS", "TRAY", "CTN", "TIN",
    "PKT", "BKT", "Gram", "Liter", "ML", "Dozen",
]


class ProductBase(BaseModel):
    sku: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    unit: str = "PCS"
    price: float = Field(..., ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0)
    barcode: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0)
    barcode: Optional[str] = None


class Product(ProductBase):
    product_id: str
    vendor_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
