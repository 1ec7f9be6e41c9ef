"""Vendor-scoped client records"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class PaymentTerms(str, Enum):
    NET_30 = "Net 30"
    COD = "COD"


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1)
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    delivery_address: Optional[str] = None
    trn: Optional[str] = None
    credit_limit: float = Field(default=0, ge=0)
    default_payment_terms: PaymentTerms = PaymentTerms.COD


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    delivery_address: Optional[str] = None
    trn: Optional[str] = None
    credit_limit: Optional[float] = Field(default=None, ge=0)
    default_payment_terms: Optional[PaymentTerms] = None


class Client(ClientBase):
    client_id: str
    vendor_id: str
    is_registered: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
