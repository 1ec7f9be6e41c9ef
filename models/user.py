from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    VENDOR = "vendor"
    CLIENT = "client"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class InvoiceLayout(str, Enum):
    STANDARD = "standard"
    COMPACT = "compact"
    RECEIPT = "receipt"


class InvoiceSettings(BaseModel):
    """Vendor branding applied to invoices"""
    prefix: str = "INV-"
    notes: Optional[str] = None
    layout: InvoiceLayout = InvoiceLayout.STANDARD


class UserBase(BaseModel):
    email: EmailStr
    name: str


class CompanyDetails(BaseModel):
    company_name: Optional[str] = None
    trn: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    billing_address: Optional[str] = None
    website: Optional[str] = None


class VendorSignup(UserBase, CompanyDetails):
    password: str = Field(..., min_length=6)
    token: str = Field(..., min_length=1)
    country: Optional[str] = None


class ClientSignup(UserBase, CompanyDetails):
    password: str = Field(..., min_length=6)
    vendor_id: Optional[str] = None


class ProfileUpdate(CompanyDetails):
    name: Optional[str] = None
    country: Optional[str] = None
    vendor_id: Optional[str] = None
    invoice_settings: Optional[InvoiceSettings] = None


class User(UserBase, CompanyDetails):
    id: str
    role: UserRole
    created_at: datetime
    country: Optional[str] = None
    vendor_id: Optional[str] = None
    status: AccountStatus = AccountStatus.ACTIVE
    status_remark: Optional[str] = None
    invoice_settings: InvoiceSettings = Field(default_factory=InvoiceSettings)

    @classmethod
    def from_doc(cls, doc: dict) -> "User":
        return cls(
            id=doc["_id"],
            email=doc["email"],
            name=doc["name"],
            role=doc["role"],
            created_at=doc["created_at"],
            country=doc.get("country"),
            vendor_id=doc.get("vendor_id"),
            status=doc.get("status") or AccountStatus.ACTIVE,
            status_remark=doc.get("status_remark"),
            invoice_settings=InvoiceSettings(**(doc.get("invoice_settings") or {})),
            company_name=doc.get("company_name"),
            trn=doc.get("trn"),
            phone=doc.get("phone"),
            address=doc.get("address"),
            billing_address=doc.get("billing_address"),
            website=doc.get("website"),
        )


class AccountStatusUpdate(BaseModel):
    status: AccountStatus
    status_remark: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
