from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

from models.user import UserRole


class TokenStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    REVOKED = "revoked"
    EXPIRED = "expired"


class SignupTokenCreate(BaseModel):
    role: UserRole = UserRole.VENDOR
    ttl_minutes: Optional[int] = None


class SignupToken(BaseModel):
    token: str
    role: UserRole
    status: TokenStatus
    created_by: str
    created_at: datetime
    expires_at: datetime
    used_by: Optional[str] = None
    used_at: Optional[datetime] = None
