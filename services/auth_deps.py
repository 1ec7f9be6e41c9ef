"""
Auth dependencies for TradeLedger
Contains shared authentication and role-gate dependencies to avoid circular imports
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from database.mongodb import get_database
from models.user import User, UserRole, AccountStatus
from services.auth_service import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


class RoleCapabilities(BaseModel):
    owns_ledger: bool = False        # vendor-scoped clients/products/orders/bills
    places_orders: bool = False      # client checkout
    manages_all_orders: bool = False # status override on any vendor's orders
    administers: bool = False        # accounts, tokens, analytics


def capabilities_for(role: UserRole) -> RoleCapabilities:
    """Every role is matched explicitly; an unknown role is a programming error."""
    if role == UserRole.VENDOR:
        return RoleCapabilities(owns_ledger=True)
    if role == UserRole.CLIENT:
        return RoleCapabilities(places_orders=True)
    if role == UserRole.ADMIN:
        return RoleCapabilities(manages_all_orders=True, administers=True)
    if role == UserRole.SUPER_ADMIN:
        return RoleCapabilities(manages_all_orders=True, administers=True)
    raise ValueError(f"Unhandled role: {role!r}")


def paused_account_exception(remark) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=remark or "This account has been paused. Please contact support.",
    )


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> User:
    """Get current authenticated user from token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id: str = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    user_doc = await db.users.find_one({"_id": user_id})
    if user_doc is None:
        raise credentials_exception

    user = User.from_doc(user_doc)
    if user.status == AccountStatus.PAUSED:
        raise paused_account_exception(user.status_remark)
    return user


def require_capability(capability: str):
    """Dependency factory: the caller's role must grant `capability`"""

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if not getattr(capabilities_for(current_user.role), capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role.value}' is not allowed to perform this action"
            )
        return current_user

    return checker


get_current_vendor = require_capability("owns_ledger")
get_current_client = require_capability("places_orders")
get_current_admin = require_capability("administers")
