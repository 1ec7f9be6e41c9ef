"""
Admin Routes for TradeLedger
Accounts, signup tokens, vendor directory, usage analytics and all orders
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from config import Settings, get_settings
from database.mongodb import get_database
from models.order import Order, OrderStatus
from models.signup_token import SignupToken, SignupTokenCreate
from models.user import AccountStatusUpdate, User, UserRole
from services.account_service import AccountService
from services.analytics_service import AnalyticsService
from services.auth_deps import get_current_admin
from services.ledger_service import OrderLedger
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=List[User])
async def list_users(
    role: Optional[UserRole] = None,
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    query = {"role": role.value} if role else {}
    cursor = db.users.find(query).sort("created_at", -1)
    return [User.from_doc(doc) async for doc in cursor]


@router.put("/users/{user_id}/status")
async def set_user_status(
    user_id: str,
    data: AccountStatusUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Pause or reactivate an account; the remark is shown at the next login attempt"""
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own status")

    target = await db.users.find_one({"_id": user_id})
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if target.get("role") == UserRole.SUPER_ADMIN.value and current_user.role != UserRole.SUPER_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only a super-admin can change this account")

    await AccountService(db).set_account_status(user_id, data.status, data.status_remark)
    return {"user_id": user_id, "status": data.status, "status_remark": data.status_remark}


@router.post("/signup-tokens", response_model=SignupToken, status_code=status.HTTP_201_CREATED)
async def create_signup_token(
    data: SignupTokenCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database),
    settings: Settings = Depends(get_settings)
):
    if data.role == UserRole.CLIENT:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Clients register without a token")
    if data.role == UserRole.SUPER_ADMIN and current_user.role != UserRole.SUPER_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only a super-admin can invite super-admins")

    ttl = data.ttl_minutes or settings.signup_token_ttl_minutes
    return await AccountService(db).create_signup_token(current_user.id, data.role, ttl)


@router.get("/signup-tokens", response_model=List[SignupToken])
async def list_signup_tokens(
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    return await AccountService(db).list_signup_tokens()


@router.delete("/signup-tokens/{token}")
async def revoke_signup_token(
    token: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    if not await AccountService(db).revoke_signup_token(token):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Active token not found")
    return {"message": "Token revoked"}


@router.get("/vendors")
async def list_vendor_directory(
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    cursor = db.vendors.find({}).sort("name", 1)
    return [{"vendor_id": doc["_id"], **{k: v for k, v in doc.items() if k != "_id"}} async for doc in cursor]


@router.get("/analytics")
async def usage_analytics(
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    return await AnalyticsService(db).usage()


@router.get("/orders", response_model=List[Order])
async def list_all_orders(
    vendor_id: Optional[str] = None,
    status_filter: Optional[OrderStatus] = None,
    current_user: User = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Authoritative (vendor) copies across the platform"""
    return await OrderLedger(db).list_orders(owner_id=vendor_id, status=status_filter, vendor_copies_only=True)
