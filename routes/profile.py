"""Profile and invoice branding for the signed-in account"""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.mongodb import get_database
from models.country import COUNTRIES
from models.user import User, UserRole, ProfileUpdate
from services.auth_deps import get_current_user
from services.account_service import AccountService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.put("", response_model=User)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Update company details, country and invoice settings"""
    fields = data.dict(exclude_unset=True)

    if "country" in fields and fields["country"]:
        fields["country"] = fields["country"].upper()
        if fields["country"] not in COUNTRIES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported country: {fields['country']}"
            )

    if not fields:
        return current_user

    await db.users.update_one({"_id": current_user.id}, {"$set": fields})
    user_doc = await db.users.find_one({"_id": current_user.id})

    if current_user.role == UserRole.VENDOR:
        await AccountService(db).publish_vendor(user_doc)

    logger.info(f"Profile updated for {current_user.id}: {sorted(fields)}")
    return User.from_doc(user_doc)
