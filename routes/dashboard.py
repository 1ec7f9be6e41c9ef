"""Vendor dashboard figures"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from database.mongodb import get_database
from models.user import User
from services.auth_deps import get_current_vendor
from services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Revenue, purchases and profit for a date range (default: the last month)"""
    try:
        return await DashboardService(db).summary(current_user.id, date_from, date_to)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
