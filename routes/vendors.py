"""Vendor directory and catalog browsing for clients"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.mongodb import get_database
from models.product import Product
from models.user import User
from services.auth_deps import get_current_user

router = APIRouter(prefix="/api/vendors", tags=["vendors"])


@router.get("")
async def list_vendors(
    current_user: User = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Public vendor directory"""
    cursor = db.vendors.find({}).sort("name", 1)
    return [
        {"vendor_id": doc["_id"], "name": doc.get("name"), "country": doc.get("country")}
        async for doc in cursor
    ]


@router.get("/{vendor_id}/products", response_model=List[Product], response_model_exclude={"cost_price"})
async def list_vendor_products(
    vendor_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """A vendor's catalog as seen by clients placing an order"""
    if not await db.vendors.find_one({"_id": vendor_id}):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")

    cursor = db.products.find({"vendor_id": vendor_id}).sort("name", 1)
    return [Product(**doc) async for doc in cursor]
