"""Vendor catalog routes"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.mongodb import get_database
from models.product import Product, ProductCreate, ProductUpdate
from models.user import User
from services.auth_deps import get_current_vendor
import uuid
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[Product])
async def list_products(
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    cursor = db.products.find({"vendor_id": current_user.id}).sort("name", 1)
    return [Product(**doc) async for doc in cursor]


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Add a product to the caller's catalog"""
    if await db.products.find_one({"vendor_id": current_user.id, "sku": data.sku}):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A product with SKU {data.sku} already exists"
        )

    now = datetime.utcnow()
    product_id = uuid.uuid4().hex
    doc = {
        **data.dict(),
        "_id": product_id,
        "product_id": product_id,
        "vendor_id": current_user.id,
        "created_at": now,
        "updated_at": now,
    }
    await db.products.insert_one(doc)
    logger.info(f"Product {data.sku} created for vendor {current_user.id}")
    return Product(**doc)


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    fields = data.dict(exclude_unset=True)
    fields["updated_at"] = datetime.utcnow()

    result = await db.products.update_one(
        {"vendor_id": current_user.id, "product_id": product_id},
        {"$set": fields}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    doc = await db.products.find_one({"vendor_id": current_user.id, "product_id": product_id})
    return Product(**doc)


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    result = await db.products.delete_one({"vendor_id": current_user.id, "product_id": product_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    logger.info(f"Deleted product {product_id}")
    return {"message": "Product deleted successfully"}
