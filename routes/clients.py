"""Vendor-scoped client list"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.mongodb import get_database
from models.client import Client, ClientCreate, ClientUpdate
from models.user import User
from services.auth_deps import get_current_vendor
from services.order_service import new_adhoc_client_id
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[Client])
async def list_clients(
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    cursor = db.clients.find({"vendor_id": current_user.id}).sort("name", 1)
    return [Client(**doc) async for doc in cursor]


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Add an unregistered counterpart to the caller's client list"""
    now = datetime.utcnow()
    doc = {
        **data.dict(),
        "vendor_id": current_user.id,
        "client_id": new_adhoc_client_id(),
        "is_registered": False,
        "created_at": now,
        "updated_at": now,
    }
    await db.clients.insert_one(doc)
    logger.info(f"Client '{data.name}' created for vendor {current_user.id}")
    return Client(**doc)


@router.put("/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    fields = data.dict(exclude_unset=True)
    fields["updated_at"] = datetime.utcnow()

    result = await db.clients.update_one(
        {"vendor_id": current_user.id, "client_id": client_id},
        {"$set": fields}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    doc = await db.clients.find_one({"vendor_id": current_user.id, "client_id": client_id})
    return Client(**doc)


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    result = await db.clients.delete_one({"vendor_id": current_user.id, "client_id": client_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    logger.info(f"Deleted client {client_id}")
    return {"message": "Client deleted successfully"}
