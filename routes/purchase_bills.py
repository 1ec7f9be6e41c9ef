"""Purchase Bill Routes for TradeLedger"""

from fastapi import APIRouter, Depends, HTTPException, status
from functools import lru_cache
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase
from config import Settings, get_settings
from database.mongodb import get_database
from models.purchase_bill import (
    BillScanRequest,
    PurchaseBill,
    PurchaseBillCreate,
    PurchaseBillResponse,
)
from models.user import User
from services.auth_deps import get_current_vendor
from services.ocr_service import OCRService
from services.purchase_service import PurchaseBillNotFound, PurchaseBillService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/purchase-bills", tags=["purchase-bills"])


def get_purchase_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
    settings: Settings = Depends(get_settings)
) -> PurchaseBillService:
    return PurchaseBillService(db, markup=settings.product_markup)


@lru_cache()
def get_ocr_service() -> OCRService:
    return OCRService(get_settings())


@router.get("", response_model=List[PurchaseBill])
async def list_purchase_bills(
    current_user: User = Depends(get_current_vendor),
    service: PurchaseBillService = Depends(get_purchase_service)
):
    return await service.list_bills(current_user.id)


@router.post("/scan")
async def scan_purchase_bill(
    request: BillScanRequest,
    current_user: User = Depends(get_current_vendor),
    ocr: OCRService = Depends(get_ocr_service)
):
    """
    Pre-fill a bill from a photo. Nothing is saved; on failure the client
    keeps its manual entry form.
    """
    result = await ocr.extract_bill_details(request.image_data_uri)
    if not result["success"]:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Could not read the bill: {result['error']}"
        )

    logger.info(f"Bill scanned for vendor {current_user.id}")
    return result["extracted_data"]


@router.get("/{bill_id}", response_model=PurchaseBill)
async def get_purchase_bill(
    bill_id: str,
    current_user: User = Depends(get_current_vendor),
    service: PurchaseBillService = Depends(get_purchase_service)
):
    try:
        return await service.get_bill(current_user.id, bill_id)
    except PurchaseBillNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase bill not found")


@router.post("", response_model=PurchaseBillResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase_bill(
    data: PurchaseBillCreate,
    current_user: User = Depends(get_current_vendor),
    service: PurchaseBillService = Depends(get_purchase_service)
):
    """Save a bill and sync its line items into the catalog"""
    bill, summary = await service.create_bill(current_user.id, data)
    return PurchaseBillResponse(bill=bill, product_sync=summary)


@router.put("/{bill_id}", response_model=PurchaseBill)
async def update_purchase_bill(
    bill_id: str,
    data: PurchaseBillCreate,
    current_user: User = Depends(get_current_vendor),
    service: PurchaseBillService = Depends(get_purchase_service)
):
    try:
        return await service.update_bill(current_user.id, bill_id, data)
    except PurchaseBillNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase bill not found")


@router.delete("/{bill_id}")
async def delete_purchase_bill(
    bill_id: str,
    current_user: User = Depends(get_current_vendor),
    service: PurchaseBillService = Depends(get_purchase_service)
):
    try:
        await service.delete_bill(current_user.id, bill_id)
    except PurchaseBillNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase bill not found")
    return {"message": "Purchase bill deleted successfully"}
