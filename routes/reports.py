"""CSV report downloads"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.mongodb import get_database
from models.user import User
from services.auth_deps import get_current_vendor
from services.ledger_service import OrderLedger
from services.purchase_service import PurchaseBillService
from services import report_service

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": report_service.content_disposition(filename)},
    )


@router.get("/sales.csv")
async def sales_csv(
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    orders = await OrderLedger(db).list_orders(owner_id=current_user.id, vendor_copies_only=True)
    return _csv_response(report_service.sales_report(orders), report_service.report_filename("sales"))


@router.get("/purchases.csv")
async def purchases_csv(
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    bills = await PurchaseBillService(db).list_bills(current_user.id)
    return _csv_response(report_service.purchases_report(bills), report_service.report_filename("purchases"))


@router.get("/client-pnl.csv")
async def client_pnl_csv(
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    orders = await OrderLedger(db).list_orders(owner_id=current_user.id, vendor_copies_only=True)
    return _csv_response(report_service.client_pnl_report(orders), report_service.report_filename("client_pnl"))


@router.get("/clients/{client_id}.csv")
async def client_csv(
    client_id: str,
    current_user: User = Depends(get_current_vendor),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    client = await db.clients.find_one({"vendor_id": current_user.id, "client_id": client_id})
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    orders = await OrderLedger(db).list_orders(owner_id=current_user.id, vendor_copies_only=True)
    filename = report_service.report_filename("client", subject=client["name"])
    return _csv_response(report_service.client_report(orders, client_id), filename)
