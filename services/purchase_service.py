"""
Purchase bills and their catalog side effects.

Saving a new bill resolves each line against the vendor's products by
case-insensitive exact name:
- match: the product's cost price becomes the bill's unit cost (last write wins)
- no match: a product is created with a synthesized SKU and a marked-up price

Product writes are independent of the bill write. A failed product write is
logged and reported in the sync summary; the bill stays saved.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from models.purchase_bill import (
    BillLineItem,
    ProductSyncSummary,
    PurchaseBill,
    PurchaseBillCreate,
)

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_UNIT = "PCS"
DEFAULT_MARKUP = 1.3


class PurchaseBillNotFound(LookupError):
    pass


def synthesize_sku(item_name: str, sequence: int) -> str:
    """SKU-<first 3 letters upper>-<sequence padded to 3>"""
    return f"SKU-{item_name.strip()[:3].upper()}-{str(sequence).zfill(3)}"


def bill_totals(line_items: List[BillLineItem], vat_amount: float = 0) -> Dict[str, float]:
    sub_total = round(sum(item.quantity * item.cost_per_unit for item in line_items), 2)
    vat_amount = round(vat_amount or 0, 2)
    return {
        "sub_total": sub_total,
        "vat_amount": vat_amount,
        "total_amount": round(sub_total + vat_amount, 2),
    }


class PurchaseBillService:
    def __init__(self, db: AsyncIOMotorDatabase, markup: float = DEFAULT_MARKUP):
        self.db = db
        self.markup = markup

    async def list_bills(self, vendor_id: str) -> List[PurchaseBill]:
        cursor = self.db.purchase_bills.find({"vendor_id": vendor_id}).sort("bill_date", -1)
        return [PurchaseBill(**doc) async for doc in cursor]

    async def get_bill(self, vendor_id: str, bill_id: str) -> PurchaseBill:
        doc = await self.db.purchase_bills.find_one({"_id": bill_id, "vendor_id": vendor_id})
        if not doc:
            raise PurchaseBillNotFound(bill_id)
        return PurchaseBill(**doc)

    async def create_bill(self, vendor_id: str, data: PurchaseBillCreate):
        """Save a bill, then sync its lines into the catalog"""
        now = datetime.utcnow()
        bill_id = uuid.uuid4().hex
        doc = {
            **data.dict(),
            **bill_totals(data.line_items, data.vat_amount),
            "_id": bill_id,
            "bill_id": bill_id,
            "vendor_id": vendor_id,
            "created_at": now,
            "updated_at": now,
        }
        await self.db.purchase_bills.insert_one(doc)
        logger.info(f"Purchase bill {bill_id} from '{data.vendor_name}' saved for vendor {vendor_id}")

        summary = await self.sync_products(vendor_id, data.line_items)
        return PurchaseBill(**doc), summary

    async def update_bill(self, vendor_id: str, bill_id: str, data: PurchaseBillCreate) -> PurchaseBill:
        """Edits replace the bill body; the catalog is not re-synced"""
        existing = await self.get_bill(vendor_id, bill_id)
        fields = {
            **data.dict(),
            **bill_totals(data.line_items, data.vat_amount),
            "updated_at": datetime.utcnow(),
        }
        await self.db.purchase_bills.update_one({"_id": bill_id, "vendor_id": vendor_id}, {"$set": fields})
        return existing.copy(update={**fields, "line_items": data.line_items})

    async def delete_bill(self, vendor_id: str, bill_id: str) -> None:
        result = await self.db.purchase_bills.delete_one({"_id": bill_id, "vendor_id": vendor_id})
        if result.deleted_count == 0:
            raise PurchaseBillNotFound(bill_id)
        logger.info(f"Deleted purchase bill {bill_id}")

    async def sync_products(self, vendor_id: str, line_items: List[BillLineItem]) -> ProductSyncSummary:
        summary = ProductSyncSummary()

        products = [doc async for doc in self.db.products.find({"vendor_id": vendor_id})]
        by_name: Dict[str, dict] = {(p.get("name") or "").lower(): p for p in products}
        product_count = len(products)

        for item in line_items:
            key = item.item_name.strip().lower()
            match: Optional[dict] = by_name.get(key)
            try:
                if match:
                    await self.db.products.update_one(
                        {"vendor_id": vendor_id, "product_id": match["product_id"]},
                        {"$set": {"cost_price": item.cost_per_unit, "updated_at": datetime.utcnow()}},
                    )
                    match["cost_price"] = item.cost_per_unit
                    summary.updated.append(match["name"])
                else:
                    product_count += 1
                    product = self._new_product(vendor_id, item, product_count)
                    await self.db.products.insert_one(product)
                    by_name[key] = product
                    summary.created.append(product["name"])
            except Exception as e:
                logger.error(f"Product sync failed for '{item.item_name}' (vendor {vendor_id}): {e}")
                summary.failed.append(item.item_name)

        logger.info(
            f"Catalog sync for vendor {vendor_id}: {len(summary.updated)} updated, "
            f"{len(summary.created)} created, {len(summary.failed)} failed"
        )
        return summary

    def _new_product(self, vendor_id: str, item: BillLineItem, sequence: int) -> dict:
        now = datetime.utcnow()
        product_id = uuid.uuid4().hex
        return {
            "_id": product_id,
            "product_id": product_id,
            "vendor_id": vendor_id,
            "sku": synthesize_sku(item.item_name, sequence),
            "name": item.item_name.strip(),
            "unit": item.unit or DEFAULT_PRODUCT_UNIT,
            "cost_price": item.cost_per_unit,
            "price": round(item.cost_per_unit * self.markup, 2),
            "barcode": None,
            "created_at": now,
            "updated_at": now,
        }
