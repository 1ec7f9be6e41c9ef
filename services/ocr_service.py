"""
OCR Service for TradeLedger
Reads supplier purchase bills with an OpenAI-compatible vision model
"""

import json
import logging
import re
from datetime import date, datetime
from typing import Optional, Dict, Any, List

from openai import AsyncOpenAI

from config import Settings

logger = logging.getLogger(__name__)

PURCHASE_BILL_PROMPT = """You are an expert accountant specializing in data entry. Analyze this image of a purchase bill and extract vendor details, dates, taxes and individual line items.

IMPORTANT: Respond ONLY with valid JSON, no text before or after.

CRITICAL RULES FOR NUMBERS:
- Spaces or commas may be thousands separators (e.g., "6 344.60" = 6344.6, "6,344.60" = 6344.6)
- Decimal point is always "."
- Quantities and prices are numbers, never strings

Expected JSON structure:
{
    "vendorName": "Name of the vendor or supplier",
    "vendorTrn": "Vendor tax registration number or null",
    "vendorAddress": "Vendor address or null",
    "billDate": "YYYY-MM-DD",
    "subTotal": number or null,
    "vatAmount": number or null,
    "totalAmount": number,
    "lineItems": [
        {
            "itemName": "Name or description of the item",
            "quantity": number,
            "costPerUnit": number,
            "unit": "kg, box, etc. or null"
        }
    ]
}

If information is not found, use null.

Analyze the image now:"""

SCANNED_ITEM_NAME = "Scanned bill total"


class OCRService:
    """Service for extracting purchase bill details with a vision model"""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.ocr_model
        self.client = client or AsyncOpenAI(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            timeout=settings.ocr_timeout_seconds,
        )

    def _clean_json_response(self, response: str) -> str:
        """Clean the response to extract valid JSON"""
        # Remove markdown code blocks if present
        response = re.sub(r'```json\s*', '', response)
        response = re.sub(r'```\s*', '', response)
        response = response.strip()

        start = response.find('{')
        end = response.rfind('}')

        if start != -1 and end != -1:
            return response[start:end+1]

        return response

    async def extract_bill_details(self, image_data_uri: str) -> Dict[str, Any]:
        """
        Extract a purchase bill from an image

        Args:
            image_data_uri: 'data:<mimetype>;base64,<data>' (bare base64 is treated as JPEG)

        Returns:
            Dictionary with success flag, raw_text and extracted_data
        """
        try:
            if not image_data_uri.startswith('data:'):
                image_url = f"data:image/jpeg;base64,{image_data_uri}"
            else:
                image_url = image_data_uri

            logger.info("Analyzing purchase bill with vision model")

            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": PURCHASE_BILL_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_url, "detail": "high"}},
                        ]
                    }
                ],
                max_tokens=4096
            )

            raw_response = response.choices[0].message.content or ""
            logger.info(f"OCR Response received: {len(raw_response)} characters")

            try:
                extracted = json.loads(self._clean_json_response(raw_response))
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to parse JSON: {e}")
                extracted = {}

            return {
                "success": True,
                "raw_text": raw_response,
                "extracted_data": self.normalize_bill(extracted),
            }

        except Exception as e:
            logger.error(f"OCR analysis failed: {str(e)}")
            return {
                "success": False,
                "error": str(e),
                "raw_text": None,
                "extracted_data": None,
            }

    def normalize_bill(self, data: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
        """
        Map model output onto the bill form, tolerating missing fields.

        An absent or unparsable date becomes today; absent line items become
        one synthetic line carrying the bill total.
        """
        if not isinstance(data, dict):
            data = {}
        today = today or datetime.utcnow().date()

        total_amount = self._safe_float(data.get("totalAmount")) or 0.0
        line_items = self._normalize_line_items(data.get("lineItems"))
        if not line_items:
            line_items = [{
                "item_name": SCANNED_ITEM_NAME,
                "quantity": 1.0,
                "cost_per_unit": total_amount,
                "unit": None,
            }]

        return {
            "vendor_name": (data.get("vendorName") or "").strip() or "Unknown vendor",
            "vendor_trn": data.get("vendorTrn"),
            "vendor_address": data.get("vendorAddress"),
            "bill_date": self._safe_date(data.get("billDate"), today).isoformat(),
            "sub_total": self._safe_float(data.get("subTotal")),
            "vat_amount": self._safe_float(data.get("vatAmount")),
            "total_amount": total_amount,
            "line_items": line_items,
        }

    def _normalize_line_items(self, items: Any) -> List[Dict[str, Any]]:
        if not isinstance(items, list):
            return []
        normalized = []
        for item in items:
            if not isinstance(item, dict):
                continue
            name = (item.get("itemName") or "").strip()
            if not name:
                continue
            quantity = self._safe_float(item.get("quantity"))
            normalized.append({
                "item_name": name,
                "quantity": quantity if quantity and quantity > 0 else 1.0,
                "cost_per_unit": self._safe_float(item.get("costPerUnit")) or 0.0,
                "unit": item.get("unit"),
            })
        return normalized

    def _safe_date(self, value, default: date) -> date:
        if not value or not isinstance(value, str):
            return default
        try:
            return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
        except ValueError:
            return default

    def _safe_float(self, value) -> Optional[float]:
        """Safely convert value to float"""
        if value is None:
            return None
        if isinstance(value, str):
            value = value.replace(",", "").replace(" ", "")
        try:
            return float(value)
        except (ValueError, TypeError):
            return None
