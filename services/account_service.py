"""
Account lifecycle: invite-gated signup tokens, registration and the
paused-account gate applied at login.
"""

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from models.signup_token import SignupToken, TokenStatus
from models.user import AccountStatus, InvoiceSettings, UserRole
from services.auth_service import get_password_hash

logger = logging.getLogger(__name__)


class SignupTokenInvalid(ValueError):
    pass


class EmailAlreadyRegistered(ValueError):
    pass


class AccountPaused(PermissionError):
    def __init__(self, remark: Optional[str]):
        super().__init__(remark or "This account has been paused")
        self.remark = remark


def generate_account_id() -> str:
    return uuid.uuid4().hex


def effective_token_status(doc: Dict[str, Any], now: Optional[datetime] = None) -> TokenStatus:
    """An active token past its expiry reads as expired"""
    now = now or datetime.utcnow()
    status = TokenStatus(doc.get("status", TokenStatus.ACTIVE.value))
    if status == TokenStatus.ACTIVE and (not doc.get("expires_at") or doc["expires_at"] <= now):
        return TokenStatus.EXPIRED
    return status


def check_login_allowed(user_doc: Dict[str, Any]) -> None:
    if user_doc.get("status") == AccountStatus.PAUSED.value:
        raise AccountPaused(user_doc.get("status_remark"))


class AccountService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    # ============== SIGNUP TOKENS ==============

    async def create_signup_token(self, admin_id: str, role: UserRole, ttl_minutes: int) -> SignupToken:
        now = datetime.utcnow()
        doc = {
            "_id": secrets.token_urlsafe(24),
            "role": role.value,
            "status": TokenStatus.ACTIVE.value,
            "created_by": admin_id,
            "created_at": now,
            "expires_at": now + timedelta(minutes=ttl_minutes),
            "used_by": None,
            "used_at": None,
        }
        await self.db.signup_tokens.insert_one(doc)
        logger.info(f"Signup token for role {role.value} created by {admin_id}")
        return self._token(doc)

    async def list_signup_tokens(self) -> List[SignupToken]:
        cursor = self.db.signup_tokens.find({}).sort("created_at", -1)
        return [self._token(doc) async for doc in cursor]

    async def revoke_signup_token(self, token: str) -> bool:
        result = await self.db.signup_tokens.update_one(
            {"_id": token, "status": TokenStatus.ACTIVE.value},
            {"$set": {"status": TokenStatus.REVOKED.value}},
        )
        return result.matched_count > 0

    def _token(self, doc: Dict[str, Any]) -> SignupToken:
        return SignupToken(
            token=doc["_id"],
            role=doc["role"],
            status=effective_token_status(doc),
            created_by=doc["created_by"],
            created_at=doc["created_at"],
            expires_at=doc["expires_at"],
            used_by=doc.get("used_by"),
            used_at=doc.get("used_at"),
        )

    # ============== REGISTRATION ==============

    async def _ensure_email_free(self, email: str) -> None:
        if await self.db.users.find_one({"email": email}):
            raise EmailAlreadyRegistered(email)

    def _user_doc(self, data, role: UserRole, country: Optional[str]) -> Dict[str, Any]:
        return {
            "_id": generate_account_id(),
            "email": data.email,
            "name": data.name,
            "hashed_password": get_password_hash(data.password),
            "role": role.value,
            "company_name": data.company_name,
            "trn": data.trn,
            "phone": data.phone,
            "address": data.address,
            "billing_address": data.billing_address,
            "website": data.website,
            "country": country,
            "status": AccountStatus.ACTIVE.value,
            "status_remark": None,
            "invoice_settings": InvoiceSettings().dict(),
            "created_at": datetime.utcnow(),
        }

    async def register_with_token(self, data, default_country: str) -> Dict[str, Any]:
        """Vendor/admin signup gated by a one-time token"""
        token_doc = await self.db.signup_tokens.find_one({"_id": data.token})
        if not token_doc or effective_token_status(token_doc) != TokenStatus.ACTIVE:
            raise SignupTokenInvalid("This signup token is invalid or has already been used.")

        await self._ensure_email_free(data.email)
        role = UserRole(token_doc["role"])
        user_doc = self._user_doc(data, role, (data.country or default_country).upper())

        # Claim the token first so it cannot be spent twice
        claimed = await self.db.signup_tokens.update_one(
            {"_id": data.token, "status": TokenStatus.ACTIVE.value},
            {"$set": {"status": TokenStatus.USED.value, "used_by": user_doc["_id"], "used_at": datetime.utcnow()}},
        )
        if claimed.matched_count == 0:
            raise SignupTokenInvalid("This signup token is invalid or has already been used.")

        try:
            await self.db.users.insert_one(user_doc)
        except DuplicateKeyError:
            # lost a race on the email; give the token back
            await self.db.signup_tokens.update_one(
                {"_id": data.token, "used_by": user_doc["_id"]},
                {"$set": {"status": TokenStatus.ACTIVE.value, "used_by": None, "used_at": None}},
            )
            raise EmailAlreadyRegistered(data.email)

        if role == UserRole.VENDOR:
            await self.publish_vendor(user_doc)
        logger.info(f"New {role.value} account created: {data.email}")
        return user_doc

    async def register_client(self, data) -> Dict[str, Any]:
        await self._ensure_email_free(data.email)
        user_doc = self._user_doc(data, UserRole.CLIENT, None)
        user_doc["vendor_id"] = data.vendor_id
        try:
            await self.db.users.insert_one(user_doc)
        except DuplicateKeyError:
            raise EmailAlreadyRegistered(data.email)
        logger.info(f"New client account created: {data.email}")
        return user_doc

    async def publish_vendor(self, user_doc: Dict[str, Any]) -> None:
        """Keep the public vendor directory in step with the vendor profile"""
        await self.db.vendors.replace_one(
            {"_id": user_doc["_id"]},
            {
                "_id": user_doc["_id"],
                "name": user_doc.get("company_name") or user_doc["name"],
                "email": user_doc["email"],
                "country": user_doc.get("country"),
            },
            upsert=True,
        )

    # ============== ACCOUNT STATUS ==============

    async def set_account_status(self, user_id: str, status: AccountStatus, remark: Optional[str]) -> bool:
        result = await self.db.users.update_one(
            {"_id": user_id},
            {"$set": {"status": status.value, "status_remark": remark}},
        )
        if result.matched_count:
            logger.info(f"Account {user_id} set to {status.value}")
        return result.matched_count > 0
