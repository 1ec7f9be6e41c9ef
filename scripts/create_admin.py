"""
Bootstrap Script: first super-admin account

Admins are normally invited with signup tokens, which an admin must create.
This script creates the first super-admin directly in the database.

Run with: python scripts/create_admin.py --email admin@example.com --name "Ops" --password secret
"""

import argparse
import asyncio
import os
import sys
import uuid
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

load_dotenv()

from config import get_settings
from models.user import AccountStatus, InvoiceSettings, UserRole
from services.auth_service import get_password_hash


async def create_admin(email: str, name: str, password: str) -> int:
    settings = get_settings()
    client = AsyncIOMotorClient(settings.mongo_url)
    db = client[settings.db_name]

    print(f"\nConnected to: {settings.mongo_url}/{settings.db_name}")

    try:
        if await db.users.find_one({"email": email}):
            print(f"⚠️  {email} is already registered")
            return 1

        await db.users.insert_one({
            "_id": uuid.uuid4().hex,
            "email": email,
            "name": name,
            "hashed_password": get_password_hash(password),
            "role": UserRole.SUPER_ADMIN.value,
            "status": AccountStatus.ACTIVE.value,
            "status_remark": None,
            "invoice_settings": InvoiceSettings().dict(),
            "created_at": datetime.utcnow(),
        })
        print(f"✅ Super-admin {email} created")
        return 0
    finally:
        client.close()


def main():
    parser = argparse.ArgumentParser(description="Create the first super-admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args()

    sys.exit(asyncio.run(create_admin(args.email, args.name, args.password)))


if __name__ == "__main__":
    main()
