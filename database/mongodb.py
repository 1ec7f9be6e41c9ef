from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Database:
    """Holds one Motor client. Built by the app lifespan and kept on app.state."""

    def __init__(self, mongo_url: str, db_name: str):
        self.mongo_url = mongo_url
        self.db_name = db_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """Connect to MongoDB"""
        try:
            self.client = AsyncIOMotorClient(self.mongo_url)
            self.db = self.client[self.db_name]
            # Verify connection
            await self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB database: {self.db_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def ensure_indexes(self):
        """Create the indexes the ledger and catalog queries rely on"""
        db = self.get_db()
        await db.orders.create_index([("ledger_owner_id", 1), ("order_id", 1)], unique=True)
        await db.orders.create_index([("vendor_id", 1), ("created_at", -1)])
        await db.products.create_index([("vendor_id", 1), ("product_id", 1)], unique=True)
        await db.clients.create_index([("vendor_id", 1), ("client_id", 1)], unique=True)
        await db.purchase_bills.create_index([("vendor_id", 1), ("bill_date", -1)])
        await db.users.create_index("email", unique=True)
        logger.info("MongoDB indexes ensured")

    async def disconnect(self):
        """Disconnect from MongoDB"""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_db(self) -> AsyncIOMotorDatabase:
        """Get database instance"""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db


async def get_database(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.database.get_db()
