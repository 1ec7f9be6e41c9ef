from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from database.mongodb import Database
from config import get_settings
from routes import auth, profile, vendors, clients, products, orders, purchase_bills, reports, dashboard, admin
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for the app"""
    # Startup
    database = Database(settings.mongo_url, settings.db_name)
    await database.connect()
    await database.ensure_indexes()
    app.state.database = database
    logger.info("TradeLedger Backend started")
    yield
    # Shutdown
    await database.disconnect()
    logger.info("TradeLedger Backend stopped")


# Create FastAPI app
app = FastAPI(
    title="TradeLedger API",
    description="B2B ordering, invoicing and purchase tracking for vendors and their clients",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(vendors.router)
app.include_router(clients.router)
app.include_router(products.router)
app.include_router(orders.router)
app.include_router(purchase_bills.router)
app.include_router(reports.router)
app.include_router(dashboard.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    return {
        "message": "TradeLedger API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/api")
async def api_root():
    return {
        "message": "TradeLedger API",
        "endpoints": {
            "auth": "/api/auth",
            "orders": "/api/orders",
            "purchase_bills": "/api/purchase-bills",
            "reports": "/api/reports",
            "dashboard": "/api/dashboard"
        }
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
