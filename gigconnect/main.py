"""
GigConnect - Payment Relay Server

FastAPI app with:
- Paystack initialize / verify / confirm endpoints
- MongoDB key-value store (local data)
- PostgreSQL mirror (remote data, optional)

Run: uvicorn gigconnect.main:app --port 4242
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gigconnect.api import api_router
from gigconnect.core.config import get_settings
from gigconnect.db.mongodb import test_mongo_connection
from gigconnect.db.postgres import create_tables, get_engine, test_postgres_connection
from gigconnect.schemas.schemas import StatusResponse
from gigconnect.services.paystack_client import get_paystack_client
from gigconnect.services.storage_service import get_storage_service
from gigconnect.services.sync_service import get_sync_service

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="GigConnect Paystack Server",
    description="""
    Payment relay for the GigConnect freelance marketplace.

    ## Endpoints
    - **POST /paystack/initialize**: start a checkout
    - **GET /paystack/verify/{reference}**: look up a transaction
    - **POST /paystack/confirm**: mark a job paid and write the ledger rows
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    """Seed the local store, create mirror tables and hydrate from them."""
    if not get_paystack_client().is_configured():
        logger.warning("PAYSTACK_SECRET_KEY is not set. Paystack routes will fail until configured.")

    engine = get_engine()
    if engine is None:
        logger.warning("POSTGRES_HOST is not set. Payment confirmations will not update the database.")

    try:
        storage = get_storage_service()
        storage.seed_data(remote_enabled=engine is not None, force_local=settings.seed_local)
    except Exception as e:
        logger.error("Local store seeding failed: %s", e)

    if engine is not None:
        try:
            create_tables(engine)
            get_sync_service().hydrate()
        except Exception as e:
            logger.error("Remote mirror initialization failed: %s", e)


@app.on_event("shutdown")
async def shutdown_event():
    sync = get_sync_service()
    sync.flush()
    sync.shutdown()


@app.get("/", response_model=StatusResponse, tags=["Health"])
async def root():
    return {"status": "GigConnect Paystack server running"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Store and mirror connectivity."""
    if settings.remote_sync_enabled:
        postgres_status = "connected" if test_postgres_connection() else "disconnected"
    else:
        postgres_status = "disabled"
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
        "postgres": postgres_status,
        "paystack": "configured" if get_paystack_client().is_configured() else "not configured",
    }
