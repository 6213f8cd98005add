"""
TexOps Backend: stock reconciliation and fulfillment for a textile workshop.

ARCHITECTURE:
- Capture: photographed invoices / shelves read by a Groq vision model
- Services: reconciliation, order planning, fulfillment, snapshots
- EntityStore: owns inventory, invoices and orders; persists each as one
  JSON document in the kv_store table

Extractor output is never trusted: it is normalized at the capture
boundary and invoices are reviewed before they touch stock.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from texops.api.routes import analytics, backup, capture, inventory, invoices, orders
from texops.core.config import settings
from texops.db.init_db import init_db
from texops.db.session import SessionLocal
from texops.services.entity_store import EntityStore
from texops.services.storage import SqlAlchemyStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
    1. Initialize database tables
    2. Load the three collections into the store
    """
    logger.info("[*] Initializing database...")
    init_db()
    app.state.store = EntityStore(SqlAlchemyStorage(SessionLocal)).load()
    logger.info("[OK] Store loaded")

    yield


app = FastAPI(
    title="TexOps API",
    description="Stock, purchase ledger and order fulfillment from photographed documents.",
    version="0.1.0",
    lifespan=lifespan,
)

# Restrict CORS to specific origins, methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
    ],
    max_age=600,  # Cache preflight for 10 minutes
    expose_headers=["Content-Type", "Content-Disposition"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"  # Prevent MIME sniffing
    response.headers["X-Frame-Options"] = "DENY"  # Prevent clickjacking
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(capture.router, prefix="/capture", tags=["capture"])
app.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
app.include_router(orders.router, prefix="/orders", tags=["orders"])
app.include_router(backup.router, prefix="/backup", tags=["backup"])
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])


@app.get("/health")
def health():
    return {"status": "ok"}
