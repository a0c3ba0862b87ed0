from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.routers import reconcile_router
from backend.core.config import settings
from backend.core.db import init_db
from backend.core.reconcile import init_reconcile

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    # Startup
    try:
        init_db()
    except Exception as e:
        logger.warning(f"Failed to initialize database: {e}")

    # Pattern load failures are handled inside; memory just starts empty
    init_reconcile()

    yield  # Application runs here


app = FastAPI(title="Asset Reconciliation Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reconcile_router)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "version": "1.0.0"}
