# zeno_backend/app.py (Zeno Backend: Insight Pipeline API)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends

from . import config
from .api.dependencies import verify_api_key
from .api.v1_router import router as v1_router
from .db.database import engine

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# --- Application Lifespan Context (Async DB) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: insight pipeline ready")
    yield
    # Release pooled connections on shutdown
    await engine.dispose()
    logger.info("Application shutdown: database engine disposed")


app = FastAPI(
    title="Zeno Backend",
    description="Personal finance snapshots, rule-based insights and recommended actions.",
    version="1.0.0",
    lifespan=lifespan,
)


# Root Endpoint (basic health check)
@app.get("/", tags=["Health"])
def read_root():
    return {"message": "Zeno backend is running. Access endpoints at /api/v1/..."}


# -----------------------------------------------------------
# ROUTER REGISTRATION
# -----------------------------------------------------------
# All API routes require the X-API-Key header; the health check does not
app.include_router(v1_router, prefix="/api", dependencies=[Depends(verify_api_key)])
