# api/v1_router.py

from fastapi import APIRouter

from .v1.snapshot import router as snapshot_router
from .v1.insights import router as insights_router
from .v1.actions import router as actions_router

router = APIRouter(prefix="/v1")

router.include_router(snapshot_router)
router.include_router(insights_router)
router.include_router(actions_router)
