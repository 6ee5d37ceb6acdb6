"""API router that aggregates all sub-routers."""

from fastapi import APIRouter

from dashsync.api.dashboard import router as dashboard_router
from dashsync.api.sync import router as sync_router

api_router = APIRouter(prefix="/api")
api_router.include_router(dashboard_router)
api_router.include_router(sync_router)
