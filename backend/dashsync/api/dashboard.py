"""Dashboard aggregate endpoint."""

from fastapi import APIRouter

from dashsync.core.deps import SyncServiceDep

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=dict)
async def load_dashboard(svc: SyncServiceDep):
    """Every domain's snapshot in one response, keyed by domain."""
    return await svc.load_dashboard()
