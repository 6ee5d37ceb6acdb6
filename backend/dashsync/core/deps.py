"""FastAPI dependencies for the sync service and domain lookup."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from dashsync.config import settings
from dashsync.services.domain import DomainAdapter
from dashsync.services.registry import get_domain
from dashsync.services.sync import SyncService


def get_sync_service(request: Request) -> SyncService:
    """Build the sync service from the objects created in the lifespan."""
    state = request.app.state
    return SyncService(
        state.store,
        state.fallback,
        state.domain_locks,
        batch_size=settings.UPSERT_BATCH_SIZE,
        fallback_writes_enabled=settings.FALLBACK_WRITES_ENABLED,
    )


def get_adapter(domain: str) -> DomainAdapter:
    """Resolve the ``{domain}`` path segment to its adapter."""
    adapter = get_domain(domain)
    if adapter is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown sync domain: {domain}",
        )
    return adapter


SyncServiceDep = Annotated[SyncService, Depends(get_sync_service)]
AdapterDep = Annotated[DomainAdapter, Depends(get_adapter)]
