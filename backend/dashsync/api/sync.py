"""Whole-collection snapshot sync endpoints, one pair per domain."""

import json

from fastapi import APIRouter, Depends, Request

from dashsync.config import settings
from dashsync.core.deps import AdapterDep, SyncServiceDep
from dashsync.core.exceptions import SnapshotValidationError
from dashsync.core.rate_limit import RateLimiter
from dashsync.schemas import ErrorResponse
from dashsync.schemas.sync import SyncResponse


router = APIRouter(tags=["sync"])


@router.get("/{domain}/sync", response_model=dict)
async def load_snapshot(adapter: AdapterDep, svc: SyncServiceDep):
    """Return the domain's full current snapshot, children nested under parents."""
    return await svc.load_snapshot(adapter)


@router.post(
    "/{domain}/sync",
    response_model=SyncResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    dependencies=[
        Depends(RateLimiter(
            max_calls=settings.SYNC_RATE_LIMIT_CALLS,
            window_seconds=settings.SYNC_RATE_LIMIT_WINDOW_SECONDS,
            key="sync",
        )),
    ],
)
async def save_snapshot(request: Request, adapter: AdapterDep, svc: SyncServiceDep):
    """Make the stored domain match the posted snapshot.

    Rows missing from the snapshot are deleted, unless that would empty a
    populated domain, in which case the request is refused with
    ``blocked: true`` and nothing is written.
    """
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SnapshotValidationError() from exc

    result = await svc.save_snapshot(adapter, data)
    if result is None:
        return SyncResponse(method="overwrite")
    return SyncResponse(counts=result.to_dict())
