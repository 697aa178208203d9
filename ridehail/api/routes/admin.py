"""
Admin / observability endpoints
===============================

GET /api/v1/admin/summary -- entity counts and rides per status
GET /api/v1/admin/health  -- simple health check
"""

from collections import Counter

from fastapi import APIRouter, Depends, Request

from ridehail.api.dependencies import get_store
from ridehail.api.middleware import limiter
from ridehail.api.schemas import HealthResponse, StoreSummaryResponse
from ridehail.config import settings
from ridehail.domain.enums import RideStatus
from ridehail.infrastructure.store import EntityStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/summary",
    response_model=StoreSummaryResponse,
    summary="Entity counts and ride status breakdown",
)
@limiter.limit(settings.rate_limit)
async def store_summary(request: Request, store: EntityStore = Depends(get_store)):
    by_status = Counter(r.status.value for r in store.rides.values())
    return StoreSummaryResponse(
        users=len(store.users),
        vehicles=len(store.vehicles),
        ratings=len(store.ratings),
        rides_by_status={s.value: by_status.get(s.value, 0) for s in RideStatus},
    )


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
