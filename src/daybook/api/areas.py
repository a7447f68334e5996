"""Area API endpoints."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from daybook.api.models import (
    AreaResponse,
    AreaSummaryResponse,
    CreateAreaRequest,
    UpdateAreaRequest,
)
from daybook.factory import get_store
from daybook.store.projections import area_summary
from daybook.store.state_store import StateStore

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[StateStore, Depends(get_store)]


def _area_not_found(area_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Area not found: {area_id}")


@router.get("/areas", response_model=list[AreaResponse])
async def list_areas(store: StoreDep) -> list[AreaResponse]:
    """List all areas."""
    return [AreaResponse.model_validate(area) for area in store.list_areas()]


@router.post("/areas", response_model=AreaResponse, status_code=201)
async def create_area(store: StoreDep, request: CreateAreaRequest) -> AreaResponse:
    """Create an area."""
    area = store.add_area(
        request.name, request.color, description=request.description, icon=request.icon
    )
    logger.info(f"Created area {area.id} ({area.name})")
    return AreaResponse.model_validate(area)


@router.patch("/areas/{area_id}", response_model=AreaResponse)
async def update_area(store: StoreDep, area_id: str, request: UpdateAreaRequest) -> AreaResponse:
    """Apply a partial update; only fields present in the body change.

    Raises:
        HTTPException: If area not found (404) or a required field is cleared (400)
    """
    try:
        area = store.update_area(area_id, **request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if area is None:
        raise _area_not_found(area_id)
    return AreaResponse.model_validate(area)


@router.delete("/areas/{area_id}", status_code=204)
async def delete_area(store: StoreDep, area_id: str) -> None:
    """Delete an area; references are kept or cleared per the configured policy.

    Raises:
        HTTPException: If area not found
    """
    if not store.delete_area(area_id):
        raise _area_not_found(area_id)
    logger.info(f"Deleted area {area_id}")


@router.get("/areas/{area_id}/summary", response_model=AreaSummaryResponse)
async def get_area_summary(
    store: StoreDep, area_id: str, today: date | None = None
) -> AreaSummaryResponse:
    """Progress, pinned notes and urgent tasks of an area.

    Args:
        area_id: Area ID
        today: Reference day for urgency (defaults to the server's today)

    Raises:
        HTTPException: If area not found
    """
    summary = area_summary(store.snapshot(), area_id, today or date.today())
    if summary is None:
        raise _area_not_found(area_id)
    return AreaSummaryResponse.model_validate(summary)
