"""Board, calendar and state snapshot endpoints."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends

from daybook.api.models import (
    BoardResponse,
    ColumnResponse,
    ReorderColumnRequest,
    StateOrderRequest,
    StateResponse,
    TaskResponse,
)
from daybook.factory import get_store
from daybook.store.models import TaskState
from daybook.store.projections import board_columns, filter_tasks, tasks_scheduled_on
from daybook.store.state_store import StateStore

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[StateStore, Depends(get_store)]


def _board_response(store: StateStore, area: str | None = None) -> BoardResponse:
    snapshot = store.snapshot()
    columns = [
        ColumnResponse(
            state=state,
            tasks=[TaskResponse.model_validate(task) for task in filter_tasks(tasks, area_id=area)],
        )
        for state, tasks in board_columns(snapshot)
    ]
    return BoardResponse(state_order=snapshot.state_order, columns=columns)


@router.get("/state", response_model=StateResponse)
async def get_state(store: StoreDep) -> StateResponse:
    """Full snapshot of tasks, notes, areas and ordering."""
    return StateResponse.model_validate(store.snapshot())


@router.get("/board", response_model=BoardResponse)
async def get_board(store: StoreDep, area: str | None = None) -> BoardResponse:
    """Columns in display order, each with its tasks in manual order.

    Args:
        area: Only show tasks in this area
    """
    return _board_response(store, area)


@router.put("/board/state-order", response_model=BoardResponse)
async def set_state_order(store: StoreDep, request: StateOrderRequest) -> BoardResponse:
    """Rearrange the board columns."""
    store.set_state_order(request.state_order)
    return _board_response(store)


@router.put("/board/columns/{state}", response_model=BoardResponse)
async def reorder_column(
    store: StoreDep, state: TaskState, request: ReorderColumnRequest
) -> BoardResponse:
    """Reorder the tasks within one column (drag-and-drop inside a column)."""
    store.reorder_tasks_in_state(state, request.task_ids)
    return _board_response(store)


@router.get("/calendar/{day}", response_model=list[TaskResponse])
async def get_calendar_day(store: StoreDep, day: date) -> list[TaskResponse]:
    """Tasks scheduled on a day, timed tasks first."""
    return [TaskResponse.model_validate(t) for t in tasks_scheduled_on(store.list_tasks(), day)]
