"""Task API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from daybook.api.models import (
    CreateSubtaskRequest,
    CreateTaskRequest,
    MoveTaskRequest,
    SubtaskResponse,
    TaskResponse,
    UpdateStateRequest,
    UpdateTaskRequest,
)
from daybook.factory import get_store
from daybook.store.models import Task, TaskState
from daybook.store.projections import filter_tasks
from daybook.store.state_store import StateStore

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[StateStore, Depends(get_store)]


def _task_to_response(task: Task) -> TaskResponse:
    """Convert Task to TaskResponse."""
    return TaskResponse.model_validate(task)


def _task_not_found(task_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Task not found: {task_id}")


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    store: StoreDep,
    area: str | None = None,
    q: str | None = None,
    state: Annotated[list[TaskState] | None, Query()] = None,
) -> list[TaskResponse]:
    """List tasks in creation order.

    Args:
        area: Only tasks in this area
        q: Case-insensitive title search
        state: Only tasks in these states (repeatable)

    Returns:
        List of tasks matching the filter
    """
    tasks = filter_tasks(store.list_tasks(), area_id=area, query=q)
    if state:
        tasks = [t for t in tasks if t.state in state]
    return [_task_to_response(task) for task in tasks]


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(store: StoreDep, request: CreateTaskRequest) -> TaskResponse:
    """Create a task at the end of its state's column."""
    task = store.add_task(
        request.title,
        request.state,
        description=request.description,
        area_id=request.area_id,
        due_date=request.due_date,
        scheduled_date=request.scheduled_date,
        scheduled_time=request.scheduled_time,
        duration=request.duration,
        subtasks=request.subtasks,
    )
    logger.info(f"Created task {task.id} in {task.state}")
    return _task_to_response(task)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(store: StoreDep, task_id: str) -> TaskResponse:
    """Get a single task.

    Raises:
        HTTPException: If task not found
    """
    task = store.get_task(task_id)
    if task is None:
        raise _task_not_found(task_id)
    return _task_to_response(task)


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(store: StoreDep, task_id: str, request: UpdateTaskRequest) -> TaskResponse:
    """Apply a partial update; only fields present in the body change.

    Raises:
        HTTPException: If task not found (404) or a required field is cleared (400)
    """
    try:
        task = store.update_task(task_id, **request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if task is None:
        raise _task_not_found(task_id)
    return _task_to_response(task)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(store: StoreDep, task_id: str) -> None:
    """Delete a task. Notes linked to it keep their reference.

    Raises:
        HTTPException: If task not found
    """
    if not store.delete_task(task_id):
        raise _task_not_found(task_id)
    logger.info(f"Deleted task {task_id}")


@router.put("/tasks/{task_id}/state", response_model=TaskResponse)
async def update_task_state(
    store: StoreDep, task_id: str, request: UpdateStateRequest
) -> TaskResponse:
    """Change a task's state, appending it to the new column.

    Raises:
        HTTPException: If task not found
    """
    task = store.update_task_state(task_id, request.state)
    if task is None:
        raise _task_not_found(task_id)
    return _task_to_response(task)


@router.post("/tasks/{task_id}/move", response_model=TaskResponse)
async def move_task(store: StoreDep, task_id: str, request: MoveTaskRequest) -> TaskResponse:
    """Drop a task into a column at a position (drag-and-drop across columns).

    Raises:
        HTTPException: If task not found
    """
    task = store.move_task_to_state(
        task_id, request.from_state, request.to_state, request.insert_index
    )
    if task is None:
        raise _task_not_found(task_id)
    return _task_to_response(task)


@router.post("/tasks/{task_id}/subtasks", response_model=SubtaskResponse, status_code=201)
async def add_subtask(
    store: StoreDep, task_id: str, request: CreateSubtaskRequest
) -> SubtaskResponse:
    """Append an open subtask to a task.

    Raises:
        HTTPException: If task not found
    """
    subtask = store.add_subtask(task_id, request.title)
    if subtask is None:
        raise _task_not_found(task_id)
    return SubtaskResponse.model_validate(subtask)


@router.post("/tasks/{task_id}/subtasks/{subtask_id}/toggle", response_model=SubtaskResponse)
async def toggle_subtask(store: StoreDep, task_id: str, subtask_id: str) -> SubtaskResponse:
    """Flip a subtask between done and open.

    Raises:
        HTTPException: If task or subtask not found
    """
    subtask = store.toggle_subtask(task_id, subtask_id)
    if subtask is None:
        raise HTTPException(status_code=404, detail=f"Subtask not found: {task_id}/{subtask_id}")
    return SubtaskResponse.model_validate(subtask)


@router.delete("/tasks/{task_id}/subtasks/{subtask_id}", status_code=204)
async def delete_subtask(store: StoreDep, task_id: str, subtask_id: str) -> None:
    """Remove a subtask.

    Raises:
        HTTPException: If task or subtask not found
    """
    if not store.delete_subtask(task_id, subtask_id):
        raise HTTPException(status_code=404, detail=f"Subtask not found: {task_id}/{subtask_id}")
