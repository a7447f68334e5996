"""API request and response models for Daybook."""

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field

from daybook.store.models import AreaColor, StoreEvent, TaskState


class AreaResponse(BaseModel):
    """API response model for areas."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    color: AreaColor
    description: str | None
    icon: str | None


class SubtaskResponse(BaseModel):
    """API response model for subtasks."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    completed: bool


class TaskResponse(BaseModel):
    """API response model for tasks."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    state: TaskState
    description: str | None
    area_id: str | None
    due_date: datetime | None
    scheduled_date: date | None
    scheduled_time: time | None
    duration: int | None  # minutes
    subtasks: list[SubtaskResponse]
    note_ids: list[str]
    created_at: datetime
    updated_at: datetime


class NoteResponse(BaseModel):
    """API response model for notes."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    area_id: str | None
    task_id: str | None
    is_pinned: bool
    created_at: datetime
    updated_at: datetime


class ColumnResponse(BaseModel):
    """One board column: a state and its tasks in manual order."""

    state: TaskState
    tasks: list[TaskResponse]


class BoardResponse(BaseModel):
    """API response model for the board."""

    state_order: list[TaskState]
    columns: list[ColumnResponse]


class AreaSummaryResponse(BaseModel):
    """API response model for area progress."""

    model_config = ConfigDict(from_attributes=True)

    area: AreaResponse
    task_count: int
    completed_count: int
    progress_percent: float
    pinned_notes: list[NoteResponse]
    urgent_tasks: list[TaskResponse]


class CalendarEventResponse(BaseModel):
    """API response model for external calendar events."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    start: datetime
    end: datetime
    is_all_day: bool
    color: str | None


class StateResponse(BaseModel):
    """Full state snapshot."""

    model_config = ConfigDict(from_attributes=True)

    tasks: list[TaskResponse]
    notes: list[NoteResponse]
    areas: list[AreaResponse]
    state_order: list[TaskState]
    task_order: dict[TaskState, list[str]]
    events: list[CalendarEventResponse]


class CreateAreaRequest(BaseModel):
    """Request model for creating an area."""

    name: str = Field(min_length=1)
    color: AreaColor
    description: str | None = None
    icon: str | None = None


class UpdateAreaRequest(BaseModel):
    """Request model for a partial area update. Only fields sent are applied."""

    name: str | None = Field(default=None, min_length=1)
    color: AreaColor | None = None
    description: str | None = None
    icon: str | None = None


class CreateTaskRequest(BaseModel):
    """Request model for creating a task."""

    title: str = Field(min_length=1)
    state: TaskState = TaskState.BACKLOG
    description: str | None = None
    area_id: str | None = None
    due_date: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    duration: int | None = Field(default=None, ge=0)
    subtasks: list[str] = Field(default_factory=list)  # titles


class UpdateTaskRequest(BaseModel):
    """Request model for a partial task update. Only fields sent are applied."""

    title: str | None = Field(default=None, min_length=1)
    state: TaskState | None = None
    description: str | None = None
    area_id: str | None = None
    due_date: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    duration: int | None = Field(default=None, ge=0)
    note_ids: list[str] | None = None


class UpdateStateRequest(BaseModel):
    """Request model for changing a task's state."""

    state: TaskState


class MoveTaskRequest(BaseModel):
    """Request model for a drag-and-drop move between (or within) columns."""

    from_state: TaskState
    to_state: TaskState
    insert_index: int | None = Field(default=None, ge=0)


class CreateSubtaskRequest(BaseModel):
    """Request model for adding a subtask."""

    title: str = Field(min_length=1)


class ReorderColumnRequest(BaseModel):
    """Request model for reordering the tasks of one column."""

    task_ids: list[str]


class StateOrderRequest(BaseModel):
    """Request model for reordering the board columns."""

    state_order: list[TaskState]


class CreateNoteRequest(BaseModel):
    """Request model for creating a note."""

    title: str = Field(min_length=1)
    content: str = ""
    area_id: str | None = None
    task_id: str | None = None
    is_pinned: bool = False


class UpdateNoteRequest(BaseModel):
    """Request model for a partial note update. Only fields sent are applied."""

    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    area_id: str | None = None
    task_id: str | None = None
    is_pinned: bool | None = None


class EventMessage(BaseModel):
    """WebSocket message pushed after every store mutation."""

    type: str  # store action, e.g. "task.moved"
    id: str | None  # affected entity, None for board-wide changes

    @classmethod
    def from_event(cls, event: StoreEvent) -> "EventMessage":
        return cls(type=event.action, id=event.entity_id)
