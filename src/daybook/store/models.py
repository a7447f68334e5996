"""Data model for the Daybook state store."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import StrEnum


class TaskState(StrEnum):
    """Workflow stage of a task."""

    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    WAITING = "waiting"
    QA = "qa"
    DEVELOPED = "developed"
    READY = "ready"
    DONE = "done"
    ARCHIVED = "archived"


class AreaColor(StrEnum):
    """Color palette available to areas."""

    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    LEARNING = "learning"
    FINANCE = "finance"


class AreaDeletePolicy(StrEnum):
    """What deleting an area does to tasks and notes that reference it."""

    KEEP = "keep"  # references are left dangling and resolve to nothing
    DETACH = "detach"  # area_id is cleared on every referencing task and note


# Column display order used until the user rearranges the board
DEFAULT_STATE_ORDER: tuple[TaskState, ...] = (
    TaskState.IN_PROGRESS,
    TaskState.READY,
    TaskState.WAITING,
    TaskState.QA,
    TaskState.DEVELOPED,
    TaskState.BACKLOG,
    TaskState.DONE,
    TaskState.ARCHIVED,
)


@dataclass
class Area:
    """A user-defined category grouping tasks and notes."""

    id: str
    name: str
    color: AreaColor
    description: str | None = None
    icon: str | None = None


@dataclass
class Subtask:
    """Checklist item owned by a task."""

    id: str
    title: str
    completed: bool = False


@dataclass
class Task:
    """A unit of work living in exactly one workflow column."""

    id: str
    title: str
    state: TaskState
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    area_id: str | None = None  # weak reference, may dangle
    due_date: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    duration: int | None = None  # minutes
    subtasks: list[Subtask] = field(default_factory=list)
    note_ids: list[str] = field(default_factory=list)


@dataclass
class Note:
    """Free-form note, optionally linked to an area and a task."""

    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    area_id: str | None = None  # weak reference, may dangle
    task_id: str | None = None  # weak reference, may dangle
    is_pinned: bool = False


@dataclass
class CalendarEvent:
    """External calendar event. Carried through snapshots, never mutated."""

    id: str
    title: str
    start: datetime
    end: datetime
    is_all_day: bool = False
    color: str | None = None


@dataclass
class StateSnapshot:
    """Detached copy of everything the store owns."""

    tasks: list[Task] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    areas: list[Area] = field(default_factory=list)
    state_order: list[TaskState] = field(default_factory=lambda: list(DEFAULT_STATE_ORDER))
    task_order: dict[TaskState, list[str]] = field(default_factory=dict)
    events: list[CalendarEvent] = field(default_factory=list)


@dataclass(frozen=True)
class StoreEvent:
    """Describes one applied store mutation.

    Action names follow ``<entity>.<verb>``, e.g. ``task.moved``,
    ``note.pinned`` or ``state.reloaded``.
    """

    action: str
    entity_id: str | None = None
