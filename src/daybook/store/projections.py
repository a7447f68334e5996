"""Read-only projections over store snapshots.

These are the derivations the list, board, calendar, note-grid and area
views render from. They never mutate their input.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from daybook.store.models import Area, Note, StateSnapshot, Task, TaskState

URGENT_WINDOW = timedelta(days=3)
URGENT_LIMIT = 5


@dataclass
class AreaSummary:
    """Progress overview for one area."""

    area: Area
    task_count: int
    completed_count: int
    progress_percent: float
    pinned_notes: list[Note] = field(default_factory=list)
    urgent_tasks: list[Task] = field(default_factory=list)


def resolve_area(snapshot: StateSnapshot, area_id: str | None) -> Area | None:
    """Look up an area reference; dangling or empty references resolve to None."""
    if area_id is None:
        return None
    return next((area for area in snapshot.areas if area.id == area_id), None)


def resolve_task(snapshot: StateSnapshot, task_id: str | None) -> Task | None:
    """Look up a task reference; dangling or empty references resolve to None."""
    if task_id is None:
        return None
    return next((task for task in snapshot.tasks if task.id == task_id), None)


def board_columns(snapshot: StateSnapshot) -> list[tuple[TaskState, list[Task]]]:
    """Group tasks into columns, in column display order and manual task order.

    States left out of the display order are shown after the ordered ones so
    no task disappears from the board.
    """
    by_id = {task.id: task for task in snapshot.tasks}
    states = list(dict.fromkeys(snapshot.state_order))
    states.extend(state for state in TaskState if state not in states)

    columns: list[tuple[TaskState, list[Task]]] = []
    for state in states:
        task_ids = snapshot.task_order.get(state, [])
        columns.append((state, [by_id[task_id] for task_id in task_ids if task_id in by_id]))
    return columns


def filter_tasks(
    tasks: Iterable[Task], area_id: str | None = None, query: str | None = None
) -> list[Task]:
    """Keep tasks in an area whose title contains the query (case-insensitive)."""
    needle = query.lower() if query else ""
    return [
        task
        for task in tasks
        if (area_id is None or task.area_id == area_id) and needle in task.title.lower()
    ]


def filter_notes(
    notes: Iterable[Note], area_id: str | None = None, query: str | None = None
) -> list[Note]:
    """Keep notes in an area whose title or content contains the query."""
    needle = query.lower() if query else ""
    return [
        note
        for note in notes
        if (area_id is None or note.area_id == area_id)
        and (needle in note.title.lower() or needle in note.content.lower())
    ]


def sort_notes(notes: Iterable[Note]) -> list[Note]:
    """Pinned notes first, then most recently updated first."""
    by_recency = sorted(notes, key=lambda note: note.updated_at, reverse=True)
    return sorted(by_recency, key=lambda note: not note.is_pinned)


def tasks_scheduled_on(tasks: Iterable[Task], day: date) -> list[Task]:
    """Tasks scheduled for a calendar day, earliest scheduled time first."""
    scheduled = [task for task in tasks if task.scheduled_date == day]
    # Untimed tasks go last; sorted() is stable so manual order is kept otherwise
    return sorted(
        scheduled,
        key=lambda task: (task.scheduled_time is None, task.scheduled_time or datetime.min.time()),
    )


def _is_urgent(task: Task, today: date) -> bool:
    if task.state in (TaskState.DONE, TaskState.ARCHIVED):
        return False
    if task.state == TaskState.IN_PROGRESS:
        return True
    if task.due_date is not None:
        return task.due_date.date() <= today + URGENT_WINDOW
    return False


def area_summary(snapshot: StateSnapshot, area_id: str, today: date) -> AreaSummary | None:
    """Summarize an area's tasks and notes, or None if the area does not exist.

    Urgent tasks are open tasks that are in progress or due within
    ``URGENT_WINDOW`` (overdue included), soonest due first.
    """
    area = resolve_area(snapshot, area_id)
    if area is None:
        return None

    area_tasks = [task for task in snapshot.tasks if task.area_id == area_id]
    area_notes = [note for note in snapshot.notes if note.area_id == area_id]
    completed = sum(1 for task in area_tasks if task.state == TaskState.DONE)
    progress = (completed / len(area_tasks)) * 100 if area_tasks else 0.0

    urgent = [task for task in area_tasks if _is_urgent(task, today)]
    urgent.sort(key=lambda task: (task.due_date is None, task.due_date or datetime.min))

    return AreaSummary(
        area=area,
        task_count=len(area_tasks),
        completed_count=completed,
        progress_percent=progress,
        pinned_notes=[note for note in area_notes if note.is_pinned],
        urgent_tasks=urgent[:URGENT_LIMIT],
    )
