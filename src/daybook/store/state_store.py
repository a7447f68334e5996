"""In-memory application state store.

The store is the only component allowed to mutate tasks, notes, areas and the
board ordering. Consumers read detached copies and send every change back
through the operations below.

Each workflow state owns a column: an ordered list of task ids. The columns
are the authoritative record of where a task lives; ``Task.state`` mirrors
the column and is only ever written by ``_place`` together with the list
surgery, so the two cannot drift apart.

Operations on unknown ids are silent no-ops. Malformed calls (unknown or
immutable field names) raise ``ValueError``.
"""

import copy
import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import fields
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from daybook.store.models import (
    DEFAULT_STATE_ORDER,
    Area,
    AreaColor,
    AreaDeletePolicy,
    CalendarEvent,
    Note,
    StateSnapshot,
    StoreEvent,
    Subtask,
    Task,
    TaskState,
)

logger = logging.getLogger(__name__)

Listener = Callable[[StoreEvent, StateSnapshot], None]

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})

_TASK_FIELDS = frozenset(f.name for f in fields(Task))
_NOTE_FIELDS = frozenset(f.name for f in fields(Note))
_AREA_FIELDS = frozenset(f.name for f in fields(Area))

_TASK_REQUIRED = frozenset({"title", "state", "subtasks", "note_ids"})
_NOTE_REQUIRED = frozenset({"title", "content", "is_pinned"})
_AREA_REQUIRED = frozenset({"name", "color"})


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken to be UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _check_changes(
    kind: str, allowed: frozenset[str], required: frozenset[str], changes: dict[str, Any]
) -> None:
    """Reject partial updates that name unknown, immutable or required-but-empty fields."""
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown {kind} field(s): {', '.join(sorted(unknown))}")

    immutable = set(changes) & _IMMUTABLE_FIELDS
    if immutable:
        raise ValueError(f"Cannot update {kind} field(s): {', '.join(sorted(immutable))}")

    cleared = sorted(name for name in required & set(changes) if changes[name] is None)
    if cleared:
        raise ValueError(f"Cannot clear required {kind} field(s): {', '.join(cleared)}")


class StateStore:
    """Owns tasks, notes, areas, the per-state task order and the column order."""

    def __init__(
        self,
        snapshot: StateSnapshot | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
        area_delete_policy: AreaDeletePolicy | str = AreaDeletePolicy.KEEP,
    ) -> None:
        """Initialize the store, optionally from a previously saved snapshot.

        Args:
            snapshot: State to start from; the store keeps its own copy
            clock: Returns the current (timezone-aware) time
            id_factory: Returns a fresh unique id for new entities
            area_delete_policy: Whether deleting an area clears references to it
        """
        self._clock = clock
        self._new_id = id_factory
        self._area_delete_policy = AreaDeletePolicy(area_delete_policy)
        self._listeners: list[Listener] = []

        self._tasks: dict[str, Task] = {}
        self._notes: dict[str, Note] = {}
        self._areas: dict[str, Area] = {}
        self._columns: dict[TaskState, list[str]] = {state: [] for state in TaskState}
        self._state_order: list[TaskState] = list(DEFAULT_STATE_ORDER)
        self._events: list[CalendarEvent] = []

        if snapshot is not None:
            self._replace_state(snapshot)

    # -------------------- change feed --------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every applied mutation.

        The listener receives the event and a snapshot it must treat as
        read-only. Exceptions raised by listeners are logged, never propagated.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, action: str, entity_id: str | None = None) -> None:
        if not self._listeners:
            return

        event = StoreEvent(action=action, entity_id=entity_id)
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(event, snapshot)
            except Exception as e:
                logger.error(f"[StateStore] Listener failed on {action}: {e}", exc_info=True)

    # -------------------- reads --------------------

    def snapshot(self) -> StateSnapshot:
        """Return a deep copy of the complete state."""
        return StateSnapshot(
            tasks=copy.deepcopy(list(self._tasks.values())),
            notes=copy.deepcopy(list(self._notes.values())),
            areas=copy.deepcopy(list(self._areas.values())),
            state_order=list(self._state_order),
            task_order={state: list(ids) for state, ids in self._columns.items()},
            events=copy.deepcopy(self._events),
        )

    def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return copy.deepcopy(task) if task else None

    def get_note(self, note_id: str) -> Note | None:
        note = self._notes.get(note_id)
        return copy.deepcopy(note) if note else None

    def get_area(self, area_id: str) -> Area | None:
        area = self._areas.get(area_id)
        return copy.deepcopy(area) if area else None

    def list_tasks(self) -> list[Task]:
        """Return copies of all tasks in creation order."""
        return copy.deepcopy(list(self._tasks.values()))

    def list_notes(self) -> list[Note]:
        return copy.deepcopy(list(self._notes.values()))

    def list_areas(self) -> list[Area]:
        return copy.deepcopy(list(self._areas.values()))

    def task_order(self, state: TaskState | str) -> list[str]:
        """Return the manual order of task ids in one column."""
        return list(self._columns[TaskState(state)])

    def state_order(self) -> list[TaskState]:
        return list(self._state_order)

    # -------------------- reload --------------------

    def load(self, snapshot: StateSnapshot) -> None:
        """Replace the whole state with a snapshot (e.g. after an external edit)."""
        self._replace_state(snapshot)
        logger.info(
            f"[StateStore] Reloaded {len(self._tasks)} tasks, "
            f"{len(self._notes)} notes, {len(self._areas)} areas"
        )
        self._emit("state.reloaded")

    def _replace_state(self, snapshot: StateSnapshot) -> None:
        """Adopt a snapshot, repairing the columns so every task sits in exactly one."""
        snapshot = copy.deepcopy(snapshot)
        # Hand-edited files may carry naive timestamps
        for item in [*snapshot.tasks, *snapshot.notes]:
            item.created_at = _as_utc(item.created_at)
            item.updated_at = _as_utc(item.updated_at)
        for task in snapshot.tasks:
            task.due_date = _as_utc(task.due_date)
        for event in snapshot.events:
            event.start = _as_utc(event.start)
            event.end = _as_utc(event.end)

        tasks = {task.id: task for task in snapshot.tasks}

        columns: dict[TaskState, list[str]] = {state: [] for state in TaskState}
        placed: set[str] = set()
        for raw_state, task_ids in snapshot.task_order.items():
            state = TaskState(raw_state)
            for task_id in task_ids:
                if task_id not in tasks:
                    logger.debug(f"[StateStore] Dropping unknown task {task_id} from {state}")
                    continue
                if task_id in placed:
                    logger.warning(f"[StateStore] Task {task_id} listed twice, keeping first")
                    continue
                columns[state].append(task_id)
                placed.add(task_id)

        # Tasks missing from every column go to the end of the column of their stored state
        for task in tasks.values():
            if task.id not in placed:
                columns[TaskState(task.state)].append(task.id)

        for state, task_ids in columns.items():
            for task_id in task_ids:
                tasks[task_id].state = state

        self._tasks = tasks
        self._notes = {note.id: note for note in snapshot.notes}
        self._areas = {area.id: area for area in snapshot.areas}
        self._columns = columns
        self._state_order = [TaskState(state) for state in snapshot.state_order]
        self._events = list(snapshot.events)

    # -------------------- internals --------------------

    def _touch(self, previous: datetime | None = None) -> datetime:
        """Current time, strictly later than ``previous``."""
        now = self._clock()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    def _place(self, task_id: str, state: TaskState, index: int | None = None) -> None:
        """Insert a task id into a column and mirror the column on the task."""
        column = self._columns[state]
        if index is None:
            column.append(task_id)
        else:
            column.insert(max(0, min(index, len(column))), task_id)
        self._tasks[task_id].state = state

    def _unplace(self, task_id: str) -> None:
        for task_ids in self._columns.values():
            if task_id in task_ids:
                task_ids.remove(task_id)
                return

    # -------------------- tasks --------------------

    def add_task(
        self,
        title: str,
        state: TaskState | str,
        *,
        description: str | None = None,
        area_id: str | None = None,
        due_date: datetime | None = None,
        scheduled_date: date | None = None,
        scheduled_time: time | None = None,
        duration: int | None = None,
        subtasks: Iterable[Subtask | str] = (),
        note_ids: Iterable[str] = (),
    ) -> Task:
        """Create a task and append it to the column for its state.

        Returns:
            Copy of the created task
        """
        state = TaskState(state)
        now = self._touch()
        task = Task(
            id=self._new_id(),
            title=title,
            state=state,
            created_at=now,
            updated_at=now,
            description=description,
            area_id=area_id,
            due_date=_as_utc(due_date),
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            duration=duration,
            subtasks=[self._new_subtask(item) for item in subtasks],
            note_ids=list(note_ids),
        )
        self._tasks[task.id] = task
        self._place(task.id, state)
        logger.debug(f"[StateStore] Added task {task.id} to {state}")
        self._emit("task.added", task.id)
        return copy.deepcopy(task)

    def update_task(self, task_id: str, **changes: Any) -> Task | None:
        """Merge field changes into a task.

        A changed ``state`` moves the task to the end of the new column.

        Returns:
            Copy of the updated task, or None if the task does not exist

        Raises:
            ValueError: If a field is unknown, immutable or a required field is cleared
        """
        _check_changes("task", _TASK_FIELDS, _TASK_REQUIRED, changes)
        task = self._tasks.get(task_id)
        if task is None:
            logger.debug(f"[StateStore] update_task: unknown task {task_id}")
            return None

        new_state = TaskState(changes.pop("state")) if "state" in changes else None
        if "due_date" in changes:
            changes["due_date"] = _as_utc(changes["due_date"])
        for name, value in changes.items():
            setattr(task, name, copy.deepcopy(value))

        if new_state is not None and new_state != task.state:
            self._unplace(task_id)
            self._place(task_id, new_state)

        task.updated_at = self._touch(task.updated_at)
        self._emit("task.updated", task_id)
        return copy.deepcopy(task)

    def delete_task(self, task_id: str) -> bool:
        """Remove a task and its column entry. Notes linking to it keep their task_id."""
        if self._tasks.pop(task_id, None) is None:
            logger.debug(f"[StateStore] delete_task: unknown task {task_id}")
            return False

        self._unplace(task_id)
        self._emit("task.deleted", task_id)
        return True

    def update_task_state(self, task_id: str, state: TaskState | str) -> Task | None:
        """Change only the state of a task; nothing happens if it is already there."""
        task = self._tasks.get(task_id)
        if task is None:
            logger.debug(f"[StateStore] update_task_state: unknown task {task_id}")
            return None

        state = TaskState(state)
        if task.state == state:
            return copy.deepcopy(task)
        return self.update_task(task_id, state=state)

    def move_task_to_state(
        self,
        task_id: str,
        from_state: TaskState | str,
        to_state: TaskState | str,
        insert_index: int | None = None,
    ) -> Task | None:
        """Move a task between columns (or within one) at a given position.

        The task is taken out of the column it actually occupies; a stale
        ``from_state`` is logged. ``insert_index`` is clamped to the column
        bounds, None appends.

        Returns:
            Copy of the moved task, or None if the task does not exist
        """
        task = self._tasks.get(task_id)
        if task is None:
            logger.debug(f"[StateStore] move_task_to_state: unknown task {task_id}")
            return None

        from_state = TaskState(from_state)
        to_state = TaskState(to_state)
        if task.state != from_state:
            logger.warning(
                f"[StateStore] Task {task_id} is in {task.state}, not {from_state}; "
                f"moving it from {task.state}"
            )

        self._unplace(task_id)
        self._place(task_id, to_state, insert_index)
        task.updated_at = self._touch(task.updated_at)
        self._emit("task.moved", task_id)
        return copy.deepcopy(task)

    def reorder_tasks_in_state(self, state: TaskState | str, task_ids: Iterable[str]) -> None:
        """Replace the manual order of one column.

        ``task_ids`` should be a permutation of the column. Ids that do not
        belong to the column are dropped and members left out are appended,
        so the column never gains or loses tasks.
        """
        state = TaskState(state)
        current = self._columns[state]
        members = set(current)

        ordered: list[str] = []
        seen: set[str] = set()
        foreign: list[str] = []
        for task_id in task_ids:
            if task_id not in members:
                foreign.append(task_id)
            elif task_id not in seen:
                ordered.append(task_id)
                seen.add(task_id)
        omitted = [task_id for task_id in current if task_id not in seen]

        if foreign or omitted:
            logger.warning(
                f"[StateStore] Reorder of {state} is not a permutation "
                f"(foreign: {foreign}, omitted: {omitted})"
            )
        ordered.extend(omitted)

        if ordered == current:
            return
        self._columns[state] = ordered
        self._emit("column.reordered", state.value)

    def set_state_order(self, order: Iterable[TaskState | str]) -> None:
        """Replace the column display order."""
        new_order = [TaskState(state) for state in order]
        if new_order == self._state_order:
            return
        self._state_order = new_order
        self._emit("board.reordered")

    # -------------------- subtasks --------------------

    def _new_subtask(self, item: Subtask | str) -> Subtask:
        """Copy a subtask, or create an open one from a bare title."""
        if isinstance(item, str):
            return Subtask(id=self._new_id(), title=item, completed=False)
        return copy.deepcopy(item)

    def _find_subtask(self, task: Task, subtask_id: str) -> Subtask | None:
        for subtask in task.subtasks:
            if subtask.id == subtask_id:
                return subtask
        return None

    def add_subtask(self, task_id: str, title: str) -> Subtask | None:
        task = self._tasks.get(task_id)
        if task is None:
            logger.debug(f"[StateStore] add_subtask: unknown task {task_id}")
            return None

        subtask = Subtask(id=self._new_id(), title=title, completed=False)
        task.subtasks.append(subtask)
        task.updated_at = self._touch(task.updated_at)
        self._emit("subtask.added", task_id)
        return copy.deepcopy(subtask)

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Subtask | None:
        task = self._tasks.get(task_id)
        subtask = self._find_subtask(task, subtask_id) if task else None
        if task is None or subtask is None:
            logger.debug(f"[StateStore] toggle_subtask: unknown subtask {task_id}/{subtask_id}")
            return None

        subtask.completed = not subtask.completed
        task.updated_at = self._touch(task.updated_at)
        self._emit("subtask.toggled", task_id)
        return copy.deepcopy(subtask)

    def delete_subtask(self, task_id: str, subtask_id: str) -> bool:
        task = self._tasks.get(task_id)
        subtask = self._find_subtask(task, subtask_id) if task else None
        if task is None or subtask is None:
            logger.debug(f"[StateStore] delete_subtask: unknown subtask {task_id}/{subtask_id}")
            return False

        task.subtasks.remove(subtask)
        task.updated_at = self._touch(task.updated_at)
        self._emit("subtask.deleted", task_id)
        return True

    # -------------------- notes --------------------

    def add_note(
        self,
        title: str,
        content: str = "",
        *,
        area_id: str | None = None,
        task_id: str | None = None,
        is_pinned: bool = False,
    ) -> Note:
        now = self._touch()
        note = Note(
            id=self._new_id(),
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
            area_id=area_id,
            task_id=task_id,
            is_pinned=is_pinned,
        )
        self._notes[note.id] = note
        self._emit("note.added", note.id)
        return copy.deepcopy(note)

    def update_note(self, note_id: str, **changes: Any) -> Note | None:
        """Merge field changes into a note.

        Raises:
            ValueError: If a field is unknown, immutable or a required field is cleared
        """
        _check_changes("note", _NOTE_FIELDS, _NOTE_REQUIRED, changes)
        note = self._notes.get(note_id)
        if note is None:
            logger.debug(f"[StateStore] update_note: unknown note {note_id}")
            return None

        for name, value in changes.items():
            setattr(note, name, copy.deepcopy(value))
        note.updated_at = self._touch(note.updated_at)
        self._emit("note.updated", note_id)
        return copy.deepcopy(note)

    def delete_note(self, note_id: str) -> bool:
        if self._notes.pop(note_id, None) is None:
            logger.debug(f"[StateStore] delete_note: unknown note {note_id}")
            return False

        self._emit("note.deleted", note_id)
        return True

    def toggle_note_pin(self, note_id: str) -> Note | None:
        note = self._notes.get(note_id)
        if note is None:
            logger.debug(f"[StateStore] toggle_note_pin: unknown note {note_id}")
            return None

        note.is_pinned = not note.is_pinned
        note.updated_at = self._touch(note.updated_at)
        self._emit("note.pinned", note_id)
        return copy.deepcopy(note)

    # -------------------- areas --------------------

    def add_area(
        self,
        name: str,
        color: AreaColor | str,
        *,
        description: str | None = None,
        icon: str | None = None,
    ) -> Area:
        area = Area(
            id=self._new_id(),
            name=name,
            color=AreaColor(color),
            description=description,
            icon=icon,
        )
        self._areas[area.id] = area
        self._emit("area.added", area.id)
        return copy.deepcopy(area)

    def update_area(self, area_id: str, **changes: Any) -> Area | None:
        """Merge field changes into an area.

        Raises:
            ValueError: If a field is unknown, immutable or a required field is cleared
        """
        _check_changes("area", _AREA_FIELDS, _AREA_REQUIRED, changes)
        area = self._areas.get(area_id)
        if area is None:
            logger.debug(f"[StateStore] update_area: unknown area {area_id}")
            return None

        if "color" in changes:
            changes["color"] = AreaColor(changes["color"])
        for name, value in changes.items():
            setattr(area, name, copy.deepcopy(value))
        self._emit("area.updated", area_id)
        return copy.deepcopy(area)

    def delete_area(self, area_id: str) -> bool:
        """Remove an area, handling references according to the delete policy."""
        if self._areas.pop(area_id, None) is None:
            logger.debug(f"[StateStore] delete_area: unknown area {area_id}")
            return False

        if self._area_delete_policy is AreaDeletePolicy.DETACH:
            detached = 0
            for item in [*self._tasks.values(), *self._notes.values()]:
                if item.area_id == area_id:
                    item.area_id = None
                    item.updated_at = self._touch(item.updated_at)
                    detached += 1
            logger.info(f"[StateStore] Detached {detached} items from deleted area {area_id}")

        self._emit("area.deleted", area_id)
        return True
