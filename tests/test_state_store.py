"""Tests for StateStore."""

import random
from collections.abc import Callable
from datetime import UTC, date, datetime, time

import pytest

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
from daybook.store.projections import area_summary
from daybook.store.state_store import StateStore

from conftest import FakeClock

Check = Callable[[StateStore], None]


def _record_events(store: StateStore) -> list[StoreEvent]:
    events: list[StoreEvent] = []
    store.subscribe(lambda event, snapshot: events.append(event))
    return events


# -------------------- tasks --------------------


def test_add_task_appends_to_state_column(store: StateStore, check_partition: Check) -> None:
    """Test new tasks go to the end of the column for their state."""
    first = store.add_task("First", TaskState.BACKLOG)
    second = store.add_task("Second", "backlog")

    assert store.task_order(TaskState.BACKLOG) == [first.id, second.id]
    assert second.state == TaskState.BACKLOG
    assert first.created_at == first.updated_at
    check_partition(store)


def test_add_task_keeps_optional_fields(store: StateStore) -> None:
    """Test scheduling fields and subtasks are stored."""
    task = store.add_task(
        "Run",
        TaskState.READY,
        description="Morning run",
        due_date=datetime(2026, 1, 15, 17, 0),
        scheduled_date=date(2026, 1, 13),
        scheduled_time=time(7, 30),
        duration=40,
        subtasks=["Stretch", Subtask(id="s1", title="Warm up", completed=True)],
    )

    assert task.due_date == datetime(2026, 1, 15, 17, 0, tzinfo=UTC)  # naive taken as UTC
    assert task.scheduled_date == date(2026, 1, 13)
    assert task.scheduled_time == time(7, 30)
    assert task.duration == 40
    assert [s.title for s in task.subtasks] == ["Stretch", "Warm up"]
    assert task.subtasks[0].completed is False
    assert task.subtasks[1].id == "s1"


def test_returned_task_is_detached(store: StateStore) -> None:
    """Test mutating a returned task does not change the store."""
    task = store.add_task("Original", TaskState.BACKLOG)
    task.title = "Changed"
    task.subtasks.append(Subtask(id="x", title="sneaky"))

    stored = store.get_task(task.id)
    assert stored is not None
    assert stored.title == "Original"
    assert stored.subtasks == []


def test_update_task_merges_fields(store: StateStore, clock: FakeClock) -> None:
    """Test partial update changes only named fields and refreshes updated_at."""
    task = store.add_task("Title", TaskState.BACKLOG, description="old")

    updated = store.update_task(task.id, description="new", duration=30)

    assert updated is not None
    assert updated.title == "Title"
    assert updated.description == "new"
    assert updated.duration == 30
    assert updated.updated_at > task.updated_at
    assert updated.created_at == task.created_at


def test_update_task_state_change_moves_to_end(store: StateStore, check_partition: Check) -> None:
    """Test state change through update_task moves the id between columns."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.DONE)

    updated = store.update_task(a.id, state=TaskState.DONE, title="A2")

    assert updated is not None
    assert updated.state == TaskState.DONE
    assert store.task_order(TaskState.BACKLOG) == []
    assert store.task_order(TaskState.DONE) == [b.id, a.id]
    check_partition(store)


def test_update_task_same_state_keeps_position(store: StateStore) -> None:
    """Test passing the current state does not churn the column."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.BACKLOG)

    store.update_task(a.id, state=TaskState.BACKLOG, title="A2")

    assert store.task_order(TaskState.BACKLOG) == [a.id, b.id]


def test_update_task_unknown_id_is_noop(store: StateStore) -> None:
    """Test updating a missing task changes nothing."""
    store.add_task("A", TaskState.BACKLOG)
    before = store.snapshot()
    events = _record_events(store)

    assert store.update_task("missing", title="x") is None
    assert store.snapshot() == before
    assert events == []


@pytest.mark.parametrize(
    "changes",
    [
        {"priority": 1},
        {"id": "other"},
        {"created_at": datetime(2020, 1, 1, tzinfo=UTC)},
        {"title": None},
        {"state": None},
    ],
)
def test_update_task_rejects_malformed_changes(store: StateStore, changes: dict) -> None:
    """Test unknown, immutable and cleared required fields raise ValueError."""
    task = store.add_task("A", TaskState.BACKLOG)

    with pytest.raises(ValueError):
        store.update_task(task.id, **changes)

    assert store.get_task(task.id) == task


def test_delete_task_removes_task_and_order_entry(
    store: StateStore, check_partition: Check
) -> None:
    """Test deleting removes the task everywhere but keeps linked notes."""
    task = store.add_task("A", TaskState.QA)
    note = store.add_note("Linked", "text", task_id=task.id)

    assert store.delete_task(task.id) is True

    assert store.get_task(task.id) is None
    assert store.task_order(TaskState.QA) == []
    linked = store.get_note(note.id)
    assert linked is not None
    assert linked.task_id == task.id  # dangling reference stays
    check_partition(store)


def test_operations_on_deleted_task_are_noops(store: StateStore) -> None:
    """Test calls naming a deleted task change nothing."""
    task = store.add_task("A", TaskState.BACKLOG, subtasks=["step"])
    subtask_id = task.subtasks[0].id
    store.delete_task(task.id)
    before = store.snapshot()

    assert store.delete_task(task.id) is False
    assert store.update_task_state(task.id, TaskState.DONE) is None
    assert store.toggle_subtask(task.id, subtask_id) is None
    assert store.add_subtask(task.id, "more") is None
    assert store.delete_subtask(task.id, subtask_id) is False
    assert store.move_task_to_state(task.id, TaskState.BACKLOG, TaskState.DONE) is None
    assert store.snapshot() == before


def test_update_task_state_to_current_state_is_idempotent(store: StateStore) -> None:
    """Test no column churn and no timestamp refresh when state is unchanged."""
    a = store.add_task("A", TaskState.WAITING)
    store.add_task("B", TaskState.WAITING)
    before = store.snapshot()
    events = _record_events(store)

    result = store.update_task_state(a.id, TaskState.WAITING)

    assert result is not None
    assert result.updated_at == a.updated_at
    assert store.snapshot() == before
    assert events == []


def test_update_task_state_moves_task(store: StateStore, check_partition: Check) -> None:
    """Test a real state change appends to the new column."""
    a = store.add_task("A", TaskState.WAITING)

    result = store.update_task_state(a.id, "ready")

    assert result is not None
    assert result.state == TaskState.READY
    assert result.updated_at > a.updated_at
    assert store.task_order(TaskState.READY) == [a.id]
    check_partition(store)


# -------------------- moves and ordering --------------------


def test_move_backlog_task_to_done() -> None:
    """Test moving the only backlog task to the top of done."""
    store = StateStore(id_factory=lambda: "T1")
    store.add_task("T1", TaskState.BACKLOG)
    assert store.task_order(TaskState.BACKLOG) == ["T1"]

    moved = store.move_task_to_state("T1", "backlog", "done", 0)

    assert moved is not None
    assert moved.state == TaskState.DONE
    assert store.task_order(TaskState.BACKLOG) == []
    assert store.task_order(TaskState.DONE) == ["T1"]


def test_move_inserts_at_index(store: StateStore, check_partition: Check) -> None:
    """Test the insert index positions the task within the target column."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.DONE)
    c = store.add_task("C", TaskState.DONE)

    moved = store.move_task_to_state(a.id, TaskState.BACKLOG, TaskState.DONE, 1)

    assert moved is not None
    assert moved.updated_at > a.updated_at
    assert store.task_order(TaskState.DONE) == [b.id, a.id, c.id]
    check_partition(store)


def test_move_there_and_back_restores_columns(store: StateStore) -> None:
    """Test moving to another column and back restores both orders and the state."""
    ids = [store.add_task(f"B{i}", TaskState.BACKLOG).id for i in range(3)]
    others = [store.add_task(f"Q{i}", TaskState.QA).id for i in range(2)]
    before_backlog = store.task_order(TaskState.BACKLOG)
    before_qa = store.task_order(TaskState.QA)

    store.move_task_to_state(ids[1], TaskState.BACKLOG, TaskState.QA, 1)
    assert store.task_order(TaskState.QA) == [others[0], ids[1], others[1]]
    store.move_task_to_state(ids[1], TaskState.QA, TaskState.BACKLOG, 1)

    assert store.task_order(TaskState.BACKLOG) == before_backlog
    assert store.task_order(TaskState.QA) == before_qa
    task = store.get_task(ids[1])
    assert task is not None
    assert task.state == TaskState.BACKLOG


def test_move_without_index_appends(store: StateStore) -> None:
    """Test omitting the index appends to the target column."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.READY)

    store.move_task_to_state(a.id, TaskState.BACKLOG, TaskState.READY)

    assert store.task_order(TaskState.READY) == [b.id, a.id]


def test_move_clamps_index(store: StateStore) -> None:
    """Test out-of-range indexes land at the column ends."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.READY)
    c = store.add_task("C", TaskState.BACKLOG)

    store.move_task_to_state(a.id, TaskState.BACKLOG, TaskState.READY, 99)
    store.move_task_to_state(c.id, TaskState.BACKLOG, TaskState.READY, -5)

    assert store.task_order(TaskState.READY) == [c.id, b.id, a.id]


def test_move_within_same_column(store: StateStore) -> None:
    """Test moving inside one column repositions the task."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.BACKLOG)
    c = store.add_task("C", TaskState.BACKLOG)

    store.move_task_to_state(c.id, TaskState.BACKLOG, TaskState.BACKLOG, 0)

    assert store.task_order(TaskState.BACKLOG) == [c.id, a.id, b.id]


def test_move_with_stale_from_state_uses_actual_column(
    store: StateStore, check_partition: Check
) -> None:
    """Test a wrong from_state does not leave the task in two columns."""
    a = store.add_task("A", TaskState.WAITING)

    moved = store.move_task_to_state(a.id, TaskState.BACKLOG, TaskState.DONE)

    assert moved is not None
    assert store.task_order(TaskState.WAITING) == []
    assert store.task_order(TaskState.DONE) == [a.id]
    check_partition(store)


def test_reorder_changes_only_that_column(store: StateStore) -> None:
    """Test reordering touches neither other columns nor task fields."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.BACKLOG)
    c = store.add_task("C", TaskState.BACKLOG)
    d = store.add_task("D", TaskState.DONE)
    before = store.snapshot()

    store.reorder_tasks_in_state(TaskState.BACKLOG, [c.id, a.id, b.id])

    after = store.snapshot()
    assert after.task_order[TaskState.BACKLOG] == [c.id, a.id, b.id]
    assert after.task_order[TaskState.DONE] == [d.id]
    assert after.tasks == before.tasks


def test_reorder_keeps_column_membership(store: StateStore, check_partition: Check) -> None:
    """Test foreign ids are ignored and omitted members are kept at the end."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.BACKLOG)
    c = store.add_task("C", TaskState.BACKLOG)
    other = store.add_task("Other", TaskState.DONE)

    store.reorder_tasks_in_state(TaskState.BACKLOG, [c.id, other.id, "ghost", c.id])

    assert store.task_order(TaskState.BACKLOG) == [c.id, a.id, b.id]
    assert store.task_order(TaskState.DONE) == [other.id]
    check_partition(store)


def test_reorder_with_same_order_emits_nothing(store: StateStore) -> None:
    """Test an unchanged order is a no-op."""
    a = store.add_task("A", TaskState.BACKLOG)
    b = store.add_task("B", TaskState.BACKLOG)
    events = _record_events(store)

    store.reorder_tasks_in_state(TaskState.BACKLOG, [a.id, b.id])

    assert events == []


def test_set_state_order(store: StateStore) -> None:
    """Test replacing the column display order."""
    assert store.state_order() == list(DEFAULT_STATE_ORDER)
    new_order = list(reversed(TaskState))

    store.set_state_order([state.value for state in new_order])

    assert store.state_order() == new_order


# -------------------- subtasks --------------------


def test_add_subtask_refreshes_updated_at_with_frozen_clock() -> None:
    """Test updated_at strictly increases even if the clock does not move."""
    frozen = datetime(2026, 1, 12, 9, 0, tzinfo=UTC)
    store = StateStore(clock=lambda: frozen)
    task = store.add_task("T1", TaskState.BACKLOG)

    subtask = store.add_subtask(task.id, "Buy milk")

    assert subtask is not None
    assert subtask.title == "Buy milk"
    assert subtask.completed is False
    assert subtask.id
    updated = store.get_task(task.id)
    assert updated is not None
    assert updated.subtasks == [subtask]
    assert updated.updated_at > task.updated_at


def test_toggle_and_delete_subtask(store: StateStore) -> None:
    """Test toggling flips completion and delete removes by id."""
    task = store.add_task("T", TaskState.BACKLOG, subtasks=["one", "two"])
    first, second = task.subtasks

    toggled = store.toggle_subtask(task.id, first.id)
    assert toggled is not None
    assert toggled.completed is True
    toggled = store.toggle_subtask(task.id, first.id)
    assert toggled is not None
    assert toggled.completed is False

    assert store.delete_subtask(task.id, second.id) is True
    current = store.get_task(task.id)
    assert current is not None
    assert [s.id for s in current.subtasks] == [first.id]
    assert current.updated_at > task.updated_at


def test_unknown_subtask_is_noop(store: StateStore) -> None:
    """Test unknown subtask ids leave the task untouched."""
    task = store.add_task("T", TaskState.BACKLOG, subtasks=["one"])

    assert store.toggle_subtask(task.id, "missing") is None
    assert store.delete_subtask(task.id, "missing") is False
    assert store.get_task(task.id) == task


# -------------------- notes --------------------


def test_toggle_note_pin_twice(store: StateStore) -> None:
    """Test toggling twice restores the pin and refreshes updated_at each time."""
    note = store.add_note("N1", "content")

    once = store.toggle_note_pin(note.id)
    twice = store.toggle_note_pin(note.id)

    assert once is not None and twice is not None
    assert once.is_pinned is True
    assert twice.is_pinned is note.is_pinned
    assert note.updated_at < once.updated_at < twice.updated_at


def test_update_and_delete_note(store: StateStore) -> None:
    """Test note partial update and deletion."""
    note = store.add_note("Title", "body", area_id="a1")

    updated = store.update_note(note.id, content="new body", area_id=None)
    assert updated is not None
    assert updated.title == "Title"
    assert updated.content == "new body"
    assert updated.area_id is None
    assert updated.updated_at > note.updated_at

    assert store.delete_note(note.id) is True
    assert store.get_note(note.id) is None
    assert store.delete_note(note.id) is False
    assert store.update_note(note.id, title="x") is None
    assert store.toggle_note_pin(note.id) is None


def test_update_note_rejects_unknown_field(store: StateStore) -> None:
    """Test unknown note fields raise ValueError."""
    note = store.add_note("Title")

    with pytest.raises(ValueError, match="Unknown note field"):
        store.update_note(note.id, colour="red")


# -------------------- areas --------------------


def test_area_crud(store: StateStore) -> None:
    """Test adding, updating and deleting an area."""
    area = store.add_area("Work", "work", description="Job stuff")
    assert area.color == AreaColor.WORK

    updated = store.update_area(area.id, name="Office", color="finance")
    assert updated is not None
    assert updated.name == "Office"
    assert updated.color == AreaColor.FINANCE
    assert updated.description == "Job stuff"

    assert store.delete_area(area.id) is True
    assert store.get_area(area.id) is None
    assert store.delete_area(area.id) is False
    assert store.update_area(area.id, name="x") is None


def test_add_area_rejects_unknown_color(store: StateStore) -> None:
    """Test colors outside the palette raise ValueError."""
    with pytest.raises(ValueError):
        store.add_area("Odd", "purple")


def test_delete_area_keeps_references_by_default(store: StateStore) -> None:
    """Test default policy leaves area_id dangling on tasks and notes."""
    area = store.add_area("Work", "work")
    task = store.add_task("T", TaskState.BACKLOG, area_id=area.id)
    note = store.add_note("N", area_id=area.id)

    store.delete_area(area.id)

    assert store.get_task(task.id) == task
    assert store.get_note(note.id) == note


def test_delete_area_detach_policy_clears_references(
    clock: FakeClock, id_factory: Callable[[], str]
) -> None:
    """Test detach policy clears area_id and refreshes updated_at."""
    store = StateStore(clock=clock, id_factory=id_factory, area_delete_policy="detach")
    area = store.add_area("Work", "work")
    keep = store.add_area("Home", "personal")
    task = store.add_task("T", TaskState.BACKLOG, area_id=area.id)
    other = store.add_task("Other", TaskState.BACKLOG, area_id=keep.id)
    note = store.add_note("N", area_id=area.id)

    store.delete_area(area.id)

    detached_task = store.get_task(task.id)
    detached_note = store.get_note(note.id)
    assert detached_task is not None and detached_note is not None
    assert detached_task.area_id is None
    assert detached_task.updated_at > task.updated_at
    assert detached_note.area_id is None
    assert store.get_task(other.id) == other
    assert AreaDeletePolicy("detach") is AreaDeletePolicy.DETACH


# -------------------- change feed --------------------


def test_listeners_receive_events_and_snapshots(store: StateStore) -> None:
    """Test each mutation notifies listeners with the post-mutation snapshot."""
    received: list[tuple[StoreEvent, StateSnapshot]] = []
    unsubscribe = store.subscribe(lambda event, snapshot: received.append((event, snapshot)))

    task = store.add_task("A", TaskState.BACKLOG)
    store.move_task_to_state(task.id, TaskState.BACKLOG, TaskState.DONE)
    unsubscribe()
    store.add_task("B", TaskState.BACKLOG)

    assert [event for event, _ in received] == [
        StoreEvent("task.added", task.id),
        StoreEvent("task.moved", task.id),
    ]
    assert received[-1][1].task_order[TaskState.DONE] == [task.id]


def test_failing_listener_does_not_break_mutation(store: StateStore) -> None:
    """Test listener exceptions are swallowed and other listeners still run."""
    events: list[StoreEvent] = []

    def broken(event: StoreEvent, snapshot: StateSnapshot) -> None:
        raise RuntimeError("disk full")

    store.subscribe(broken)
    store.subscribe(lambda event, snapshot: events.append(event))

    task = store.add_task("A", TaskState.BACKLOG)

    assert store.get_task(task.id) is not None
    assert events == [StoreEvent("task.added", task.id)]


def test_snapshot_is_a_deep_copy(populated_store: StateStore) -> None:
    """Test mutating a snapshot leaves the store intact."""
    snapshot = populated_store.snapshot()
    snapshot.tasks[0].title = "hacked"
    snapshot.task_order[TaskState.BACKLOG].clear()
    snapshot.notes.clear()

    fresh = populated_store.snapshot()
    assert fresh.tasks[0].title == "Prepare slides"
    assert fresh.task_order[TaskState.BACKLOG] != []
    assert len(fresh.notes) == 2


# -------------------- loading --------------------


def test_load_repairs_order_lists(
    store: StateStore, clock: FakeClock, check_partition: Check
) -> None:
    """Test unknown, duplicate and missing ids are repaired on load."""
    source = StateStore(clock=clock, id_factory=iter(["a", "b", "c"]).__next__)
    source.add_task("A", TaskState.BACKLOG)
    source.add_task("B", TaskState.DONE)
    source.add_task("C", TaskState.QA)
    snapshot = source.snapshot()
    snapshot.task_order = {
        TaskState.DONE: ["ghost", "a", "b"],
        TaskState.BACKLOG: ["a"],
    }
    events = _record_events(store)

    store.load(snapshot)

    assert store.task_order(TaskState.DONE) == ["a", "b"]
    assert store.task_order(TaskState.BACKLOG) == []
    assert store.task_order(TaskState.QA) == ["c"]  # missing from every list
    task_a = store.get_task("a")
    assert task_a is not None
    assert task_a.state == TaskState.DONE
    assert events == [StoreEvent("state.reloaded")]
    check_partition(store)


def test_store_from_snapshot_without_task_order(clock: FakeClock) -> None:
    """Test snapshots lacking task_order place tasks by their state field."""
    source = StateStore(clock=clock, id_factory=iter(["a", "b", "c"]).__next__)
    source.add_task("A", TaskState.READY)
    source.add_task("B", TaskState.BACKLOG)
    source.add_task("C", TaskState.READY)
    snapshot = source.snapshot()
    snapshot.task_order = {}

    store = StateStore(snapshot)

    assert store.task_order(TaskState.READY) == ["a", "c"]
    assert store.task_order(TaskState.BACKLOG) == ["b"]


def test_random_operation_sequence_keeps_partition(
    store: StateStore, check_partition: Check
) -> None:
    """Test arbitrary add/move/reorder/update/delete sequences keep every task in one column."""
    rng = random.Random(20260112)
    states = list(TaskState)

    for _ in range(300):
        task_ids = [task.id for task in store.list_tasks()]
        action = rng.choice(["add", "move", "reorder", "state", "delete"]) if task_ids else "add"

        if action == "add":
            store.add_task("task", rng.choice(states))
        elif action == "move":
            task_id = rng.choice(task_ids)
            store.move_task_to_state(
                task_id, rng.choice(states), rng.choice(states), rng.randint(-2, 12)
            )
        elif action == "reorder":
            state = rng.choice(states)
            shuffled = store.task_order(state)
            rng.shuffle(shuffled)
            store.reorder_tasks_in_state(state, shuffled + [rng.choice(task_ids)])
        elif action == "state":
            store.update_task_state(rng.choice(task_ids), rng.choice(states))
        else:
            store.delete_task(rng.choice(task_ids))

        check_partition(store)


def test_load_normalizes_naive_timestamps(store: StateStore, check_partition: Check) -> None:
    """Test a snapshot with offset-free timestamps still supports updates and summaries."""
    naive = datetime(2026, 1, 12, 9, 0)
    snapshot = StateSnapshot(
        tasks=[
            Task(
                id="t1",
                title="Hand edited",
                state=TaskState.READY,
                created_at=naive,
                updated_at=naive,
                area_id="a1",
                due_date=datetime(2026, 1, 13, 9, 0),
            ),
            Task(
                id="t2",
                title="Aware",
                state=TaskState.READY,
                created_at=datetime(2026, 1, 12, 8, 0, tzinfo=UTC),
                updated_at=datetime(2026, 1, 12, 8, 0, tzinfo=UTC),
                area_id="a1",
                due_date=datetime(2026, 1, 14, 9, 0, tzinfo=UTC),
            ),
        ],
        notes=[Note(id="n1", title="N", content="", created_at=naive, updated_at=naive)],
        areas=[Area(id="a1", name="Work", color=AreaColor.WORK)],
        events=[CalendarEvent(id="e1", title="Standup", start=naive, end=naive)],
    )

    store.load(snapshot)

    updated = store.update_task("t1", title="Renamed")
    assert updated is not None
    assert updated.updated_at > datetime(2026, 1, 12, 9, 0, tzinfo=UTC)
    assert store.toggle_note_pin("n1") is not None
    assert store.snapshot().events[0].start == datetime(2026, 1, 12, 9, 0, tzinfo=UTC)

    summary = area_summary(store.snapshot(), "a1", date(2026, 1, 12))
    assert summary is not None
    assert [task.id for task in summary.urgent_tasks] == ["t1", "t2"]
    check_partition(store)


def test_update_values_are_copied_into_store(store: StateStore) -> None:
    """Test later mutation of values passed to update calls does not leak into the store."""
    task = store.add_task("T", TaskState.BACKLOG)
    note = store.add_note("N")
    area = store.add_area("A", "work")
    note_ids = ["n1"]

    store.update_task(task.id, note_ids=note_ids)
    store.update_note(note.id, title="Renamed")
    store.update_area(area.id, description="Desc")
    note_ids.append("n2")

    stored = store.get_task(task.id)
    assert stored is not None
    assert stored.note_ids == ["n1"]

    returned = store.update_note(note.id, content="body")
    assert returned is not None
    returned.title = "changed outside"
    assert store.get_note(note.id).title == "Renamed"
    returned_area = store.update_area(area.id, icon="briefcase")
    assert returned_area is not None
    returned_area.name = "changed outside"
    assert store.get_area(area.id).name == "A"
