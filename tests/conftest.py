"""Test fixtures for Daybook."""

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from daybook.store.models import TaskState
from daybook.store.state_store import StateStore

START = datetime(2026, 1, 12, 9, 0, tzinfo=UTC)


class FakeClock:
    """Deterministic clock advancing by a fixed step on every reading."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock() -> FakeClock:
    """Clock ticking one second per reading."""
    return FakeClock()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Sequential ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def store(clock: FakeClock, id_factory: Callable[[], str]) -> StateStore:
    """Empty store with deterministic clock and ids."""
    return StateStore(clock=clock, id_factory=id_factory)


@pytest.fixture
def check_partition() -> Callable[[StateStore], None]:
    """Assert every task sits in exactly the column matching its state."""

    def check(store: StateStore) -> None:
        snapshot = store.snapshot()
        tasks = {task.id: task for task in snapshot.tasks}
        listed = [task_id for ids in snapshot.task_order.values() for task_id in ids]

        assert len(listed) == len(set(listed)), "task listed in more than one place"
        assert set(listed) == set(tasks)
        for state, ids in snapshot.task_order.items():
            for task_id in ids:
                assert tasks[task_id].state == state

    return check


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Path of a not-yet-existing state file."""
    return tmp_path / "daybook" / "state.json"


@pytest.fixture
def populated_store(store: StateStore) -> StateStore:
    """Store with two areas, four tasks and two notes."""
    work = store.add_area("Work", "work")
    health = store.add_area("Health", "health")
    store.add_task("Prepare slides", TaskState.IN_PROGRESS, area_id=work.id)
    store.add_task("Review code", TaskState.QA, area_id=work.id)
    store.add_task("Run 5km", TaskState.READY, area_id=health.id)
    store.add_task("Read chapter", TaskState.BACKLOG)
    store.add_note("Project ideas", "Explore new tech", area_id=work.id)
    store.add_note("Recipe", "Quinoa and vegetables", area_id=health.id)
    return store
