"""Seed a store with sample data from a YAML document."""

import logging
import uuid
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import yaml

from daybook.store.models import Subtask
from daybook.store.state_store import StateStore

logger = logging.getLogger(__name__)

SAMPLE_DATA_PATH = Path(__file__).parent / "data" / "sample.yaml"


def load_seed_document(path: Path = SAMPLE_DATA_PATH) -> dict[str, Any]:
    """Read a seed document.

    Raises:
        ValueError: If the file is not valid YAML or not a mapping
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in seed file {path}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Seed file {path} must contain a mapping")
    return data


def seed_store(store: StateStore, document: dict[str, Any]) -> dict[str, int]:
    """Add the areas, tasks and notes of a seed document through store operations.

    Tasks and notes name their area by its ``key``; unknown keys leave the
    item without an area.

    Returns:
        Number of created items per collection
    """
    area_ids: dict[str, str] = {}
    for raw in document.get("areas") or []:
        area = store.add_area(
            raw["name"],
            raw["color"],
            description=raw.get("description"),
            icon=raw.get("icon"),
        )
        area_ids[str(raw.get("key", raw["name"]))] = area.id

    task_count = 0
    for raw in document.get("tasks") or []:
        store.add_task(
            raw["title"],
            raw.get("state", "backlog"),
            description=raw.get("description"),
            area_id=_area_ref(area_ids, raw.get("area")),
            due_date=_to_datetime(raw.get("due_date")),
            scheduled_date=_to_date(raw.get("scheduled_date")),
            scheduled_time=_to_time(raw.get("scheduled_time")),
            duration=raw.get("duration"),
            subtasks=[
                Subtask(
                    id=uuid.uuid4().hex,
                    title=item["title"],
                    completed=bool(item.get("completed", False)),
                )
                for item in raw.get("subtasks") or []
            ],
        )
        task_count += 1

    note_count = 0
    for raw in document.get("notes") or []:
        store.add_note(
            raw["title"],
            raw.get("content", ""),
            area_id=_area_ref(area_ids, raw.get("area")),
            is_pinned=bool(raw.get("pinned", False)),
        )
        note_count += 1

    counts = {"areas": len(area_ids), "tasks": task_count, "notes": note_count}
    logger.info(f"[Seed] Seeded {counts}")
    return counts


def _area_ref(area_ids: dict[str, str], key: Any) -> str | None:
    if key is None:
        return None
    area_id = area_ids.get(str(key))
    if area_id is None:
        logger.warning(f"[Seed] Unknown area key: {key}")
    return area_id


def _to_datetime(value: Any) -> datetime | None:
    """YAML gives datetime for full timestamps and date for bare days."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return datetime.fromisoformat(str(value))


def _to_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _to_time(value: Any) -> time | None:
    if value is None:
        return None
    if isinstance(value, time):
        return value
    # Unquoted HH:MM is read by YAML 1.1 as a base-60 integer (minutes)
    if isinstance(value, int):
        return time(value // 60, value % 60)
    return time.fromisoformat(str(value))
