"""Note API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from daybook.api.models import CreateNoteRequest, NoteResponse, UpdateNoteRequest
from daybook.factory import get_store
from daybook.store.projections import filter_notes, sort_notes
from daybook.store.state_store import StateStore

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[StateStore, Depends(get_store)]


def _note_not_found(note_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Note not found: {note_id}")


@router.get("/notes", response_model=list[NoteResponse])
async def list_notes(
    store: StoreDep, area: str | None = None, q: str | None = None
) -> list[NoteResponse]:
    """List notes, pinned first and then most recently updated.

    Args:
        area: Only notes in this area
        q: Case-insensitive search over title and content
    """
    notes = sort_notes(filter_notes(store.list_notes(), area_id=area, query=q))
    return [NoteResponse.model_validate(note) for note in notes]


@router.post("/notes", response_model=NoteResponse, status_code=201)
async def create_note(store: StoreDep, request: CreateNoteRequest) -> NoteResponse:
    """Create a note."""
    note = store.add_note(
        request.title,
        request.content,
        area_id=request.area_id,
        task_id=request.task_id,
        is_pinned=request.is_pinned,
    )
    logger.info(f"Created note {note.id}")
    return NoteResponse.model_validate(note)


@router.patch("/notes/{note_id}", response_model=NoteResponse)
async def update_note(store: StoreDep, note_id: str, request: UpdateNoteRequest) -> NoteResponse:
    """Apply a partial update; only fields present in the body change.

    Raises:
        HTTPException: If note not found (404) or a required field is cleared (400)
    """
    try:
        note = store.update_note(note_id, **request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if note is None:
        raise _note_not_found(note_id)
    return NoteResponse.model_validate(note)


@router.delete("/notes/{note_id}", status_code=204)
async def delete_note(store: StoreDep, note_id: str) -> None:
    """Delete a note.

    Raises:
        HTTPException: If note not found
    """
    if not store.delete_note(note_id):
        raise _note_not_found(note_id)


@router.post("/notes/{note_id}/pin", response_model=NoteResponse)
async def toggle_note_pin(store: StoreDep, note_id: str) -> NoteResponse:
    """Pin or unpin a note.

    Raises:
        HTTPException: If note not found
    """
    note = store.toggle_note_pin(note_id)
    if note is None:
        raise _note_not_found(note_id)
    return NoteResponse.model_validate(note)
