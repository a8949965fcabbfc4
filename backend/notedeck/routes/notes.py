"""
NoteDeck Backend — Notes Route Handlers
========================================

What:  GET /api/notes (list), POST /api/notes (create), DELETE /api/notes/{id}.
Who:   Called by the frontend's notes page, creation form and delete buttons.

Creation takes form fields, exactly what the frontend's <form> submits.
Both mutations answer 204 and the client re-fetches the listing; the
service has already revalidated the cached view by then.

Caching Strategy:
    - GET /api/notes: served from the server-side view cache; browsers must
      revalidate (no-cache) since any mutation can change it
    - POST / DELETE: never cached
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Form, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from notedeck.database import get_db_session
from notedeck.schemas.note import ErrorResponse, NoteListResponse
from notedeck.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        200: {"description": "Every stored note", "model": NoteListResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List all notes",
)
async def list_notes(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> NoteListResponse:
    """
    Returns the full notes collection. An empty store yields `{"notes": [], "total_count": 0}`.
    """
    result = await note_service.list_notes(db)

    response.headers["X-Total-Count"] = str(result.total_count)
    response.headers["Cache-Control"] = "private, no-cache"
    return result


@router.post(
    "/notes",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        204: {"description": "Note stored, or ignored because the title was empty"},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a note",
)
async def add_note(
    title: Optional[str] = Form(default=None, description="Note title; empty means no-op"),
    description: Optional[str] = Form(default=None, description="Note description"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Creates a note from the submitted form.

    A missing or empty title is accepted and ignored (still 204): the form
    already requires it client-side, so the server does not report it.
    """
    await note_service.add_note(db, title=title, description=description)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        204: {"description": "Note removed, or it did not exist"},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a note by ID",
)
async def delete_note(
    note_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Deletes one note. Unknown IDs are not an error.

    Invalid UUIDs return 422 Unprocessable Entity (FastAPI default).
    """
    await note_service.delete_note(db, note_id=note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
