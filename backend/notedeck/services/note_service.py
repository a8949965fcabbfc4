"""
NoteDeck Backend — Note Service
================================

What:  The note lifecycle: create, delete, list.
Who:   Called by the /api/notes route handlers.

Flows:
    create:  guard on title → insert row → commit → revalidate "/notes"
    delete:  delete row by id → commit → revalidate "/notes"
    list:    cached "/notes" view, else generation → select all → cache

Error Handling Strategy:
    A missing title is not an error: creation simply does nothing.
    Store failures (connection loss, constraint or permission errors raised as
    SQLAlchemyError) are NOT caught here. They propagate to the error
    boundary in main.py, and the per-request session rolls back.

Consistency:
    Each mutation commits BEFORE revalidating, so a listing rendered after
    revalidation can never be built from an uncommitted transaction. A listing
    whose query overlapped the revalidation is discarded by the view cache's
    generation check (see view_cache.py), so it cannot re-cache the old rows.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from notedeck.models.note import Note
from notedeck.schemas.note import NoteListResponse, NoteResponse
from notedeck.services.view_cache import view_cache

logger = logging.getLogger(__name__)

# View path the notes listing is cached under
NOTES_VIEW_PATH = "/notes"


class NoteService:
    """
    Stateless note operations; every call receives its own session.
    """

    async def add_note(
        self,
        db: AsyncSession,
        title: Optional[str],
        description: Optional[str] = None,
    ) -> None:
        """
        Append a note to the store.

        A missing or empty title returns immediately: nothing is written and
        nothing is raised.

        Args:
            db: Async database session
            title: Note title (required for anything to happen)
            description: Free text; None is stored as ""
        """
        if not title:
            logger.debug("Ignoring note creation without a title")
            return

        note = Note(
            title=title,
            description=description or "",
            created_at=datetime.now(timezone.utc),
        )
        db.add(note)
        # Why commit here: the revalidation below must follow a durable write
        await db.commit()
        logger.info("Note created: %s", note.id)

        view_cache.revalidate_path(NOTES_VIEW_PATH)

    async def delete_note(self, db: AsyncSession, note_id: UUID) -> None:
        """
        Remove the note with `note_id`. An unknown id deletes nothing.
        """
        result = await db.execute(delete(Note).where(Note.id == note_id))
        await db.commit()

        if result.rowcount:
            logger.info("Note deleted: %s", note_id)
        else:
            logger.info("Delete requested for unknown note %s; nothing removed", note_id)

        view_cache.revalidate_path(NOTES_VIEW_PATH)

    async def list_notes(self, db: AsyncSession) -> NoteListResponse:
        """
        Return every note in the store.

        Query plan:
            SELECT * FROM notes
            → no ordering, filtering or paging; the store's default order is kept

        The rendered listing is cached under NOTES_VIEW_PATH until the next
        mutation revalidates it (or the cache TTL runs out).

        Ordering:
            generation → SELECT → set(generation)
            A mutation that commits and revalidates while the SELECT is in
            flight changes the generation, so this (older) listing is returned
            to its caller but never cached.
        """
        cached = view_cache.get(NOTES_VIEW_PATH)
        if cached is not None:
            return cached

        # Why before the query: a revalidation during the await must win
        generation = view_cache.generation(NOTES_VIEW_PATH)
        result = await db.execute(select(Note))
        notes = list(result.scalars().all())

        listing = NoteListResponse(
            notes=[
                NoteResponse(
                    id=note.id,
                    title=note.title,
                    description=note.description or "",
                    created_at=note.created_at,
                )
                for note in notes
            ],
            total_count=len(notes),
        )
        view_cache.set(NOTES_VIEW_PATH, listing, generation=generation)
        return listing


note_service = NoteService()
