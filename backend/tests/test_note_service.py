"""
NoteDeck Backend — Note Service Tests
======================================

Unit tests use a mock session; lifecycle tests run the service against a
real SQLite store so listings reflect what was actually committed.

What we test:
    ✅ Empty title is a silent no-op
    ✅ Creation stamps created_at, commits and revalidates the notes view
    ✅ Deletion removes exactly the targeted note; unknown IDs are harmless
    ✅ Listings are served from cache until a mutation revalidates them
    ✅ A listing that overlapped a mutation is never cached
    ✅ Store errors propagate untouched
"""

import asyncio
import uuid
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from notedeck.models.note import Note
from notedeck.schemas.note import NoteListResponse
from notedeck.services.note_service import NOTES_VIEW_PATH, NoteService
from notedeck.services.view_cache import view_cache


class TestNoteServiceAdd:
    """Unit tests for add_note with a mock session."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", None])
    async def test_missing_title_is_noop(self, mock_db_session, title):
        view_cache.set(NOTES_VIEW_PATH, "cached listing")

        result = await self.service.add_note(mock_db_session, title=title, description="B")

        assert result is None
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()
        assert view_cache.get(NOTES_VIEW_PATH) == "cached listing"

    @pytest.mark.asyncio
    async def test_add_stamps_commits_and_revalidates(self, mock_db_session):
        view_cache.set(NOTES_VIEW_PATH, "cached listing")

        await self.service.add_note(mock_db_session, title="A", description="B")

        mock_db_session.add.assert_called_once()
        note = mock_db_session.add.call_args.args[0]
        assert isinstance(note, Note)
        assert note.title == "A"
        assert note.description == "B"
        assert isinstance(note.created_at, datetime)
        assert note.created_at.tzinfo is not None
        mock_db_session.commit.assert_awaited_once()
        assert view_cache.get(NOTES_VIEW_PATH) is None

    @pytest.mark.asyncio
    async def test_missing_description_stored_as_empty(self, mock_db_session):
        await self.service.add_note(mock_db_session, title="Groceries", description=None)

        note = mock_db_session.add.call_args.args[0]
        assert note.description == ""

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("down"))
        view_cache.set(NOTES_VIEW_PATH, "cached listing")

        with pytest.raises(OperationalError):
            await self.service.add_note(mock_db_session, title="A", description="B")

        # Nothing was written, so the cached view is still accurate
        assert view_cache.get(NOTES_VIEW_PATH) == "cached listing"


class TestNoteServiceDelete:
    """Unit tests for delete_note with a mock session."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_delete_commits_and_revalidates(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        view_cache.set(NOTES_VIEW_PATH, "cached listing")

        result = await self.service.delete_note(mock_db_session, uuid.uuid4())

        assert result is None
        mock_db_session.execute.assert_awaited_once()
        mock_db_session.commit.assert_awaited_once()
        assert view_cache.get(NOTES_VIEW_PATH) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_id_does_not_raise(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)

        await self.service.delete_note(mock_db_session, uuid.uuid4())

        mock_db_session.commit.assert_awaited_once()


class TestNoteServiceList:
    """Unit tests for list_notes with a mock session."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        result = await self.service.list_notes(mock_db_session)

        assert result.notes == []
        assert result.total_count == 0

    @pytest.mark.asyncio
    async def test_list_served_from_cache(self, mock_db_session):
        cached = NoteListResponse(notes=[], total_count=0)
        view_cache.set(NOTES_VIEW_PATH, cached)

        result = await self.service.list_notes(mock_db_session)

        assert result is cached
        mock_db_session.execute.assert_not_awaited()


class TestNoteLifecycle:
    """The note lifecycle against a real (SQLite) store."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_empty_store_lists_nothing(self, db_session):
        result = await self.service.list_notes(db_session)

        assert result.notes == []
        assert result.total_count == 0

    @pytest.mark.asyncio
    async def test_create_adds_exactly_one_note(self, db_session):
        await self.service.add_note(db_session, title="Existing", description="")
        before = await self.service.list_notes(db_session)

        await self.service.add_note(db_session, title="A", description="B")
        after = await self.service.list_notes(db_session)

        assert after.total_count == before.total_count + 1
        before_ids = {n.id for n in before.notes}
        added = [n for n in after.notes if n.id not in before_ids]
        assert len(added) == 1
        assert added[0].title == "A"
        assert added[0].description == "B"
        assert added[0].id is not None
        assert str(added[0].id)

    @pytest.mark.asyncio
    async def test_create_with_empty_title_adds_nothing(self, db_session):
        await self.service.add_note(db_session, title="", description="B")

        result = await self.service.list_notes(db_session)
        assert result.total_count == 0

    @pytest.mark.asyncio
    async def test_delete_removes_only_that_note(self, db_session):
        for title in ("one", "two", "three"):
            await self.service.add_note(db_session, title=title, description="")
        listing = await self.service.list_notes(db_session)
        target = next(n for n in listing.notes if n.title == "two")

        await self.service.delete_note(db_session, target.id)

        after = await self.service.list_notes(db_session)
        assert {n.title for n in after.notes} == {"one", "three"}
        assert target.id not in {n.id for n in after.notes}

    @pytest.mark.asyncio
    async def test_delete_unknown_id_leaves_listing_unchanged(self, db_session):
        await self.service.add_note(db_session, title="keep me", description="")
        before = await self.service.list_notes(db_session)

        await self.service.delete_note(db_session, uuid.uuid4())

        after = await self.service.list_notes(db_session)
        assert {n.id for n in after.notes} == {n.id for n in before.notes}

    @pytest.mark.asyncio
    async def test_cached_listing_is_stale_until_revalidated(self, db_session):
        """Writes that bypass the service stay invisible until the path is revalidated."""
        await self.service.list_notes(db_session)  # primes the cache (empty)

        db_session.add(Note(title="direct", description="", created_at=datetime.now()))
        await db_session.commit()

        assert (await self.service.list_notes(db_session)).total_count == 0

        view_cache.revalidate_path(NOTES_VIEW_PATH)
        assert (await self.service.list_notes(db_session)).total_count == 1

    @pytest.mark.asyncio
    async def test_mutations_invalidate_cached_listing(self, db_session):
        await self.service.list_notes(db_session)  # primes the cache

        await self.service.add_note(db_session, title="fresh", description="")
        after_add = await self.service.list_notes(db_session)
        assert [n.title for n in after_add.notes] == ["fresh"]

        await self.service.delete_note(db_session, after_add.notes[0].id)
        after_delete = await self.service.list_notes(db_session)
        assert after_delete.notes == []

    @pytest.mark.asyncio
    async def test_listing_overlapping_a_create_is_not_cached(self, db_session_factory):
        """A listing whose query ran before a create committed must not be cached after it."""
        query_done = asyncio.Event()
        release = asyncio.Event()

        async with db_session_factory() as reader, db_session_factory() as writer:
            execute = reader.execute

            async def held_execute(*args, **kwargs):
                result = await execute(*args, **kwargs)
                query_done.set()
                await release.wait()
                return result

            reader.execute = held_execute

            in_flight = asyncio.create_task(self.service.list_notes(reader))
            await query_done.wait()

            await self.service.add_note(writer, title="A", description="B")
            release.set()

            assert (await in_flight).total_count == 0
            assert view_cache.get(NOTES_VIEW_PATH) is None
            assert (await self.service.list_notes(writer)).total_count == 1
