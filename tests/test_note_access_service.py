"""Note access rule tests."""

from __future__ import annotations

from typing import Any

import pytest

from app.services.note_access_service import NoteAccessService
from app.utils.errors import NotFoundError


def _seed_note(fake_db, **overrides: Any) -> None:
    note = {
        "id": "note-1",
        "user_id": "author-1",
        "price": "5.00",
        "is_published": True,
        "is_exclusive": False,
        "is_sold": False,
        "original_file_path": "author-1/lecture.pdf",
    }
    note.update(overrides)
    fake_db.seed("notes", note)


def test_paid_note_is_locked_without_purchase(fake_db) -> None:
    _seed_note(fake_db)

    access = NoteAccessService(fake_db).resolve("reader-1", "note-1")

    assert access["can_view"] is False
    assert access["file_url"] is None
    assert fake_db.signed == []


def test_buyer_gets_a_short_lived_signed_url(fake_db) -> None:
    _seed_note(fake_db)
    fake_db.seed("purchases", {"id": "p1", "buyer_id": "reader-1", "note_id": "note-1"})

    access = NoteAccessService(fake_db).resolve("reader-1", "note-1")

    assert access["can_view"] is True
    assert access["has_purchased"] is True
    assert fake_db.signed == [("note-images", "author-1/lecture.pdf", 3600)]
    assert access["file_url"].startswith("https://storage.test/note-images/")


def test_free_notes_are_open_to_everyone(fake_db) -> None:
    _seed_note(fake_db, price=0, original_file_path=None)

    access = NoteAccessService(fake_db).resolve("reader-1", "note-1")

    assert access["can_view"] is True
    assert access["file_url"] is None


def test_author_sees_own_unpublished_note(fake_db) -> None:
    _seed_note(fake_db, is_published=False)

    access = NoteAccessService(fake_db).resolve("author-1", "note-1")

    assert access["can_view"] is True
    assert access["is_author"] is True


def test_unpublished_note_is_hidden_from_others(fake_db) -> None:
    _seed_note(fake_db, is_published=False)
    with pytest.raises(NotFoundError):
        NoteAccessService(fake_db).resolve("reader-1", "note-1")
