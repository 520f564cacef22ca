# Overview: Service-layer operations for notes.

from __future__ import annotations

from ..extensions import db
from ..models import Note
from ..validation import NotFoundError


def list_notes(user_id: str) -> list[Note]:
    return (
        db.session.query(Note)
        .filter(Note.user_id == user_id)
        .order_by(Note.created_at.desc(), Note.id)
        .all()
    )


def get_note(user_id: str, note_id: str) -> Note:
    note = db.session.get(Note, note_id)
    if not note or note.user_id != user_id:
        raise NotFoundError("Note not found")
    return note


def create_note(user_id: str, patch: dict) -> Note:
    note = Note(user_id=user_id, content=patch["content"])
    db.session.add(note)
    db.session.commit()
    return note


def delete_note(user_id: str, note_id: str) -> None:
    note = get_note(user_id, note_id)
    db.session.delete(note)
    db.session.commit()
