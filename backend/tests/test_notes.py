"""Note tests."""

from puantaj.extensions import db
from puantaj.models import Note


def _create_note(client, headers, content):
    resp = client.post("/api/notes", json={"content": content}, headers=headers)
    assert resp.status_code == 201, resp.json
    return resp.json


class TestNotes:
    def test_create_and_list(self, client, headers, user):
        created = _create_note(client, headers, "  Pazartesi çimento siparişi  ")
        assert created["content"] == "Pazartesi çimento siparişi"
        assert created["user_id"] == user.id
        assert created["created_at"].endswith("Z")

        listed = client.get("/api/notes", headers=headers).json
        assert [n["id"] for n in listed] == [created["id"]]

    def test_content_required(self, client, headers):
        assert client.post("/api/notes", json={}, headers=headers).status_code == 400
        assert client.post("/api/notes", json={"content": "   "}, headers=headers).status_code == 400
        assert db.session.query(Note).count() == 0

    def test_unknown_field_rejected(self, client, headers):
        resp = client.post("/api/notes", json={"content": "x", "title": "y"}, headers=headers)
        assert resp.status_code == 400

    def test_delete(self, client, headers):
        note = _create_note(client, headers, "Fatura kesilecek")
        assert client.delete(f"/api/notes/{note['id']}", headers=headers).status_code == 204
        assert client.get("/api/notes", headers=headers).json == []
        assert client.delete(f"/api/notes/{note['id']}", headers=headers).status_code == 404

    def test_notes_are_private(self, client, headers, other_headers):
        note = _create_note(client, headers, "Özel not")
        assert client.get("/api/notes", headers=other_headers).json == []
        assert client.delete(f"/api/notes/{note['id']}", headers=other_headers).status_code == 404
        assert len(client.get("/api/notes", headers=headers).json) == 1
