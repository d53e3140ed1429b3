# tests/test_likes_views.py
import io
import uuid


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _user_id(client, token):
    return client.get("/api/v1/auth/me", headers=_auth(token)).get_json()["id"]


def _note(client, token, pdf):
    data = {"title": "Cells", "subject": "Biology", "file": (io.BytesIO(pdf), "cells.pdf", "application/pdf")}
    r = client.post("/api/v1/notes/", headers=_auth(token), data=data, content_type="multipart/form-data")
    assert r.status_code == 201
    return r.get_json()["id"]


def test_like_toggle_keeps_count_and_set_in_sync(client, register, text_pdf, lorem_200):
    owner = register("owner@example.com")
    note_id = _note(client, owner, text_pdf([lorem_200]))

    # u1, u2, u3 aiment déjà la note
    first_three = [register(f"u{i}@example.com") for i in (1, 2, 3)]
    for token in first_three:
        assert client.post(f"/api/v1/notes/{note_id}/like", headers=_auth(token)).status_code == 200
    note = client.get(f"/api/v1/notes/{note_id}").get_json()
    assert note["likes"] == 3 and len(note["liked_by"]) == 3

    # u4 like -> 4
    u4 = register("u4@example.com")
    u4_id = _user_id(client, u4)
    r = client.post(f"/api/v1/notes/{note_id}/like", headers=_auth(u4))
    body = r.get_json()
    assert body["liked"] is True
    assert body["note"]["likes"] == 4
    assert u4_id in body["note"]["liked_by"]

    # u4 re-like (toggle) -> 3, retiré de liked_by
    r = client.post(f"/api/v1/notes/{note_id}/like", headers=_auth(u4))
    body = r.get_json()
    assert body["liked"] is False
    assert body["note"]["likes"] == 3
    assert u4_id not in body["note"]["liked_by"]
    assert body["note"]["likes"] == len(body["note"]["liked_by"])


def test_like_requires_auth_and_existing_note(client, register):
    r = client.post(f"/api/v1/notes/{uuid.uuid4()}/like")
    assert r.status_code == 401

    token = register("u1@example.com")
    r = client.post(f"/api/v1/notes/{uuid.uuid4()}/like", headers=_auth(token))
    assert r.status_code == 404


def test_each_view_counts_once_without_dedup(client, register, text_pdf, lorem_200):
    owner = register("owner@example.com")
    note_id = _note(client, owner, text_pdf([lorem_200]))

    # même visiteur (anonyme) trois fois
    for expected in (1, 2, 3):
        r = client.post(f"/api/v1/notes/{note_id}/view")
        assert r.status_code == 200
        assert r.get_json()["views"] == expected

    # un utilisateur connecté compte aussi
    r = client.post(f"/api/v1/notes/{note_id}/view", headers=_auth(owner))
    assert r.get_json()["views"] == 4
    assert client.get(f"/api/v1/notes/{note_id}").get_json()["views"] == 4


def test_view_unknown_note(client):
    r = client.post(f"/api/v1/notes/{uuid.uuid4()}/view")
    assert r.status_code == 404
