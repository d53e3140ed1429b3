# tests/test_auth.py
def test_register_login_me_refresh_logout(client):
    # register
    r = client.post("/api/v1/auth/register", json={
        "email": "T1@Example.com", "password": "SuperSecret123", "display_name": "Tina"
    })
    assert r.status_code == 201
    data = r.get_json()
    assert "access_token" in data and "refresh_token" in data

    # login (email normalisé)
    r = client.post("/api/v1/auth/login", json={"email": "t1@example.com", "password": "SuperSecret123"})
    assert r.status_code == 200
    toks = r.get_json()
    access = toks["access_token"]
    refresh = toks["refresh_token"]

    # me
    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 200
    me = r.get_json()
    assert me["email"] == "t1@example.com"
    assert me["display_name"] == "Tina"

    # refresh -> nouveau couple, l'ancien refresh est révoqué
    r = client.post("/api/v1/auth/refresh", headers={"Authorization": f"Bearer {refresh}"})
    assert r.status_code == 200
    new_access = r.get_json()["access_token"]
    assert new_access and new_access != access

    r = client.post("/api/v1/auth/refresh", headers={"Authorization": f"Bearer {refresh}"})
    assert r.status_code == 401

    # logout access -> doit être révoqué
    r = client.post("/api/v1/auth/logout", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 200

    # /me avec l’ancien access -> 401 revoked
    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 401
    assert r.get_json()["error"]["code"] == "token_revoked"


def test_register_duplicate_and_bad_credentials(client):
    body = {"email": "dup@example.com", "password": "SuperSecret123"}
    assert client.post("/api/v1/auth/register", json=body).status_code == 201

    r = client.post("/api/v1/auth/register", json=body)
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "conflict"

    r = client.post("/api/v1/auth/login", json={"email": "dup@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.get_json()["error"]["code"] == "invalid_credentials"


def test_register_validation_error(client):
    r = client.post("/api/v1/auth/register", json={"email": "not-an-email", "password": "short"})
    assert r.status_code == 400
    err = r.get_json()["error"]
    assert err["code"] == "validation_error"
    assert "email" in err["details"] and "password" in err["details"]


def test_me_requires_token(client):
    r = client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.get_json()["error"]["code"] == "authorization_required"


def test_register_normalizes_input_and_me_counts_notes(client):
    r = client.post("/api/v1/auth/register", json={
        "email": "  Zoe@Example.COM ", "password": "SuperSecret123", "display_name": "  Zoé  "
    })
    assert r.status_code == 201
    access = r.get_json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access}"}).get_json()
    assert me["email"] == "zoe@example.com"
    assert me["display_name"] == "Zoé"
    assert me["notes_count"] == 0


def test_logout_records_owner_and_expiry(client, app):
    from noteally.auth.models import TokenBlocklist

    r = client.post("/api/v1/auth/register", json={"email": "bob@example.com", "password": "SuperSecret123"})
    access = r.get_json()["access_token"]
    user_id = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access}"}).get_json()["id"]
    assert client.post("/api/v1/auth/logout", headers={"Authorization": f"Bearer {access}"}).status_code == 200
    # deuxième logout: le token est déjà refusé
    assert client.post("/api/v1/auth/logout", headers={"Authorization": f"Bearer {access}"}).status_code == 401

    with app.app_context():
        rows = TokenBlocklist.query.all()
        assert len(rows) == 1
        row = rows[0]
        assert row.token_type == "access"
        assert str(row.user_id) == user_id
        assert row.expires_at is not None
