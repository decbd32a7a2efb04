"""
HTTP surface: routing, auth dependencies and error mapping
"""


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    response = client.get("/ready")
    assert response.json() == {"status": "ready"}
    assert response.headers["X-Frame-Options"] == "DENY"


def test_register_login_and_me(client):
    response = client.post("/api/v1/auth/register", json={
        "email": "erin@example.com", "password": "secret-password", "username": "Erin"
    })
    assert response.status_code == 201
    assert response.json()["username"] == "erin"

    token = client.post("/api/v1/auth/login", json={
        "email": "erin@example.com", "password": "secret-password"
    }).json()["access_token"]
    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["email"] == "erin@example.com"
    assert me["profile"]["username"] == "erin"


def test_taken_username_is_conflict(client, alice):
    response = client.post("/api/v1/auth/register", json={
        "email": "x@example.com", "password": "secret-password", "username": "alice"
    })
    assert response.status_code == 409
    assert response.json() == {"detail": "Username already taken."}


def test_protected_routes_need_token(client):
    assert client.post("/api/v1/posts", json={"content": "hi"}).status_code in (401, 403)
    response = client.get("/api/v1/profiles/me", headers={"Authorization": "Bearer bogus"})
    assert response.status_code == 401


def test_public_reads_work_anonymously(client, db, alice):
    db.put("posts", user_id=alice, content="hello world")
    assert client.get(f"/api/v1/profiles/{alice}").json()["username"] == "alice"
    assert client.get("/api/v1/profiles/by-username/Alice").json()["id"] == alice
    assert [p["content"] for p in client.get("/api/v1/posts").json()] == ["hello world"]
    assert client.get("/api/v1/profiles/username-available/ALICE").json() == {
        "username": "alice", "available": False
    }


def test_post_lifecycle(client, auth_headers, alice, bob):
    created = client.post("/api/v1/posts", json={"content": "hi"}, headers=auth_headers(alice))
    assert created.status_code == 201
    post_id = created.json()["id"]

    denied = client.delete(f"/api/v1/posts/{post_id}", headers=auth_headers(bob))
    assert denied.status_code == 403
    assert denied.json() == {"detail": "Permission denied"}

    assert client.delete(f"/api/v1/posts/{post_id}", headers=auth_headers(alice)).status_code == 204
    assert client.get(f"/api/v1/posts/{post_id}").status_code == 404


def test_follow_and_feed(client, auth_headers, db, alice, bob):
    db.put("posts", user_id=bob, content="bob says hi")
    assert client.post(f"/api/v1/follows/{bob}", headers=auth_headers(alice)).status_code == 201
    assert client.post(f"/api/v1/follows/{bob}", headers=auth_headers(alice)).status_code == 409

    status = client.get(f"/api/v1/follows/{bob}/status", headers=auth_headers(alice)).json()
    assert status["following"] is True
    feed = client.get("/api/v1/posts/feed", headers=auth_headers(alice)).json()
    assert [p["content"] for p in feed] == ["bob says hi"]


def test_group_messaging_flow(client, auth_headers, alice, bob, carol):
    group = client.post("/api/v1/groups", json={"name": "Team"}, headers=auth_headers(alice)).json()
    added = client.post(
        f"/api/v1/groups/{group['id']}/members", json={"user_id": bob}, headers=auth_headers(alice)
    )
    assert added.status_code == 201

    sent = client.post(
        f"/api/v1/messages/groups/{group['id']}", json={"content": "hello team"}, headers=auth_headers(bob)
    )
    assert sent.status_code == 201

    history = client.get(f"/api/v1/messages/groups/{group['id']}", headers=auth_headers(alice)).json()
    assert [m["content"] for m in history] == ["hello team"]
    assert client.get(f"/api/v1/messages/groups/{group['id']}", headers=auth_headers(carol)).json() == []
    assert client.get(f"/api/v1/groups/{group['id']}", headers=auth_headers(carol)).status_code == 404

    demote = client.patch(
        f"/api/v1/groups/{group['id']}/members/{alice}", json={"is_admin": False}, headers=auth_headers(alice)
    )
    assert demote.status_code == 403


def test_direct_messages(client, auth_headers, alice, bob):
    sent = client.post(
        "/api/v1/messages/direct", json={"recipient_id": bob, "content": "hey"}, headers=auth_headers(alice)
    )
    assert sent.status_code == 201
    message_id = sent.json()["id"]

    inbox = client.get("/api/v1/messages/direct", headers=auth_headers(bob)).json()
    assert [m["id"] for m in inbox] == [message_id]
    assert client.post(f"/api/v1/messages/{message_id}/read", headers=auth_headers(bob)).json()["read"] is True


def test_media_upload_and_delete(client, auth_headers, db, alice, bob):
    response = client.post(
        "/api/v1/media",
        files={"file": ("cat.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=auth_headers(alice),
    )
    assert response.status_code == 201
    key = response.json()["key"]
    assert key.startswith(f"{alice}/")

    assert client.delete(f"/api/v1/media/{key}", headers=auth_headers(bob)).status_code == 403
    assert client.delete(f"/api/v1/media/{key}", headers=auth_headers(alice)).status_code == 204
    assert db.storage.objects == {}


def test_settings_endpoints(client, auth_headers, db, alice, bob):
    headers = auth_headers(alice)

    state = client.put("/api/v1/settings/theme", json={"theme": "dk-night"}, headers=headers).json()
    assert state["profile"]["theme"] == "dk-night"
    assert state["message"] == {"type": "success", "text": "Theme updated!"}

    taken = client.put("/api/v1/settings/username", json={"username": "BOB"}, headers=headers)
    assert taken.status_code == 409
    assert taken.json() == {"detail": "Username already taken."}

    state = client.post("/api/v1/settings/verification", json={"reason": "Author"}, headers=headers).json()
    assert state["verification_status"] == "Pending: Author"

    mismatch = client.put(
        "/api/v1/settings/password", json={"new_password": "abcdefg", "confirm_password": "abcdefh"}, headers=headers
    )
    assert mismatch.status_code == 422
    assert mismatch.json() == {"detail": "Passwords do not match."}

    db.identity_error = "Email address is invalid"
    failed = client.put("/api/v1/settings/email", json={"email": "new@example.com"}, headers=headers)
    assert failed.status_code == 400
    assert failed.json() == {"detail": "Email address is invalid"}

    db.identity_error = None
    changed = client.put("/api/v1/settings/email", json={"email": "new@example.com"}, headers=headers)
    assert changed.status_code == 200
    assert db.users[alice].new_email == "new@example.com"

    assert client.get("/api/v1/settings", headers=headers).json()["email"] == "alice@example.com"


def test_delete_account(client, auth_headers, db, alice):
    assert client.delete("/api/v1/auth/account", headers=auth_headers(alice)).status_code == 204
    assert db.find("profiles") == []
