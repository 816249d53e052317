from conftest import auth_header, login, register


def test_public_profile_includes_post_count(client, alice):
    _, headers = alice
    client.post("/api/posts", json={"content": "one"}, headers=headers)
    client.post("/api/posts", json={"content": "two"}, headers=headers)

    res = client.get("/api/users/alice")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["username"] == "alice"
    assert data["email"] == "alice@x.com"
    assert data["postCount"] == 2
    assert data["active"] is True
    assert "password" not in data


def test_unknown_profile_is_404(client):
    res = client.get("/api/users/nobody")
    assert res.status_code == 404
    assert res.json()["message"] == "User not found with username: nobody"


def test_update_own_profile(client, alice):
    _, headers = alice
    res = client.put(
        "/api/users/me",
        json={"displayName": "Alice A.", "bio": "hi there"},
        headers=headers,
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["displayName"] == "Alice A."
    assert data["bio"] == "hi there"
    assert data["email"] == "alice@x.com"


def test_update_by_id_for_self(client, alice):
    alice_id, headers = alice
    res = client.put(f"/api/users/{alice_id}", json={"bio": "via id"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["bio"] == "via id"


def test_update_email_conflict(client, alice, bob):
    _, headers = alice
    res = client.put("/api/users/me", json={"email": "bob@x.com"}, headers=headers)
    assert res.status_code == 409


def test_update_with_invalid_fields_is_400(client, alice):
    _, headers = alice
    assert client.put("/api/users/me", json={"email": "nope"}, headers=headers).status_code == 400
    assert client.put("/api/users/me", json={"password": "short"}, headers=headers).status_code == 400


def test_password_change_takes_effect(client, alice):
    _, headers = alice
    res = client.put("/api/users/me", json={"password": "new-password-1"}, headers=headers)
    assert res.status_code == 200

    assert client.post(
        "/api/auth/login", json={"username": "alice", "password": "pw12345678"}
    ).status_code == 401
    assert login(client, "alice", "new-password-1")


def test_cannot_modify_another_user(client, alice, bob):
    _, alice_headers = alice
    bob_id, _ = bob

    res = client.put(f"/api/users/{bob_id}", json={"bio": "pwned"}, headers=alice_headers)
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"

    assert client.delete(f"/api/users/{bob_id}", headers=alice_headers).status_code == 403
    assert client.get("/api/users/bob").json()["data"].get("bio") is None


def test_delete_account_removes_posts_and_follow_links(client, alice, bob):
    alice_id, alice_headers = alice
    bob_id, bob_headers = bob
    res = client.post("/api/posts", json={"content": "bye"}, headers=bob_headers)
    post_id = res.json()["data"]["id"]
    client.post(f"/api/follow/{alice_id}", headers=bob_headers)
    client.post(f"/api/follow/{bob_id}", headers=alice_headers)

    res = client.delete(f"/api/users/{bob_id}", headers=bob_headers)
    assert res.status_code == 200
    assert res.json()["data"]["message"] == "User deleted successfully"

    assert client.get("/api/users/bob").status_code == 404
    assert client.get(f"/api/posts/{post_id}").status_code == 404
    me = client.get("/api/users/me", headers=alice_headers).json()["data"]
    assert me["followers"] == [] and me["following"] == []


def test_username_can_be_reused_after_delete(client):
    register(client, "dave")
    headers = auth_header(login(client, "dave"))
    client.delete("/api/users/me", headers=headers)

    assert register(client, "dave")
