def post(client, headers, content):
    res = client.post("/api/posts", json={"content": content}, headers=headers)
    assert res.status_code == 201
    return res.json()["data"]["id"]


def test_personal_feed_contains_followed_and_own_posts(client, alice, bob, carol):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    _, carol_headers = carol

    post(client, bob_headers, "bob 1")
    post(client, carol_headers, "carol 1")
    post(client, alice_headers, "alice 1")
    post(client, bob_headers, "bob 2")
    client.post(f"/api/follow/{bob_id}", headers=alice_headers)

    res = client.get("/api/feed", headers=alice_headers)
    assert res.status_code == 200
    page = res.json()["data"]
    assert [p["content"] for p in page["content"]] == ["bob 2", "alice 1", "bob 1"]
    assert page["totalElements"] == 3

    same = client.get("/api/posts/feed", headers=alice_headers).json()["data"]
    assert [p["content"] for p in same["content"]] == ["bob 2", "alice 1", "bob 1"]


def test_personal_feed_without_follows_shows_own_posts(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    post(client, bob_headers, "bob 1")

    page = client.get("/api/feed", headers=alice_headers).json()["data"]
    assert page["content"] == []
    assert page["totalElements"] == 0
    assert page["totalPages"] == 0

    post(client, alice_headers, "alice 1")
    page = client.get("/api/feed", headers=alice_headers).json()["data"]
    assert [p["content"] for p in page["content"]] == ["alice 1"]


def test_unfollowed_user_leaves_feed(client, alice, bob):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    post(client, bob_headers, "bob 1")
    client.post(f"/api/follow/{bob_id}", headers=alice_headers)
    assert client.get("/api/feed", headers=alice_headers).json()["data"]["totalElements"] == 1

    client.delete(f"/api/follow/{bob_id}", headers=alice_headers)
    assert client.get("/api/feed", headers=alice_headers).json()["data"]["totalElements"] == 0


def test_personal_feed_pagination(client, alice):
    _, headers = alice
    for i in range(5):
        post(client, headers, f"post {i}")

    page = client.get("/api/feed", params={"page": 2, "size": 2}, headers=headers).json()["data"]
    assert [p["content"] for p in page["content"]] == ["post 0"]
    assert (page["page"], page["size"], page["totalElements"], page["totalPages"]) == (2, 2, 5, 3)

    page = client.get("/api/feed", params={"page": 9}, headers=headers).json()["data"]
    assert page["content"] == []


def test_user_feed_by_username(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    post(client, bob_headers, "bob 1")
    post(client, alice_headers, "alice 1")
    post(client, bob_headers, "bob 2")

    res = client.get("/api/feed/users/bob", headers=alice_headers)
    assert res.status_code == 200
    assert [p["content"] for p in res.json()["data"]["content"]] == ["bob 2", "bob 1"]


def test_user_feed_unknown_user_is_404(client, alice):
    _, headers = alice
    assert client.get("/api/feed/users/nobody", headers=headers).status_code == 404


def test_feed_requires_authentication(client):
    assert client.get("/api/feed").status_code == 401
    assert client.get("/api/feed/users/alice").status_code == 401
