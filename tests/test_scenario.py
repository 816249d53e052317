from conftest import auth_header, login


def test_register_post_and_foreign_delete(client):
    res = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "alice@x.com", "password": "pw12345678"},
    )
    assert res.status_code == 201
    alice_id = res.json()["data"]["userId"]
    alice_headers = auth_header(login(client, "alice"))

    res = client.post("/api/posts", json={"content": "hello"}, headers=alice_headers)
    assert res.status_code == 201
    post_id = res.json()["data"]["id"]

    res = client.get(f"/api/posts/{post_id}")
    assert res.status_code == 200
    post = res.json()["data"]
    assert post["content"] == "hello"
    assert post["userId"] == alice_id

    client.post(
        "/api/auth/register",
        json={"username": "bob", "email": "bob@x.com", "password": "pw12345678"},
    )
    bob_headers = auth_header(login(client, "bob"))

    res = client.delete(f"/api/posts/{post_id}", headers=bob_headers)
    assert res.status_code == 403
    assert client.get(f"/api/posts/{post_id}").status_code == 200


def test_social_round_trip(client, alice, bob):
    alice_id, alice_headers = alice
    bob_id, bob_headers = bob

    client.post(f"/api/follow/{alice_id}", headers=bob_headers)
    post_id = client.post(
        "/api/posts", json={"content": "news"}, headers=alice_headers
    ).json()["data"]["id"]

    feed = client.get("/api/feed", headers=bob_headers).json()["data"]
    assert [p["id"] for p in feed["content"]] == [post_id]

    client.post(f"/api/likes/posts/{post_id}", headers=bob_headers)
    client.post(f"/api/comments/posts/{post_id}", json={"content": "nice"}, headers=bob_headers)

    post = client.get(f"/api/posts/{post_id}").json()["data"]
    assert post["likes"] == [bob_id]
    assert post["comments"][0]["userId"] == bob_id
    assert post["comments"][0]["content"] == "nice"
