from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from board import services
from board.api import app


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_list_posts_empty(client):
    resp = client.get("/api/posts")
    assert resp.status_code == 200
    assert resp.json()["data"] == []


def test_create_post_sets_author(user_token, client):
    resp = client.post(
        "/api/posts",
        headers=bearer(user_token),
        json={"title": "Spring Security Study", "content": "JWT based authentication"},
    )
    assert resp.status_code == 201
    post = resp.json()["data"]
    assert post["title"] == "Spring Security Study"
    assert post["content"] == "JWT based authentication"
    assert post["authorUsername"] == "user1"
    assert post["authorName"] == "Son"
    assert isinstance(post["authorId"], int)

    assert services.is_author(post["id"], "user1") is True
    assert services.is_author(post["id"], "someone-else") is False


def test_create_post_requires_token(client):
    resp = client.post("/api/posts", json={"title": "t", "content": "c"})
    assert resp.status_code == 401


def test_create_post_validates_body(user_token, client):
    resp = client.post("/api/posts", headers=bearer(user_token), json={"title": "t"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION"


def test_get_post(user_token, client):
    created = client.post(
        "/api/posts", headers=bearer(user_token), json={"title": "t", "content": "c"}
    ).json()["data"]

    assert client.get(f"/api/posts/{created['id']}").status_code == 401

    resp = client.get(f"/api/posts/{created['id']}", headers=bearer(user_token))
    assert resp.status_code == 200
    assert resp.json()["data"] == created


def test_get_missing_post(user_token, client):
    resp = client.get("/api/posts/999", headers=bearer(user_token))
    assert resp.status_code == 404
    assert resp.json() == {"error": "NOT_FOUND", "message": "Post not found"}


def test_list_posts_newest_first_with_current_author_name(register, login, client):
    register("user1", name="Son")
    register("user2", name="Kim")
    token1 = login("user1")
    token2 = login("user2")
    for i, token in enumerate([token1, token2, token1]):
        client.post(
            "/api/posts", headers=bearer(token), json={"title": f"post {i}", "content": "c"}
        )

    client.patch("/api/members/me", headers=bearer(token1), json={"name": "Son Renamed"})

    posts = client.get("/api/posts").json()["data"]
    assert [p["title"] for p in posts] == ["post 2", "post 1", "post 0"]
    assert [p["authorName"] for p in posts] == ["Son Renamed", "Kim", "Son Renamed"]
    created = [p["createdAt"] for p in posts]
    assert created == sorted(created, reverse=True)
    assert set(posts[0]) == {"id", "title", "authorName", "createdAt"}


def test_unexpected_error_is_generic_500(session_local, monkeypatch):
    def boom():
        raise RuntimeError("database exploded: secret details")

    monkeypatch.setattr(services, "get_all_posts", boom)
    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/api/posts")
    assert resp.status_code == 500
    assert resp.json() == {"error": "INTERNAL", "message": "Internal server error"}


def test_request_metrics_use_route_template(user_token, client):
    labels = {"method": "GET", "endpoint": "/api/posts/{post_id}", "status": "404"}
    before = REGISTRY.get_sample_value("api_requests_total", labels) or 0.0

    client.get("/api/posts/101", headers=bearer(user_token))
    client.get("/api/posts/102", headers=bearer(user_token))

    assert REGISTRY.get_sample_value("api_requests_total", labels) == before + 2
    literal = dict(labels, endpoint="/api/posts/101")
    assert REGISTRY.get_sample_value("api_requests_total", literal) is None


def test_openapi_metadata(client):
    info = client.get("/openapi.json").json()["info"]
    assert info["title"] == "Community Board API"
    assert info["contact"] == {"name": "Board development team"}
