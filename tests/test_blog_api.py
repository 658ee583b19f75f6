import json

from app.core.config import settings
from app.models.blog import CATEGORY_VALUES


def create_post(client, auth_headers, **fields):
    body = {"title": "Hello World!", "content": "<p>0123456789</p>"}
    body.update(fields)
    resp = client.post("/api/blog", json=body, headers=auth_headers)
    assert resp.status_code == 201, resp.json()
    return resp.json()["data"]


def test_create_requires_auth(client):
    resp = client.post("/api/blog", json={"title": "Hello World!", "content": "0123456789"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["status_code"] == 401
    assert body["data"] is None


def test_create_post(client, auth_headers, administrator):
    resp = client.post(
        "/api/blog",
        json={"title": "  Hello World!  ", "content": "0123456789", "categories": "achievements,awards-recognition"},
        headers=auth_headers,
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["status_code"] == 201
    assert body["message"] == "Blog post created successfully"
    assert body["data"]["title"] == "Hello World!"
    assert body["data"]["slug"] == "hello-world"
    assert body["data"]["categories"] == ["achievements", "awards-recognition"]
    assert body["data"]["author"]["email"] == administrator.email


def test_create_validation_errors(client, auth_headers):
    resp = client.post("/api/blog", json={"title": "Hi", "content": "short"}, headers=auth_headers)
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert {detail["field"] for detail in body["details"]} == {"title", "content"}


def test_create_rejects_unknown_fields(client, auth_headers):
    resp = client.post(
        "/api/blog",
        json={"title": "Hello World!", "content": "0123456789", "view_count": 1000},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_create_rejects_bad_image_url(client, auth_headers):
    resp = client.post(
        "/api/blog",
        json={"title": "Hello World!", "content": "0123456789", "featured_image": "https://cdn.test/file.pdf"},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_publish_flow(client, auth_headers):
    post = create_post(client, auth_headers)
    assert client.get("/api/blog/slug/hello-world").status_code == 404

    resp = client.patch(f"/api/blog/{post['id']}", json={"is_published": True}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["published_at"] is not None

    resp = client.get("/api/blog/slug/hello-world")
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == post["id"]

    resp = client.post("/api/blog/slug/hello-world/view")
    assert resp.status_code == 200
    assert resp.json()["view_count"] == 1

    resp = client.patch(
        f"/api/blog/{post['id']}",
        json={"is_published": False, "is_featured": True},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot feature an unpublished post"


def test_update_requires_auth(client, auth_headers):
    post = create_post(client, auth_headers)
    resp = client.patch(f"/api/blog/{post['id']}", json={"title": "New title"})
    assert resp.status_code == 401


def test_list_posts(client, auth_headers):
    create_post(client, auth_headers, title="Alpha post", is_published=True)
    create_post(client, auth_headers, title="Beta post", categories=["thought-pieces"])
    create_post(client, auth_headers, title="Gamma post", categories=["achievements"])

    resp = client.get("/api/blog", params={"limit": 2})
    body = resp.json()
    assert resp.status_code == 200
    assert body["count"] == 3
    assert body["total_pages"] == 2
    assert len(body["data"]) == 2

    resp = client.get("/api/blog", params={"categories": "thought-pieces,achievements"})
    assert resp.json()["count"] == 2

    resp = client.get("/api/blog", params={"is_published": "true"})
    assert [post["title"] for post in resp.json()["data"]] == ["Alpha post"]


def test_public_reads(client, auth_headers):
    create_post(client, auth_headers, title="Shiny news", is_published=True, is_featured=True)
    create_post(client, auth_headers, title="Plain news", is_published=True)

    published = client.get("/api/blog/published").json()
    assert published["count"] == 2

    featured = client.get("/api/blog/featured").json()
    assert [post["title"] for post in featured["data"]] == ["Shiny news"]

    recent = client.get("/api/blog/recent", params={"limit": 1}).json()
    assert len(recent["data"]) == 1

    category = client.get("/api/blog/category/newsroom").json()
    assert category["count"] == 2
    assert category["message"] == "Blog posts for newsroom retrieved successfully"


def test_unknown_category_is_rejected(client):
    resp = client.get("/api/blog/category/sports")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid category"


def test_search(client, auth_headers):
    create_post(client, auth_headers, title="Findable story", is_published=True)

    short = client.get("/api/blog/search", params={"q": "f"}).json()
    assert short["message"] == "Search term too short"
    assert short["data"] == []
    assert short["count"] == 0

    found = client.get("/api/blog/search", params={"q": "findable"}).json()
    assert found["count"] == 1


def test_statistics_are_public(client):
    resp = client.get("/api/blog/statistics")
    assert resp.status_code == 200
    assert resp.json()["data"]["by_category"] == {category: 0 for category in CATEGORY_VALUES}


def test_get_and_delete_by_id(client, auth_headers):
    post = create_post(client, auth_headers)

    assert client.get(f"/api/blog/{post['id']}").status_code == 200

    resp = client.delete(f"/api/blog/{post['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Blog post deleted successfully"

    assert client.get(f"/api/blog/{post['id']}").status_code == 404


def test_malformed_id(client):
    resp = client.get("/api/blog/not-a-uuid")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid blog post ID format"


def test_body_size_limit(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_SIZE", 100)
    resp = client.post(
        "/api/blog",
        json={"title": "Hello World!", "content": "x" * 500},
        headers=auth_headers,
    )
    assert resp.status_code == 413
    assert resp.json()["message"] == "Request body too large"


def test_root_endpoints(client):
    assert client.get("/").status_code == 200

    health = client.get("/health").json()
    assert health["status"] == "OK"

    api_health = client.get("/api/health").json()
    assert api_health["data"]["database"]["status"] == "connected"

    blog_health = client.get("/api/health/blog").json()
    assert blog_health["data"]["total_posts"] == 0

    database = client.get("/api/health/database").json()
    assert database["data"]["type"] == "sqlite"


def chunked(payload: dict):
    body = json.dumps(payload).encode()
    for start in range(0, len(body), 64):
        yield body[start:start + 64]


def test_body_size_limit_applies_to_chunked_uploads(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_SIZE", 100)
    headers = {**auth_headers, "Content-Type": "application/json"}

    resp = client.post(
        "/api/blog",
        content=chunked({"title": "Hello World!", "content": "x" * 500}),
        headers=headers,
    )

    assert resp.status_code == 413
    assert resp.json()["message"] == "Request body too large"
    assert client.get("/api/blog").json()["count"] == 0


def test_small_chunked_upload_is_accepted(client, auth_headers):
    headers = {**auth_headers, "Content-Type": "application/json"}

    resp = client.post(
        "/api/blog",
        content=chunked({"title": "Streamed post", "content": "0123456789" * 20}),
        headers=headers,
    )

    assert resp.status_code == 201
    assert resp.json()["data"]["slug"] == "streamed-post"
