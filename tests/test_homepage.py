from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from quizhub.core.exceptions import register_exception_handlers
from quizhub.models import HOMEPAGE_DEFAULTS


def test_defaults_before_anything_is_saved(client):
    content = client.get("/api/homepage/content").json()["data"]
    assert content["welcomeTitle"] == HOMEPAGE_DEFAULTS["welcome_title"]
    assert content["featuredCategories"] == HOMEPAGE_DEFAULTS["featured_categories"]
    assert content["theme"] == "light"


def test_admin_updates_content(client, admin, user):
    forbidden = client.put("/api/homepage/content", json={"welcomeTitle": "Hi"}, headers=user["headers"])
    assert forbidden.status_code == 403

    response = client.put(
        "/api/homepage/content",
        json={"welcomeTitle": "Practice daily", "theme": "dark"},
        headers=admin["headers"],
    )
    assert response.status_code == 200, response.text
    updated = response.json()["data"]
    assert updated["welcomeTitle"] == "Practice daily"
    assert updated["theme"] == "dark"
    assert updated["footerText"] == HOMEPAGE_DEFAULTS["footer_text"]

    assert client.get("/api/homepage/content").json()["data"]["welcomeTitle"] == "Practice daily"


def test_invalid_theme_rejected(client, admin):
    response = client.put("/api/homepage/content", json={"theme": "neon"}, headers=admin["headers"])
    assert response.status_code == 400


def test_featured_categories(client, admin):
    response = client.put(
        "/api/homepage/featured-categories",
        json={"featuredCategories": ["云计算", " 网络协议 ", "云计算", ""]},
        headers=admin["headers"],
    )
    assert response.json()["data"] == ["云计算", "网络协议"]
    assert client.get("/api/homepage/featured-categories").json()["data"] == ["云计算", "网络协议"]
    content = client.get("/api/homepage/content").json()["data"]
    assert content["featuredCategories"] == ["云计算", "网络协议"]


def test_featured_question_sets(client, admin, make_set):
    plain = make_set("Plain")
    featured = make_set("Spotlight", isFeatured=True, featuredCategory="网络协议")
    listed = client.get("/api/homepage/featured-question-sets").json()["data"]
    assert [s["id"] for s in listed] == [featured["id"]]

    client.put(
        f"/api/question-sets/{plain['id']}/featured",
        json={"isFeatured": True},
        headers=admin["headers"],
    )
    listed = client.get("/api/question-sets/featured").json()["data"]
    assert {s["id"] for s in listed} == {plain["id"], featured["id"]}


def test_liveness_and_detailed_health(client):
    live = client.get("/health").json()
    assert live["status"] == "ok"

    detailed = client.get("/api/health/detailed").json()
    assert detailed["status"] == "healthy"
    assert detailed["database"]["status"] == "healthy"
    assert detailed["cache"] == {"enabled": False, "connected": False}
    assert detailed["schema"]["ok"] is True
    assert detailed["notifier"]["connections"] == 0


def test_response_headers(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["requestId"]


def test_database_errors_hide_the_statement():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise OperationalError("SELECT secret FROM users", {}, Exception("disk I/O error"))

    response = TestClient(app).get("/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "DATABASE_ERROR"
    assert "secret" not in body["message"]
