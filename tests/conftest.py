import os

os.environ.update(
    {
        "DATABASE_URL": "sqlite://",
        "AUTO_CREATE_TABLES": "true",
        "REDIS_ENABLED": "false",
        "RATE_LIMIT_ENABLED": "false",
        "BCRYPT_ROUNDS": "4",
        "SECRET_KEY": "test-secret-key",
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "WARNING",
    }
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from quizhub.core.database import Base, SessionLocal, engine  # noqa: E402
from quizhub.main import app  # noqa: E402
from quizhub.models import User  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    notifier = app.state.notifier
    notifier.connections.clear()
    notifier.user_sessions.clear()
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, username, admin=False):
    response = client.post(
        "/api/users/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    if admin:
        with SessionLocal() as session:
            session.query(User).filter(User.id == data["user"]["id"]).update({"is_admin": True})
            session.commit()
    return data


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(client):
    data = register(client, "admin", admin=True)
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth(data["token"])}


@pytest.fixture
def user(client):
    data = register(client, "alice")
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth(data["token"])}


@pytest.fixture
def make_set(client, admin):
    def _make_set(title="Networking 101", **fields):
        payload = {"title": title, "description": "Basics", "category": "网络协议", **fields}
        response = client.post("/api/question-sets", json=payload, headers=admin["headers"])
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make_set


@pytest.fixture
def add_question(client, admin):
    def _add_question(set_id, text="What is TCP?", correct=0, labels=("A", "B", "C", "D"), **fields):
        payload = {
            "text": text,
            "questionType": "single",
            "options": [
                {"text": f"Option {label}", "isCorrect": position == correct}
                for position, label in enumerate(labels)
            ],
            **fields,
        }
        response = client.post(
            f"/api/question-sets/{set_id}/questions", json=payload, headers=admin["headers"]
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _add_question
