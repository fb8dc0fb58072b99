import pytest

from conftest import PASSWORD
from quizhub.client import ApiError, NotifierSubscription, QuestionCountCache, QuizHubClient


@pytest.fixture
def api(client):
    return QuizHubClient(http=client)


def test_client_requires_a_transport():
    with pytest.raises(ValueError):
        QuizHubClient()


def test_login_and_catalog(api, user, make_set, add_question):
    first = make_set("First")
    make_set("Second")
    add_question(first["id"])

    me = api.login("alice", PASSWORD)
    assert me["id"] == user["id"]
    assert api.profile()["username"] == "alice"

    sets = api.all_question_sets(limit=1)
    assert {s["title"] for s in sets} == {"First", "Second"}

    assert api.get_question_set(first["id"])["questionCount"] == 1
    questions = api.get_questions(first["id"])
    assert [o["optionIndex"] for o in questions[0]["options"]] == ["A", "B", "C", "D"]


def test_errors_raise_api_error(api):
    with pytest.raises(ApiError) as missing:
        api.get_question_set("no-such-set")
    assert missing.value.status_code == 404
    assert missing.value.code == "NOT_FOUND"

    with pytest.raises(ApiError) as anonymous:
        api.profile()
    assert anonymous.value.status_code == 401

    with pytest.raises(ApiError) as bad_login:
        api.login("nobody", PASSWORD)
    assert bad_login.value.status_code == 401
    assert api.token is None


def test_progress_and_quiz(api, user, make_set, add_question):
    question_set = make_set()
    question = add_question(question_set["id"], correct=1)
    api.login("alice", PASSWORD)

    stats = api.record_progress(question_set["id"], question["id"], False, time_spent=5)
    assert stats["completedQuestions"] == 1

    correct = question["options"][1]["id"]
    result = api.submit_quiz(question_set["id"], {question["id"]: [correct]})
    assert result["score"] == 1
    assert result["persisted"] is True


def test_redeem_and_access(api, admin, user, client, make_set):
    question_set = make_set("CCNA", isPaid=True, price=19.9)
    codes = client.post(
        "/api/redeem-codes/generate",
        json={"questionSetId": question_set["id"], "validityDays": 30},
        headers=admin["headers"],
    ).json()["data"]

    api.login("alice", PASSWORD)
    assert api.check_access(question_set["id"])["hasAccess"] is False
    api.redeem(codes[0]["code"])
    assert api.check_access(question_set["id"])["hasAccess"] is True


def test_question_count_cache():
    cache = QuestionCountCache()
    cache.replace([{"id": "a", "questionCount": 2}, {"id": "b", "questionCount": 0}])
    cache.apply({"questionSetId": "b", "count": 4})
    assert cache.get("b") == 4
    assert cache.get("missing") is None
    assert len(cache) == 2


def test_subscription_tracks_question_counts(api, user, make_set, add_question):
    question_set = make_set()
    api.login("alice", PASSWORD)

    subscription = NotifierSubscription(api)
    progress_events = []
    subscription.on("progress_updated", progress_events.append)
    subscription.connect()
    assert subscription.user_id == user["id"]
    assert subscription.cache.get(question_set["id"]) == 0

    question = add_question(question_set["id"])
    add_question(question_set["id"], text="What is UDP?")
    api.record_progress(question_set["id"], question["id"], True)

    assert subscription.poll_once() == 3
    assert subscription.cache.get(question_set["id"]) == 2
    assert progress_events[0]["questionSetId"] == question_set["id"]

    subscription.close()
    assert subscription.sid is None


def test_subscription_reconnects_after_expiry(api, make_set, add_question):
    question_set = make_set()
    subscription = NotifierSubscription(api)
    old_sid = subscription.connect()

    api.close_polling(old_sid)
    add_question(question_set["id"])

    assert subscription.poll_once() == 0
    assert subscription.sid != old_sid
    assert subscription.cache.get(question_set["id"]) == 1
