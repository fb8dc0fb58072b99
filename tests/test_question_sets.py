from conftest import auth, register

from quizhub.models import QuestionSet


def _counts(client):
    items = client.get("/api/question-sets", params={"limit": 100}).json()["data"]["items"]
    return {item["id"]: item["questionCount"] for item in items}


def test_networking_scenario(client, make_set, add_question):
    question_set = make_set("Networking 101", isPaid=False)
    add_question(question_set["id"], "What is TCP?", correct=0)

    detail = client.get(f"/api/question-sets/{question_set['id']}").json()["data"]
    assert detail["title"] == "Networking 101"
    assert detail["questionCount"] == 1

    questions = client.get(f"/api/question-sets/{question_set['id']}/questions").json()["data"]
    assert len(questions) == 1
    assert questions[0]["text"] == "What is TCP?"
    options = questions[0]["options"]
    assert [o["optionIndex"] for o in options] == ["A", "B", "C", "D"]
    assert [o["isCorrect"] for o in options] == [True, False, False, False]


def test_question_count_follows_adds_and_deletes(client, admin, make_set, add_question, db):
    first = make_set("Set one")
    second = make_set("Set two")

    created = [add_question(first["id"], f"Q{i}") for i in range(3)]
    add_question(second["id"], "Other")
    assert _counts(client) == {first["id"]: 3, second["id"]: 1}

    response = client.delete(f"/api/questions/{created[1]['id']}", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["questionCount"] == 2

    response = client.post(
        "/api/questions",
        json={
            "questionSetId": second["id"],
            "text": "Pick two",
            "questionType": "multiple",
            "options": [
                {"text": "x", "isCorrect": True},
                {"text": "y", "isCorrect": True},
                {"text": "z"},
            ],
        },
        headers=admin["headers"],
    )
    assert response.status_code == 201

    counts = _counts(client)
    assert counts == {first["id"]: 2, second["id"]: 2}
    for set_id, count in counts.items():
        stored = db.query(QuestionSet).filter(QuestionSet.id == set_id).one()
        assert len(stored.questions) == count


def test_options_keep_submitted_order(client, admin, make_set):
    question_set = make_set()
    texts = ["zeta", "alpha", "mu", "beta", "omega"]
    response = client.post(
        f"/api/question-sets/{question_set['id']}/questions",
        json={
            "text": "Order?",
            "options": [{"text": t, "isCorrect": t == "mu"} for t in texts],
        },
        headers=admin["headers"],
    )
    question_id = response.json()["data"]["id"]

    fetched = client.get(f"/api/questions/{question_id}").json()["data"]
    assert [o["text"] for o in fetched["options"]] == texts
    assert [o["orderIndex"] for o in fetched["options"]] == list(range(5))

    listed = client.get("/api/options", params={"questionId": question_id}).json()["data"]
    assert [o["text"] for o in listed] == texts


def test_single_choice_needs_exactly_one_correct_option(client, admin, make_set):
    question_set = make_set()
    response = client.post(
        f"/api/question-sets/{question_set['id']}/questions",
        json={
            "text": "Broken",
            "questionType": "single",
            "options": [{"text": "a", "isCorrect": True}, {"text": "b", "isCorrect": True}],
        },
        headers=admin["headers"],
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert client.get(f"/api/question-sets/{question_set['id']}").json()["data"]["questionCount"] == 0


def test_admin_routes_reject_anonymous_and_regular_users(client, user, make_set):
    question_set = make_set()
    payload = {"title": "Hack", "description": "x", "category": "y"}

    anonymous = client.post("/api/question-sets", json=payload)
    assert anonymous.status_code == 401
    assert anonymous.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    forbidden = client.post("/api/question-sets", json=payload, headers=user["headers"])
    assert forbidden.status_code == 403

    assert client.delete(f"/api/question-sets/{question_set['id']}").status_code == 401
    assert client.delete(f"/api/question-sets/{question_set['id']}", headers=user["headers"]).status_code == 403
    assert client.get("/api/users", headers=user["headers"]).status_code == 403

    titles = [item["title"] for item in client.get("/api/question-sets").json()["data"]["items"]]
    assert titles == ["Networking 101"]


def test_invalid_token_is_rejected(client, make_set):
    response = client.post(
        "/api/question-sets",
        json={"title": "t", "description": "d", "category": "c"},
        headers=auth("not-a-jwt"),
    )
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_list_pagination_search_and_sorting(client, make_set):
    for title in ["Beta", "Alpha", "Gamma"]:
        make_set(title, category="Basics" if title != "Gamma" else "Advanced")

    page = client.get("/api/question-sets", params={"limit": 2, "sortBy": "title", "order": "asc"}).json()["data"]
    assert page["total"] == 3
    assert page["totalPages"] == 2
    assert [item["title"] for item in page["items"]] == ["Alpha", "Beta"]

    filtered = client.get("/api/question-sets", params={"category": "Advanced"}).json()["data"]
    assert [item["title"] for item in filtered["items"]] == ["Gamma"]

    searched = client.get("/api/question-sets", params={"search": "amm"}).json()["data"]
    assert searched["total"] == 1

    bad = client.get("/api/question-sets", params={"sortBy": "hashedPassword"})
    assert bad.status_code == 400

    categories = client.get("/api/question-sets/categories").json()["data"]
    assert categories == ["Advanced", "Basics"]


def test_paid_set_requires_price(client, admin):
    response = client.post(
        "/api/question-sets",
        json={"title": "Paid", "description": "d", "category": "c", "isPaid": True},
        headers=admin["headers"],
    )
    assert response.status_code == 400


def test_trial_questions_for_paid_set(client, user, make_set, add_question):
    question_set = make_set("CCNA", isPaid=True, price=9.9, trialQuestions=2)
    for i in range(4):
        add_question(question_set["id"], f"Q{i}")

    anonymous = client.get(f"/api/question-sets/{question_set['id']}/questions").json()
    assert [q["text"] for q in anonymous["data"]] == ["Q0", "Q1"]
    assert "Trial access" in anonymous["message"]

    as_user = client.get(f"/api/question-sets/{question_set['id']}/questions", headers=user["headers"])
    assert len(as_user.json()["data"]) == 2


def test_admin_sees_every_question_of_paid_set(client, admin, make_set, add_question):
    question_set = make_set("CCNA", isPaid=True, price=9.9, trialQuestions=1)
    for i in range(3):
        add_question(question_set["id"], f"Q{i}")

    response = client.get(f"/api/question-sets/{question_set['id']}/questions", headers=admin["headers"])
    assert len(response.json()["data"]) == 3


def test_update_feature_and_delete(client, admin, make_set, add_question):
    question_set = make_set()
    add_question(question_set["id"])

    response = client.put(
        f"/api/question-sets/{question_set['id']}",
        json={"title": "Networking 102", "cardImage": "/img/card.png"},
        headers=admin["headers"],
    )
    assert response.json()["data"]["title"] == "Networking 102"
    assert response.json()["data"]["cardImage"] == "/img/card.png"

    client.put(
        f"/api/question-sets/{question_set['id']}/featured",
        json={"isFeatured": True, "featuredCategory": "网络协议"},
        headers=admin["headers"],
    )
    featured = client.get("/api/question-sets/featured").json()["data"]
    assert [s["id"] for s in featured] == [question_set["id"]]

    assert client.delete(f"/api/question-sets/{question_set['id']}", headers=admin["headers"]).status_code == 200
    assert client.get(f"/api/question-sets/{question_set['id']}").status_code == 404
    assert client.get("/api/questions").json()["data"]["total"] == 0


def test_update_ignores_null_required_fields(client, admin, make_set):
    question_set = make_set()
    response = client.put(
        f"/api/question-sets/{question_set['id']}",
        json={"title": None, "category": None, "isPaid": None, "description": "Updated"},
        headers=admin["headers"],
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["title"] == "Networking 101"
    assert data["category"] == "网络协议"
    assert data["isPaid"] is False
    assert data["description"] == "Updated"


def test_option_endpoints(client, admin, make_set, add_question):
    question = add_question(make_set()["id"], labels=("A", "B"))
    question_id = question["id"]

    created = client.post(
        "/api/options",
        json={"questionId": question_id, "text": "Option C"},
        headers=admin["headers"],
    )
    assert created.status_code == 201
    assert created.json()["data"]["optionIndex"] == "C"

    second_correct = client.put(
        f"/api/options/{created.json()['data']['id']}",
        json={"isCorrect": True},
        headers=admin["headers"],
    )
    assert second_correct.status_code == 400

    assert client.delete(f"/api/options/{created.json()['data']['id']}", headers=admin["headers"]).status_code == 200
    remaining = client.get("/api/options", params={"questionId": question_id}).json()["data"]
    assert len(remaining) == 2
    too_few = client.delete(f"/api/options/{remaining[0]['id']}", headers=admin["headers"])
    assert too_few.status_code == 400


def test_option_edits_keep_one_correct_answer(client, admin, make_set, add_question):
    question = add_question(make_set()["id"], labels=("A", "B", "C"))
    correct, wrong = question["options"][0], question["options"][1]

    unset = client.put(f"/api/options/{correct['id']}", json={"isCorrect": False}, headers=admin["headers"])
    assert unset.status_code == 400
    removed = client.delete(f"/api/options/{correct['id']}", headers=admin["headers"])
    assert removed.status_code == 400

    options = client.get("/api/options", params={"questionId": question["id"]}).json()["data"]
    assert [o["isCorrect"] for o in options] == [True, False, False]

    renamed = client.put(f"/api/options/{wrong['id']}", json={"text": "UDP"}, headers=admin["headers"])
    assert renamed.status_code == 200
    assert client.delete(f"/api/options/{wrong['id']}", headers=admin["headers"]).status_code == 200


def test_question_type_change_checks_stored_options(client, admin, make_set, add_question):
    question = add_question(make_set()["id"])
    response = client.put(
        f"/api/questions/{question['id']}",
        json={"questionType": "multiple"},
        headers=admin["headers"],
    )
    assert response.status_code == 200
    assert response.json()["data"]["questionType"] == "multiple"


def test_question_update_replaces_options(client, admin, make_set, add_question):
    question = add_question(make_set()["id"])
    response = client.put(
        f"/api/questions/{question['id']}",
        json={
            "explanation": "Transmission Control Protocol",
            "metadata": {"source": "rfc793"},
            "options": [{"text": "yes", "isCorrect": True}, {"text": "no"}],
        },
        headers=admin["headers"],
    )
    data = response.json()["data"]
    assert data["explanation"] == "Transmission Control Protocol"
    assert data["metadata"] == {"source": "rfc793"}
    assert [o["text"] for o in data["options"]] == ["yes", "no"]


def test_regular_user_cannot_add_questions(client, make_set):
    question_set = make_set()
    other = register(client, "bob")
    response = client.post(
        f"/api/question-sets/{question_set['id']}/questions",
        json={"text": "x", "options": [{"text": "a", "isCorrect": True}, {"text": "b"}]},
        headers=auth(other["token"]),
    )
    assert response.status_code == 403
    assert client.get(f"/api/question-sets/{question_set['id']}").json()["data"]["questionCount"] == 0
