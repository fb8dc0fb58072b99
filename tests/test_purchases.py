from datetime import timedelta

from quizhub.models import Purchase, PurchaseStatus, QuestionSet, RedeemCode
from quizhub.models.base import utcnow


def _generate_codes(client, admin, set_id, quantity=1, validity_days=30):
    response = client.post(
        "/api/redeem-codes/generate",
        json={"questionSetId": set_id, "validityDays": validity_days, "quantity": quantity},
        headers=admin["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_free_set_is_always_accessible(client, user, make_set):
    question_set = make_set()
    access = client.get(f"/api/purchases/check/{question_set['id']}", headers=user["headers"]).json()["data"]
    assert access["hasAccess"] is True
    assert access["isPaid"] is False


def test_purchase_grants_access_for_thirty_days(client, user, make_set):
    question_set = make_set("CCNA", isPaid=True, price=19.9)

    before = client.get(f"/api/purchases/check/{question_set['id']}", headers=user["headers"]).json()["data"]
    assert before["hasAccess"] is False
    assert before["price"] == 19.9

    wrong_amount = client.post(
        "/api/purchases",
        json={"questionSetId": question_set["id"], "paymentMethod": "card", "amount": 5},
        headers=user["headers"],
    )
    assert wrong_amount.status_code == 400

    response = client.post(
        "/api/purchases",
        json={"questionSetId": question_set["id"], "paymentMethod": "card", "amount": 19.9},
        headers=user["headers"],
    )
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "active"

    after = client.get(f"/api/purchases/check/{question_set['id']}", headers=user["headers"]).json()["data"]
    assert after["hasAccess"] is True
    assert after["remainingDays"] == 30

    duplicate = client.post(
        "/api/purchases",
        json={"questionSetId": question_set["id"], "paymentMethod": "card", "amount": 19.9},
        headers=user["headers"],
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"]["code"] == "DUPLICATE_ERROR"

    active = client.get("/api/purchases/active", headers=user["headers"]).json()["data"]
    assert [p["questionSetId"] for p in active] == [question_set["id"]]
    assert active[0]["questionSet"]["title"] == "CCNA"

    profile = client.get("/api/users/profile", headers=user["headers"]).json()["data"]
    assert len(profile["activePurchases"]) == 1


def test_free_set_cannot_be_purchased(client, user, make_set):
    question_set = make_set()
    response = client.post(
        "/api/purchases",
        json={"questionSetId": question_set["id"], "paymentMethod": "card", "amount": 0},
        headers=user["headers"],
    )
    assert response.status_code == 400


def test_paid_set_without_price_cannot_be_purchased(client, user, make_set, db):
    question_set = make_set("CCNA", isPaid=True, price=19.9)
    db.query(QuestionSet).filter(QuestionSet.id == question_set["id"]).update({"price": None})
    db.commit()

    response = client.post(
        "/api/purchases",
        json={"questionSetId": question_set["id"], "paymentMethod": "card", "amount": 0},
        headers=user["headers"],
    )
    assert response.status_code == 400
    assert db.query(Purchase).count() == 0


def test_expired_purchase_does_not_grant_access(client, user, make_set, add_question, db):
    question_set = make_set("CCNA", isPaid=True, price=19.9, trialQuestions=1)
    add_question(question_set["id"], "Q0")
    add_question(question_set["id"], "Q1")

    now = utcnow()
    db.add(
        Purchase(
            user_id=user["id"],
            question_set_id=question_set["id"],
            amount=19.9,
            status=PurchaseStatus.ACTIVE,
            purchase_date=now - timedelta(days=40),
            expiry_date=now - timedelta(days=10),
        )
    )
    db.commit()

    access = client.get(f"/api/purchases/check/{question_set['id']}", headers=user["headers"]).json()["data"]
    assert access["hasAccess"] is False
    questions = client.get(f"/api/question-sets/{question_set['id']}/questions", headers=user["headers"])
    assert len(questions.json()["data"]) == 1
    assert client.get("/api/purchases/active", headers=user["headers"]).json()["data"] == []
    assert len(client.get("/api/purchases", headers=user["headers"]).json()["data"]) == 1


def test_redeem_code_once(client, admin, user, make_set):
    question_set = make_set("CCNA", isPaid=True, price=19.9)
    code = _generate_codes(client, admin, question_set["id"], validity_days=7)[0]
    assert len(code["code"]) == 8

    redeemed = client.post("/api/redeem-codes/redeem", json={"code": code["code"].lower()}, headers=user["headers"])
    assert redeemed.status_code == 200, redeemed.text
    assert redeemed.json()["data"]["questionSetId"] == question_set["id"]

    access = client.get(f"/api/purchases/check/{question_set['id']}", headers=user["headers"]).json()["data"]
    assert access["hasAccess"] is True
    assert access["remainingDays"] == 7

    again = client.post("/api/redeem-codes/redeem", json={"code": code["code"]}, headers=user["headers"])
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "VALIDATION_ERROR"

    mine = client.get("/api/redeem-codes/user", headers=user["headers"]).json()["data"]
    assert [c["code"] for c in mine] == [code["code"]]


def test_unknown_and_expired_codes(client, admin, user, make_set, db):
    question_set = make_set("CCNA", isPaid=True, price=19.9)
    code = _generate_codes(client, admin, question_set["id"])[0]

    unknown = client.post("/api/redeem-codes/redeem", json={"code": "NOPE1234"}, headers=user["headers"])
    assert unknown.status_code == 404

    db.query(RedeemCode).filter(RedeemCode.id == code["id"]).update(
        {"expiry_date": utcnow() - timedelta(days=1)}
    )
    db.commit()
    expired = client.post("/api/redeem-codes/redeem", json={"code": code["code"]}, headers=user["headers"])
    assert expired.status_code == 400
    assert "expired" in expired.json()["message"]


def test_code_administration(client, admin, user, make_set):
    question_set = make_set("CCNA", isPaid=True, price=19.9)
    codes = _generate_codes(client, admin, question_set["id"], quantity=3)
    assert len({c["code"] for c in codes}) == 3

    client.post("/api/redeem-codes/redeem", json={"code": codes[0]["code"]}, headers=user["headers"])

    used = client.get("/api/redeem-codes", params={"isUsed": True}, headers=admin["headers"]).json()["data"]
    assert [c["id"] for c in used["items"]] == [codes[0]["id"]]
    assert client.get("/api/redeem-codes", headers=user["headers"]).status_code == 403

    assert client.delete(f"/api/redeem-codes/{codes[0]['id']}", headers=admin["headers"]).status_code == 400
    assert client.delete(f"/api/redeem-codes/{codes[1]['id']}", headers=admin["headers"]).status_code == 200
    remaining = client.get("/api/redeem-codes", headers=admin["headers"]).json()["data"]
    assert remaining["total"] == 2
