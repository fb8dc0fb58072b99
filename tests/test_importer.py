import pytest

from quizhub.core.config import settings
from quizhub.models import QuestionType
from quizhub.services.importer import LineError, normalize_question, parse_question_line, parse_question_text

SAMPLE = """问题|选项A|选项B|选项C|选项D|答案|解析
What is TCP?|A transport protocol|A file format|A cable|A font|A|Connection oriented
Which are layer 4 protocols?|TCP|IP|UDP|HTTP|A,C

# comments and blank lines are skipped
Broken line without answer|x|y
Bad answer|x|y|E
"""


def test_parse_single_choice_line():
    question = parse_question_line("What is TCP?|Transport|Cable|A|explained")
    assert question.text == "What is TCP?"
    assert question.question_type == QuestionType.SINGLE
    assert question.explanation == "explained"
    assert [o.text for o in question.options] == ["Transport", "Cable"]
    assert [o.is_correct for o in question.options] == [True, False]


def test_parse_multiple_choice_line():
    question = parse_question_line("Pick|a|b|c|B，C")
    assert question.question_type == QuestionType.MULTIPLE
    assert [o.is_correct for o in question.options] == [False, True, True]


@pytest.mark.parametrize(
    "line",
    ["too|short", "|a|b|A", "Q|a|b|Z", "Q|a||A", "Q|a|b|not an answer"],
)
def test_parse_rejects_malformed_lines(line):
    with pytest.raises(LineError):
        parse_question_line(line)


def test_parse_report_collects_errors_with_line_numbers():
    report = parse_question_text(SAMPLE)
    assert [p.line_number for p in report.questions] == [2, 3]
    assert len(report.errors) == 2
    assert report.errors[0].startswith("Line 6:")
    assert report.errors[1].startswith("Line 7:")


def test_normalize_question_accepts_legacy_fields():
    question = normalize_question(
        {
            "question": "Legacy?",
            "type": "single",
            "options": [{"id": "a", "optionText": "yes"}, {"id": "b", "optionText": "no"}],
            "correctAnswer": "a",
            "explanation": "old format",
        }
    )
    assert question.text == "Legacy?"
    assert [o.option_index for o in question.options] == ["A", "B"]
    assert [o.is_correct for o in question.options] == [True, False]


def test_normalize_question_infers_multiple_choice():
    question = normalize_question(
        {"text": "Many", "options": ["w", "x", "y"], "correctAnswer": ["A", "C"]}
    )
    assert question.question_type == QuestionType.MULTIPLE
    assert [o.text for o in question.options] == ["w", "x", "y"]


def test_file_upload_appends_questions(client, admin, make_set, add_question):
    question_set = make_set()
    add_question(question_set["id"], "Existing")

    response = client.post(
        "/api/question-sets/upload/file",
        data={"questionSetId": question_set["id"]},
        files={"file": ("questions.csv", SAMPLE.encode("utf-8"), "text/csv")},
        headers=admin["headers"],
    )
    assert response.status_code == 200, response.text
    result = response.json()["data"]
    assert result["success"] == 2
    assert result["failed"] == 2
    assert result["questionCount"] == 3

    questions = client.get(f"/api/question-sets/{question_set['id']}/questions").json()["data"]
    assert [q["text"] for q in questions] == ["Existing", "What is TCP?", "Which are layer 4 protocols?"]
    assert questions[2]["questionType"] == "multiple"


def test_file_upload_rejects_other_extensions(client, admin, make_set):
    question_set = make_set()
    response = client.post(
        "/api/question-sets/upload/file",
        data={"questionSetId": question_set["id"]},
        files={"file": ("questions.xlsx", b"Q|a|b|A", "application/octet-stream")},
        headers=admin["headers"],
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "FILE_UPLOAD_ERROR"


def test_file_upload_over_limit_is_413(client, admin, make_set, monkeypatch):
    question_set = make_set()
    monkeypatch.setattr(settings, "UPLOAD_MAX_BYTES", 64)
    response = client.post(
        "/api/question-sets/upload/file",
        data={"questionSetId": question_set["id"]},
        files={"file": ("questions.txt", b"Q|a|b|A\n" * 20, "text/plain")},
        headers=admin["headers"],
    )
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"
    assert client.get(f"/api/question-sets/{question_set['id']}").json()["data"]["questionCount"] == 0


def test_bulk_upload_creates_then_replaces(client, admin):
    payload = {
        "questionSets": [
            {
                "id": "net-basics",
                "title": "Network basics",
                "category": "网络协议",
                "questions": [
                    {"question": "Q1", "options": ["a", "b"], "correctAnswer": "A"},
                    {"text": "Q2", "options": [{"text": "a", "isCorrect": True}, {"text": "b"}]},
                    {"text": "Broken", "options": ["only one"]},
                ],
            }
        ]
    }
    created = client.post("/api/question-sets/upload", json=payload, headers=admin["headers"])
    assert created.status_code == 200, created.text
    result = created.json()["data"][0]
    assert result["status"] == "created"
    assert result["questionCount"] == 2
    assert len(result["errors"]) == 1

    payload["questionSets"][0]["questions"] = [{"text": "Only", "options": ["x", "y"], "correctAnswer": "B"}]
    replaced = client.post("/api/question-sets/upload", json=payload, headers=admin["headers"]).json()["data"][0]
    assert replaced["status"] == "updated"
    assert replaced["questionCount"] == 1

    questions = client.get("/api/question-sets/net-basics/questions").json()["data"]
    assert [q["text"] for q in questions] == ["Only"]
    assert [o["isCorrect"] for o in questions[0]["options"]] == [False, True]


def test_bulk_upload_rejects_paid_set_without_price(client, admin):
    payload = {"questionSets": [{"title": "Paid", "category": "c", "isPaid": True}]}
    response = client.post("/api/question-sets/upload", json=payload, headers=admin["headers"])
    assert response.status_code == 400
    assert client.get("/api/question-sets").json()["data"]["total"] == 0


def test_bulk_upload_reports_malformed_options(client, admin):
    payload = {
        "questionSets": [
            {
                "title": "Malformed",
                "category": "c",
                "questions": [
                    {"text": "numbers", "options": [1, 2]},
                    {"text": "mapping", "options": {"a": "b"}},
                    {"text": "fine", "options": ["a", "b"], "correctAnswer": "A"},
                ],
            }
        ]
    }
    response = client.post("/api/question-sets/upload", json=payload, headers=admin["headers"])
    assert response.status_code == 200, response.text
    result = response.json()["data"][0]
    assert result["questionCount"] == 1
    assert len(result["errors"]) == 2
    assert result["errors"][0].startswith("Question 1:")


def test_normalize_question_rejects_non_text_options():
    with pytest.raises(ValueError):
        normalize_question({"text": "q", "options": [1, 2]})
    with pytest.raises(ValueError):
        normalize_question({"text": "q", "options": "a,b"})
