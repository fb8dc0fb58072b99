"""
Bulk question import

Two entry points:

* ``import_question_file`` parses the pipe-delimited CSV/TXT format, one
  question per line::

      question|option A|option B[|option C ...]|ANSWER[|explanation]

  ANSWER is an option letter, or comma separated letters for a
  multiple-choice question (``A,C``). Blank lines, ``#`` comments and a
  leading header row are ignored.

* ``bulk_upload`` upserts question sets with their questions from JSON,
  accepting the historical field spellings listed in ``quizhub.db.fields``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from quizhub.core.config import settings
from quizhub.core.exceptions import FileUploadException, PayloadTooLargeException
from quizhub.db.fields import normalize_keys
from quizhub.models import QuestionSet, QuestionType
from quizhub.schemas.question import OptionCreate, QuestionCreate
from quizhub.schemas.question_set import BulkQuestionSet, BulkUploadResult, FileImportResult
from quizhub.services.question_sets import QuestionSetService
from quizhub.services.questions import QuestionService
from quizhub.utils.validators import label_position

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".csv", ".txt")
ANSWER_PATTERN = re.compile(r"^[A-Za-z](\s*[,，]\s*[A-Za-z])*$")
HEADER_PREFIXES = ("问题|", "question|", "题目|")


class LineError(ValueError):
    pass


@dataclass
class ParsedQuestion:
    line_number: int
    question: QuestionCreate


@dataclass
class ParseReport:
    questions: List[ParsedQuestion] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _answer_letters(value: str) -> List[str]:
    return [part.strip().upper() for part in re.split(r"[,，]", value) if part.strip()]


def parse_question_line(line: str) -> QuestionCreate:
    """Parse one line of the pipe format; raises LineError when malformed"""
    fields = [part.strip() for part in line.split("|")]
    if len(fields) < 4:
        raise LineError("expected at least question|option|option|answer")

    # The answer is the last field, or the one before a trailing explanation
    if ANSWER_PATTERN.match(fields[-1]):
        answer_at, explanation = len(fields) - 1, ""
    elif ANSWER_PATTERN.match(fields[-2]):
        answer_at, explanation = len(fields) - 2, fields[-1]
    else:
        raise LineError(f"no answer letter found in '{fields[-2]}' or '{fields[-1]}'")

    text = fields[0]
    option_texts = fields[1:answer_at]
    if not text:
        raise LineError("question text is empty")
    if len(option_texts) < 2 or any(not option for option in option_texts):
        raise LineError("a question needs at least 2 non-empty options")

    letters = _answer_letters(fields[answer_at])
    positions = {label_position(letter) for letter in letters}
    if any(position < 0 or position >= len(option_texts) for position in positions):
        raise LineError(f"answer '{fields[answer_at]}' does not match any option")

    question_type = QuestionType.MULTIPLE if len(letters) > 1 else QuestionType.SINGLE
    try:
        return QuestionCreate(
            text=text,
            question_type=question_type,
            explanation=explanation,
            options=[
                OptionCreate(text=option, is_correct=position in positions)
                for position, option in enumerate(option_texts)
            ],
        )
    except ValidationError as e:
        raise LineError(e.errors()[0]["msg"])


def parse_question_text(content: str) -> ParseReport:
    report = ParseReport()
    for line_number, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if not report.questions and not report.errors and line.lower().startswith(HEADER_PREFIXES):
            continue
        try:
            report.questions.append(ParsedQuestion(line_number, parse_question_line(line)))
        except LineError as e:
            report.errors.append(f"Line {line_number}: {e} ({line[:50]})")
    return report


def decode_upload(filename: Optional[str], payload: bytes) -> str:
    """Check extension and size of an uploaded file and return its text"""
    if len(payload) > settings.UPLOAD_MAX_BYTES:
        raise PayloadTooLargeException(settings.UPLOAD_MAX_BYTES)
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise FileUploadException("Only .csv and .txt files are supported")
    if not payload.strip():
        raise FileUploadException("The uploaded file is empty")
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise FileUploadException("The uploaded file must be UTF-8 encoded")


def import_question_file(
    db: Session, question_set_id: str, filename: Optional[str], payload: bytes
) -> FileImportResult:
    """Append every valid line of the file to the set, in file order"""
    QuestionSetService.get(db, question_set_id)
    report = parse_question_text(decode_upload(filename, payload))
    if not report.questions and not report.errors:
        raise FileUploadException("The uploaded file contains no questions")

    for parsed in report.questions:
        QuestionService.add_question(db, question_set_id, parsed.question, commit=False)
    count = QuestionSetService.refresh_question_count(db, question_set_id)
    db.commit()

    logger.info(
        f"Imported {len(report.questions)} questions into {question_set_id} "
        f"({len(report.errors)} failed)"
    )
    return FileImportResult(
        question_set_id=question_set_id,
        success=len(report.questions),
        failed=len(report.errors),
        question_count=count,
        errors=report.errors,
    )


def _normalize_option(raw: Any, position: int, correct_letters: List[str]) -> OptionCreate:
    if isinstance(raw, str):
        data: Dict[str, Any] = {"text": raw}
    elif isinstance(raw, dict):
        data = normalize_keys(raw)
    else:
        raise ValueError(f"option {position + 1} must be a string or an object")

    label = data.get("option_index") or data.get("id")
    if isinstance(label, str) and label_position(label) >= 0:
        letter = label.strip().upper()
    else:
        letter = chr(65 + position)

    return OptionCreate(
        text=str(data.get("text", "")).strip(),
        is_correct=bool(data.get("is_correct")) or letter in correct_letters,
        option_index=letter,
    )


def normalize_question(raw: Dict[str, Any]) -> QuestionCreate:
    """
    Build a QuestionCreate from a loosely-shaped JSON question

    Raises ValueError when the options are not a list of strings or objects.
    """
    data = normalize_keys(raw)
    answer = data.pop("correct_answer", None)
    if isinstance(answer, str):
        correct_letters = _answer_letters(answer)
    elif isinstance(answer, list):
        correct_letters = [str(letter).strip().upper() for letter in answer]
    else:
        correct_letters = []

    raw_options = data.get("options") or []
    if not isinstance(raw_options, list):
        raise ValueError("options must be a list")
    options = [
        _normalize_option(option, position, correct_letters)
        for position, option in enumerate(raw_options)
    ]
    question_type = data.get("question_type")
    if question_type not in (QuestionType.SINGLE.value, QuestionType.MULTIPLE.value):
        question_type = (
            QuestionType.MULTIPLE.value
            if sum(option.is_correct for option in options) > 1
            else QuestionType.SINGLE.value
        )

    return QuestionCreate(
        text=str(data.get("text", "")),
        question_type=question_type,
        explanation=data.get("explanation") or "",
        points=data.get("points") or 1,
        order_index=data.get("order_index"),
        options=options,
    )


def _upsert_set(db: Session, entry: BulkQuestionSet) -> Tuple[QuestionSet, str]:
    fields = entry.model_dump(exclude={"id", "questions"})
    existing = db.query(QuestionSet).filter(QuestionSet.id == entry.id).first() if entry.id else None
    if existing:
        for name, value in fields.items():
            setattr(existing, name, value)
        existing.questions = []
        db.flush()
        return existing, "updated"

    question_set = QuestionSet(**fields, question_count=0)
    if entry.id:
        question_set.id = entry.id
    db.add(question_set)
    db.flush()
    return question_set, "created"


def bulk_upload(db: Session, entries: List[BulkQuestionSet]) -> List[BulkUploadResult]:
    """
    Create or replace question sets with their questions. Each set is its
    own transaction; invalid questions are reported and skipped.
    """
    results = []
    for entry in entries:
        errors: List[str] = []
        question_set, status = _upsert_set(db, entry)
        for position, raw in enumerate(entry.questions, start=1):
            try:
                question = normalize_question(raw)
            except ValidationError as e:
                errors.append(f"Question {position}: {e.errors()[0]['msg']}")
                continue
            except ValueError as e:
                errors.append(f"Question {position}: {e}")
                continue
            if question.order_index is None:
                question.order_index = position - 1
            QuestionService.add_question(db, question_set.id, question, commit=False)

        count = QuestionSetService.refresh_question_count(db, question_set.id)
        db.commit()
        results.append(
            BulkUploadResult(
                id=question_set.id,
                title=question_set.title,
                status=status,
                question_count=count,
                errors=errors,
            )
        )
        logger.info(f"Bulk upload {status} set {question_set.id} with {count} questions")
    return results
