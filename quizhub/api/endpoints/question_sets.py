"""
Question set endpoints
Catalog browsing, admin maintenance and bulk imports
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from quizhub.core.cache import CATEGORIES_KEY, CacheManager, get_cache
from quizhub.core.config import settings
from quizhub.core.database import get_db
from quizhub.core.exceptions import PayloadTooLargeException
from quizhub.core.logging import audit
from quizhub.core.security import get_optional_user, require_admin
from quizhub.models import User
from quizhub.realtime.manager import ConnectionManager, get_notifier
from quizhub.schemas.common import PageParams, ok
from quizhub.schemas.question import QuestionCreate, QuestionResponse
from quizhub.schemas.question_set import (
    BulkUploadRequest,
    FeaturedUpdate,
    QuestionSetCreate,
    QuestionSetResponse,
    QuestionSetUpdate,
)
from quizhub.services import importer
from quizhub.services.purchases import PurchaseService
from quizhub.services.question_sets import QuestionSetService
from quizhub.services.questions import QuestionService

router = APIRouter()


@router.get("")
async def list_question_sets(
    params: PageParams = Depends(),
    category: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    """Paginated catalog with question counts"""
    page = QuestionSetService.list_sets(db, params, category, search, sort_by, order)
    return ok(page)


@router.get("/categories")
async def list_categories(db: Session = Depends(get_db), cache: CacheManager = Depends(get_cache)):
    categories = await cache.get(CATEGORIES_KEY)
    if categories is None:
        categories = QuestionSetService.categories(db)
        await cache.set(CATEGORIES_KEY, categories)
    return ok(categories)


@router.get("/featured")
async def list_featured(category: Optional[str] = None, db: Session = Depends(get_db)):
    sets = QuestionSetService.featured(db, category)
    return ok([QuestionSetResponse.model_validate(s) for s in sets])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question_set(
    data: QuestionSetCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
):
    """Create a question set (admin)"""
    question_set = QuestionSetService.create(db, data)
    await cache.delete(CATEGORIES_KEY)
    audit("question_set.create", current_user, target_id=question_set.id)
    return ok(QuestionSetResponse.model_validate(question_set), "Question set created")


@router.post("/upload")
async def bulk_upload(
    data: BulkUploadRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Create or replace question sets together with their questions (admin)"""
    results = importer.bulk_upload(db, data.question_sets)
    await cache.delete(CATEGORIES_KEY)
    for result in results:
        await notifier.question_count_updated(result.id, result.question_count)
    audit("question_set.bulk_upload", current_user, sets=[r.id for r in results])
    return ok(results, f"Processed {len(results)} question sets")


@router.post("/upload/file")
async def upload_question_file(
    question_set_id: str = Form(..., alias="questionSetId"),
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Import questions from a pipe-delimited CSV/TXT file (admin)"""
    if file.size is not None and file.size > settings.UPLOAD_MAX_BYTES:
        raise PayloadTooLargeException(settings.UPLOAD_MAX_BYTES)
    payload = await file.read(settings.UPLOAD_MAX_BYTES + 1)

    result = importer.import_question_file(db, question_set_id, file.filename, payload)
    await notifier.question_count_updated(question_set_id, result.question_count)
    audit("question_set.import_file", current_user, target_id=question_set_id, imported=result.success)
    return ok(result, f"Imported {result.success} questions, {result.failed} failed")


@router.get("/{question_set_id}")
async def get_question_set(question_set_id: str, db: Session = Depends(get_db)):
    question_set = QuestionSetService.get(db, question_set_id)
    return ok(QuestionSetResponse.model_validate(question_set))


@router.get("/{question_set_id}/questions")
async def get_question_set_questions(
    question_set_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Questions in order; paid sets without access are limited to the trial questions"""
    question_set = QuestionSetService.get(db, question_set_id)
    full_access = PurchaseService.has_access(db, current_user, question_set)
    questions, truncated = QuestionSetService.questions(db, question_set, full_access)
    message = None
    if truncated:
        message = f"Trial access: {len(questions)} of {question_set.question_count} questions"
    return ok([QuestionResponse.model_validate(q) for q in questions], message)


@router.post("/{question_set_id}/questions", status_code=status.HTTP_201_CREATED)
async def add_question(
    question_set_id: str,
    data: QuestionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Add a question with its options to the set (admin)"""
    question = QuestionService.add_question(db, question_set_id, data)
    question_set = QuestionSetService.get(db, question_set_id)
    await notifier.question_count_updated(question_set_id, question_set.question_count)
    return ok(QuestionResponse.model_validate(question), "Question added")


@router.put("/{question_set_id}")
async def update_question_set(
    question_set_id: str,
    data: QuestionSetUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
):
    question_set = QuestionSetService.update(db, question_set_id, data)
    await cache.delete(CATEGORIES_KEY)
    audit("question_set.update", current_user, target_id=question_set_id)
    return ok(QuestionSetResponse.model_validate(question_set), "Question set updated")


@router.put("/{question_set_id}/featured")
async def set_featured(
    question_set_id: str,
    data: FeaturedUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question_set = QuestionSetService.set_featured(db, question_set_id, data)
    return ok(QuestionSetResponse.model_validate(question_set))


@router.delete("/{question_set_id}")
async def delete_question_set(
    question_set_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
):
    """Delete a set with all its questions (admin)"""
    QuestionSetService.delete(db, question_set_id)
    await cache.delete(CATEGORIES_KEY)
    audit("question_set.delete", current_user, target_id=question_set_id)
    return ok(message="Question set deleted")
