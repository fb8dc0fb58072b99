"""
Homepage endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizhub.core.cache import HOMEPAGE_CONTENT_KEY, CacheManager, get_cache
from quizhub.core.database import get_db
from quizhub.core.logging import audit
from quizhub.core.security import require_admin
from quizhub.models import User
from quizhub.schemas.common import ok
from quizhub.schemas.homepage import FeaturedCategoriesUpdate, HomepageUpdate
from quizhub.schemas.question_set import QuestionSetResponse
from quizhub.services.homepage import HomepageService
from quizhub.services.question_sets import QuestionSetService

router = APIRouter()


@router.get("/content")
async def get_content(db: Session = Depends(get_db), cache: CacheManager = Depends(get_cache)):
    """Homepage content, served from cache when possible"""
    content = await cache.get(HOMEPAGE_CONTENT_KEY)
    if content is None:
        content = HomepageService.content(db).model_dump(mode="json", by_alias=True)
        await cache.set(HOMEPAGE_CONTENT_KEY, content)
    return ok(content)


@router.put("/content")
async def update_content(
    data: HomepageUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
):
    content = HomepageService.update(db, data)
    await cache.delete(HOMEPAGE_CONTENT_KEY)
    audit("homepage.update", current_user, fields=sorted(data.model_fields_set))
    return ok(content, "Homepage updated")


@router.get("/featured-categories")
async def get_featured_categories(db: Session = Depends(get_db)):
    return ok(HomepageService.content(db).featured_categories)


@router.put("/featured-categories")
async def update_featured_categories(
    data: FeaturedCategoriesUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
):
    categories = HomepageService.set_featured_categories(db, data.featured_categories)
    await cache.delete(HOMEPAGE_CONTENT_KEY)
    return ok(categories, "Featured categories updated")


@router.get("/featured-question-sets")
async def get_featured_question_sets(db: Session = Depends(get_db)):
    sets = QuestionSetService.featured(db)
    return ok([QuestionSetResponse.model_validate(s) for s in sets])
