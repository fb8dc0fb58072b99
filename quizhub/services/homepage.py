"""Homepage settings service"""

from typing import List

from sqlalchemy.orm import Session

from quizhub.models import HOMEPAGE_DEFAULTS, HomepageSettings
from quizhub.schemas.homepage import HomepageContent, HomepageUpdate


class HomepageService:
    """Homepage service"""

    @staticmethod
    def _row(db: Session) -> HomepageSettings:
        row = db.query(HomepageSettings).filter(HomepageSettings.id == HomepageSettings.SINGLETON_ID).first()
        if row is None:
            row = HomepageSettings(id=HomepageSettings.SINGLETON_ID, **HOMEPAGE_DEFAULTS)
            db.add(row)
        return row

    @staticmethod
    def content(db: Session) -> HomepageContent:
        """Stored settings, or the defaults when nothing was saved yet"""
        row = db.query(HomepageSettings).filter(HomepageSettings.id == HomepageSettings.SINGLETON_ID).first()
        if row is None:
            return HomepageContent(**HOMEPAGE_DEFAULTS)
        return HomepageContent.model_validate(row)

    @staticmethod
    def update(db: Session, data: HomepageUpdate) -> HomepageContent:
        row = HomepageService._row(db)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(row, field, value)
        db.commit()
        db.refresh(row)
        return HomepageContent.model_validate(row)

    @staticmethod
    def set_featured_categories(db: Session, categories: List[str]) -> List[str]:
        row = HomepageService._row(db)
        # Preserve order, drop blanks and duplicates
        row.featured_categories = list(dict.fromkeys(c.strip() for c in categories if c.strip()))
        db.commit()
        return row.featured_categories
