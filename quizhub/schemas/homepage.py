"""Homepage settings schemas"""

from typing import List, Optional

from quizhub.models.homepage import Theme
from quizhub.schemas.common import APIModel


class HomepageContent(APIModel):
    welcome_title: str
    welcome_description: str
    featured_categories: List[str] = []
    announcements: Optional[str] = None
    footer_text: Optional[str] = None
    banner_image: Optional[str] = None
    theme: Theme = Theme.LIGHT


class HomepageUpdate(APIModel):
    """Partial update of the homepage content"""
    welcome_title: Optional[str] = None
    welcome_description: Optional[str] = None
    featured_categories: Optional[List[str]] = None
    announcements: Optional[str] = None
    footer_text: Optional[str] = None
    banner_image: Optional[str] = None
    theme: Optional[Theme] = None


class FeaturedCategoriesUpdate(APIModel):
    featured_categories: List[str]
