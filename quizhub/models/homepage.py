"""
Homepage settings model (single row, id = 1)
"""

import enum

from sqlalchemy import JSON, Column, Integer, String, Text

from quizhub.core.database import Base
from quizhub.models.base import TimestampMixin, string_enum


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


HOMEPAGE_DEFAULTS = {
    "welcome_title": "ExamTopics 模拟练习",
    "welcome_description": "选择以下任一题库开始练习，测试您的知识水平",
    "featured_categories": ["网络协议", "编程语言", "计算机基础"],
    "announcements": "欢迎使用在线题库系统，新增题库将定期更新，请持续关注！",
    "footer_text": "© 2023 ExamTopics 在线题库系统 保留所有权利",
    "banner_image": "/images/banner.jpg",
    "theme": Theme.LIGHT,
}


class HomepageSettings(TimestampMixin, Base):
    """Admin-editable homepage content"""
    __tablename__ = "homepage_settings"

    SINGLETON_ID = 1

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    welcome_title = Column(String(255), nullable=False, default=HOMEPAGE_DEFAULTS["welcome_title"])
    welcome_description = Column(Text, nullable=False, default=HOMEPAGE_DEFAULTS["welcome_description"])
    featured_categories = Column(JSON, nullable=False, default=list)
    announcements = Column(Text, nullable=True)
    footer_text = Column(String(255), nullable=True)
    banner_image = Column(String(500), nullable=True)
    theme = Column(string_enum(Theme), nullable=False, default=Theme.LIGHT)
