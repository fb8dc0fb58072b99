"""
Shared schema pieces: camelCase API model, pagination and the response envelope
"""

import math
from typing import Any, List, Optional

from fastapi import Query
from pydantic import BaseModel

from quizhub.db.fields import api_name


class APIModel(BaseModel):
    """Base schema; attributes are snake_case, JSON keys camelCase"""

    class Config:
        alias_generator = api_name
        populate_by_name = True
        from_attributes = True


class Page(APIModel):
    """Paginated list payload"""
    items: List[Any]
    total: int
    page: int
    limit: int
    total_pages: int


class PageParams:
    """Query dependency for ?page=&limit="""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(query, params: PageParams, schema) -> Page:
    """Run a count + page query and wrap the rows in ``schema``"""
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.limit).all()
    return Page(
        items=[schema.model_validate(row) for row in rows],
        total=total,
        page=params.page,
        limit=params.limit,
        total_pages=math.ceil(total / params.limit) if total else 0,
    )


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Successful response envelope"""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body
