# Overview: Page/limit handling shared by every list endpoint.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from flask import current_app

from ..validation import coerce_int


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: list
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
        }


def page_request(page: Any = None, limit: Any = None) -> PageRequest:
    """
    Build a PageRequest from raw query-string values.

    Missing values fall back to defaults; page is floored at 1 and limit is
    clamped to [1, PAGE_SIZE_MAX]. Non-numeric values are a ValidationError.
    """
    default_limit = current_app.config.get("PAGE_SIZE_DEFAULT", DEFAULT_PAGE_SIZE)
    max_limit = current_app.config.get("PAGE_SIZE_MAX", MAX_PAGE_SIZE)

    page_num = coerce_int(page, "page") if page not in (None, "") else 1
    limit_num = coerce_int(limit, "limit") if limit not in (None, "") else default_limit

    # Clamp
    if page_num < 1:
        page_num = 1
    if limit_num < 1:
        limit_num = 1
    if limit_num > max_limit:
        limit_num = max_limit

    return PageRequest(page=page_num, limit=limit_num)


def paginate(query, request: PageRequest) -> Page:
    """Count, then slice an already-ordered query."""
    total = query.order_by(None).count()
    items = query.offset(request.offset).limit(request.limit).all()
    return Page(items=items, page=request.page, limit=request.limit, total=total)
