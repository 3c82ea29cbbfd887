"""Pagination blocks returned by the backend's list endpoints."""


import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaginationMeta(BaseModel):
    """``pagination`` object embedded next to a resource list."""

    model_config = ConfigDict(extra="allow")

    current_page: int = 1
    last_page: int = 1
    per_page: int = 15
    total: int = 0

    @property
    def has_next(self) -> bool:
        return self.current_page < self.last_page

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1


class PageLink(BaseModel):
    url: Optional[str] = None
    label: str
    active: bool = False


class PaginatorPage(BaseModel):
    """Paginator body where the rows sit in ``data`` next to the page counters.

    Subclasses narrow ``data`` to a concrete record list.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    current_page: int = 1
    last_page: int = 1
    per_page: int = 15
    total: int = 0
    from_: Optional[int] = Field(None, alias="from")
    to: Optional[int] = None
    first_page_url: Optional[str] = None
    last_page_url: Optional[str] = None
    next_page_url: Optional[str] = None
    prev_page_url: Optional[str] = None
    path: Optional[str] = None
    links: list[PageLink] = []

    def meta(self) -> PaginationMeta:
        total_pages = self.last_page or (
            math.ceil(self.total / self.per_page) if self.per_page else 1
        )
        return PaginationMeta(
            current_page=self.current_page,
            last_page=total_pages,
            per_page=self.per_page,
            total=self.total,
        )
