"""Pagination — page/limit arithmetic and the `meta.pagination` block.

Invariants:
    - page >= 1 and limit >= 1 (bad values fall back to defaults)
    - total_pages == ceil(total / limit)
    - has_next == page < total_pages; has_prev == page > 1
"""

import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0

    def __post_init__(self):
        object.__setattr__(self, "page", self.page if self.page and self.page > 0 else DEFAULT_PAGE)
        object.__setattr__(self, "limit", self.limit if self.limit and self.limit > 0 else DEFAULT_LIMIT)
        object.__setattr__(self, "total", max(int(self.total or 0), 0))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def with_total(self, total: int) -> "Pagination":
        return Pagination(self.page, self.limit, total)

    def to_meta(self) -> dict:
        return {
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "totalPages": self.total_pages,
                "hasNext": self.has_next,
                "hasPrev": self.has_prev,
            },
        }
