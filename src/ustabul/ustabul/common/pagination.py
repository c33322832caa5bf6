from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Mapping, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args: Mapping[str, str], *, default_limit: int = DEFAULT_PAGE_SIZE) -> "PageRequest":
        def _int(name: str, default: int) -> int:
            try:
                return int(args.get(name) or default)
            except (TypeError, ValueError):
                return default

        page = max(_int("page", 1), 1)
        limit = min(max(_int("limit", default_limit), 1), MAX_PAGE_SIZE)
        return cls(page=page, limit=limit)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    request: PageRequest

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.limit) if self.total else 0

    @property
    def has_more(self) -> bool:
        return self.request.page < self.total_pages

    def meta(self) -> dict:
        return {
            "page": self.request.page,
            "limit": self.request.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasMore": self.has_more,
        }
