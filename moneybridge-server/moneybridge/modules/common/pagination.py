"""Page-number pagination helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

ItemT = TypeVar("ItemT")

MAX_PAGE_SIZE = 100


@dataclass(slots=True, frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            object.__setattr__(self, "page", 1)
        if self.limit < 1:
            object.__setattr__(self, "limit", 1)
        elif self.limit > MAX_PAGE_SIZE:
            object.__setattr__(self, "limit", MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(slots=True)
class Page(Generic[ItemT]):
    items: list[ItemT] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total: int = 0

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
