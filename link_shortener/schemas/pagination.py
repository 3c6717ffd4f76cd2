"""Page request/response schemas and page arithmetic."""

import math
from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")
U = TypeVar("U")


class PageRequest(BaseModel):
    """A zero-based page index and a positive page size."""

    index: int = Field(default=0, ge=0, description="Zero-based page index")
    size: int = Field(default=10, gt=0, description="Number of items per page")

    @property
    def offset(self) -> int:
        return self.index * self.size

    @property
    def limit(self) -> int:
        return self.size


class PageResponse(BaseModel, Generic[T]):
    """A slice of an ordered result set plus the total page count."""

    content: list[T] = Field(default_factory=list)
    total_pages: int = 0

    @classmethod
    def empty(cls) -> "PageResponse[T]":
        return cls(content=[], total_pages=0)

    def map(self, mapper: Callable[[T], U]) -> "PageResponse[U]":
        """Transform every item while keeping the page count."""
        return PageResponse(
            content=[mapper(item) for item in self.content],
            total_pages=self.total_pages,
        )


def calculate_total_pages(page_size: int, total_rows: int) -> int:
    """Number of pages needed to show `total_rows` rows, zero when empty."""
    if total_rows <= 0:
        return 0
    return math.ceil(total_rows / page_size)
