"""Pagination utilities for repository list queries."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar


T = TypeVar("T")

# Pagination limits
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 500


@dataclass(frozen=True)
class PaginationParams:
    """Page-based pagination parameters (1-indexed)."""
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def next(self) -> "PaginationParams":
        return PaginationParams(page=self.page + 1, per_page=self.per_page)


@dataclass
class PaginatedResponse(Generic[T]):
    """Standard paginated response structure."""
    items: list[T]
    total: int
    page: int
    per_page: int
    pages: int = field(default=0)

    @property
    def has_more(self) -> bool:
        return self.page < self.pages

    @classmethod
    def create(cls, items: list[T], total: int, pagination: PaginationParams) -> "PaginatedResponse[T]":
        pages = (total + pagination.per_page - 1) // pagination.per_page if pagination.per_page > 0 else 0
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            per_page=pagination.per_page,
            pages=pages,
        )


def paginate_list(items: list[T], pagination: PaginationParams) -> PaginatedResponse[T]:
    """Slice an already-filtered, already-ordered list into a page."""
    window = items[pagination.offset : pagination.offset + pagination.per_page]
    return PaginatedResponse.create(window, len(items), pagination)
