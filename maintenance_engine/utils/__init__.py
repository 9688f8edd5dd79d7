"""Utility modules."""

from maintenance_engine.utils.pagination import (
    PaginatedResponse,
    PaginationParams,
    paginate_list,
)

__all__ = [
    "PaginatedResponse",
    "PaginationParams",
    "paginate_list",
]
