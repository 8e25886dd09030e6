import math
from typing import Generic, TypeVar
from app.core.schemas import APIModel

T = TypeVar("T")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

def normalize_page(page: int | None = 1, limit: int | None = DEFAULT_LIMIT) -> tuple[int, int, int]:
    page = max(1, page or 1)
    limit = min(MAX_LIMIT, max(1, limit or DEFAULT_LIMIT))
    return page, limit, (page - 1) * limit

class PaginationMeta(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

class Page(APIModel, Generic[T]):
    data: list[T]
    pagination: PaginationMeta

def paginate(data: list, total: int, page: int, limit: int) -> dict:
    return {"data": data, "pagination": PaginationMeta.build(page, limit, total)}
