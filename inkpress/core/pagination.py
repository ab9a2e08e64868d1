"""Page/limit pagination helpers shared by listing endpoints."""

import math
from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class Pagination(BaseModel):
    """Pagination block returned alongside every list."""

    current: int
    total: int
    total_items: int
    has_next: bool
    has_prev: bool


def build_pagination(page: int, limit: int, total_items: int) -> Pagination:
    total = math.ceil(total_items / limit) if limit > 0 else 0
    return Pagination(
        current=page,
        total=total,
        total_items=total_items,
        has_next=page < total,
        has_prev=page > 1,
    )


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], Pagination]:
    """Slice an already ordered sequence into one page.

    Cassandra has no OFFSET, so listings read the ordered partition (or index
    table) and slice in the service layer.
    """
    start = (page - 1) * limit
    return list(items[start : start + limit]), build_pagination(
        page, limit, len(items)
    )
