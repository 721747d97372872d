"""Standardized JSON response envelopes: `{data}` and `{data, meta}`."""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from civic_registry.core.pagination import PageMeta, PaginationParams

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single-item (or single-list) envelope: `{ data: ... }`"""

    data: T

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope: `{ data: [...], meta: {total, page, limit, pages} }`"""

    data: list[T]
    meta: PageMeta

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


def paginated(items: list, total: int, pagination: PaginationParams) -> dict:
    """Build the ListResponse dict for one page of ``items`` out of ``total``."""
    limit = pagination.limit
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": pagination.page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 1,
        },
    }
