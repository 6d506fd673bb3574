"""Paging result DTO shared by every entity's list endpoint."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PagingResult(BaseModel, Generic[T]):
    """
    One page of entities plus the page metadata.

    Invariants:
    - ``len(data) <= page_size``
    - ``pages == ceil(total / page_size)``, hence 0 when ``total`` is 0
    """

    total: int = Field(..., ge=0, description="Matching entities, ignoring page bounds")
    pages: int = Field(..., ge=0, description="Number of pages of pageSize")
    page: int = Field(..., ge=0, description="Zero-based page index")
    page_size: int = Field(..., gt=0, alias="pageSize", description="Entities per page")
    data: list[T]

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, total: int, skip: int, page_size: int, data: list[T]) -> "PagingResult[T]":
        """
        Compose a result from a count and a bounded find.

        Args:
            total: Count of matching entities
            skip: Number of entities skipped before this page
            page_size: Requested page size
            data: Entities of this page
        """
        return cls(
            total=total,
            pages=math.ceil(total / page_size),
            page=skip // page_size,
            page_size=page_size,
            data=data,
        )
