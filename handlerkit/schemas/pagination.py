"""schemas/pagination.py — Pagination query, result and response blocks.

PaginationQuery is what a paginated handler receives; PaginationResult is
what it may return when it knows the total row count.  PaginationResp is
the block rendered under "pagination" in the standard envelope.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginationQuery(BaseModel):
    """Offset/size conditions parsed from ?start=&limit= (see handler.pagination)."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(0, ge=0)
    limit: int = Field(10, ge=0)


class PaginationResult(BaseModel, Generic[T]):
    """One page of rows plus the total number of rows across all pages."""

    data: list[T]
    total: int = Field(0, ge=0)


class Links(BaseModel):
    next: Optional[str] = None
    prev: Optional[str] = None


class PaginationResp(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: int
    limit: int
    total: Optional[int] = None  # omitted from the wire when zero
    links: Links = Field(default_factory=Links, alias="_links")

    def render(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
