"""handler/pagination.py — Offset pagination over ?start=&limit=.

Requests follow the Confluence REST convention: `start` is a zero-based
offset and `limit` the page size.  Responses carry `_links.next` and
`_links.prev` relative to the request path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping

from handlerkit.handler.constants import DEFAULT_LIMIT, DEFAULT_START, MAX_PAGE_LIMIT
from handlerkit.handler.errors import PaginationLimitError, PaginationStartError
from handlerkit.schemas.pagination import Links, PaginationQuery, PaginationResp

_UINT_RE = re.compile(r"[0-9]+")
_UINT64_MAX = 2**64 - 1


def _parse_uint(value: str) -> int | None:
    if not _UINT_RE.fullmatch(value):
        return None
    n = int(value)
    return n if n <= _UINT64_MAX else None


def parse_pagination(query_params: Mapping[str, str]) -> PaginationQuery:
    """Read start/limit from query parameters.

    Missing values fall back to start=0, limit=10.  A limit above
    MAX_PAGE_LIMIT is clamped rather than rejected.

    Raises:
        PaginationStartError: start is not an unsigned base-10 integer.
        PaginationLimitError: limit is not an unsigned base-10 integer.
    """
    start_str = query_params.get("start", DEFAULT_START)
    limit_str = query_params.get("limit", DEFAULT_LIMIT)

    start = _parse_uint(start_str)
    if start is None:
        raise PaginationStartError(start_str)

    limit = _parse_uint(limit_str)
    if limit is None:
        raise PaginationLimitError(limit_str)

    return PaginationQuery(start=start, limit=min(limit, MAX_PAGE_LIMIT))


@dataclass(frozen=True)
class PaginationProcessor:
    """Next/prev availability for one page of results.

    has_next is a heuristic: a full page suggests more rows may follow, so a
    result that exactly exhausts the rows still advertises a next link.
    """

    start: int
    limit: int
    total: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, query: PaginationQuery, size: int, total: int = 0) -> "PaginationProcessor":
        return cls(
            start=query.start,
            limit=query.limit,
            total=total,
            has_next=size == query.limit,
            has_prev=query.start != 0,
        )

    def links(self, base_url: str) -> Links:
        links = Links()
        if self.has_next:
            links.next = f"{base_url}?limit={self.limit}&start={self.start + self.limit}"
        if self.has_prev:
            links.prev = f"{base_url}?limit={self.limit}&start={max(0, self.start - self.limit)}"
        return links

    def to_response(self, base_url: str) -> PaginationResp:
        return PaginationResp(
            start=self.start,
            limit=self.limit,
            total=self.total or None,
            links=self.links(base_url),
        )
