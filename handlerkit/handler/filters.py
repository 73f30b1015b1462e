"""handler/filters.py — Filter chains run by the dispatcher before the handler body.

A front filter sees only the request and runs before any parsing.  A request
filter runs after body decoding and also receives the decoded body (None for
handlers without one).  Filters reject a request by raising; they may be
plain functions or coroutine functions.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from handlerkit.schemas.display import Display

FrontFilter = Callable[[Request], Union[None, Awaitable[None]]]
RequestFilter = Callable[[Request, Optional[BaseModel]], Union[None, Awaitable[None]]]

_SORT_ORDERS = ("asc", "desc")
_DEFAULT_SORT_ORDER = "desc"


class InvalidSortOrderError(ValueError):
    def __init__(self, order: str):
        self.order = order
        super().__init__(f"invalid sort order {order!r}, expected one of {', '.join(_SORT_ORDERS)}")


async def call_maybe_async(func: Callable[..., Any], *args: Any) -> Any:
    """Await coroutine functions; run plain functions in the threadpool."""
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    result = await run_in_threadpool(func, *args)
    # callable objects with an async __call__
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_front_filters(filters: Iterable[FrontFilter], request: Request) -> None:
    for f in filters:
        await call_maybe_async(f, request)


async def run_request_filters(
    filters: Iterable[RequestFilter], request: Request, body: Optional[BaseModel]
) -> None:
    for f in filters:
        await call_maybe_async(f, request, body)


def display_order_filter(request: Request, body: Optional[BaseModel]) -> None:
    """Normalize Display.sort.order to "asc"/"desc" (empty means desc)."""
    if not isinstance(body, Display):
        return
    order = body.get_order().strip().lower() or _DEFAULT_SORT_ORDER
    if order not in _SORT_ORDERS:
        raise InvalidSortOrderError(body.get_order())
    body.set_order(order)
