"""handler/dispatcher.py — Turn typed handler functions into FastAPI endpoints.

A handler function takes the request, optionally a pydantic body model and
optionally a PaginationQuery, and either returns its result or raises:

    def get_user(request: Request) -> User: ...
    async def create_user(request: Request, body: CreateUser) -> User: ...
    def list_users(request: Request, query: PaginationQuery) -> list[User]: ...
    def search_users(request: Request, body: UserSearch, query: PaginationQuery) -> PaginationResult[User]: ...
    def delete_user(request: Request, body: DeleteUser) -> None: ...

Handler.handle() validates the signature once, picks the matching
HandlerShape, and returns an endpoint usable with router.add_api_route() or
any Starlette Route.  The endpoint runs the filter chains, binds the body,
parses pagination, calls the function and renders the result through the
configured ResponseAdaptor.  Any Exception along the way becomes an error
response; a signature that fits no shape raises HandlerSignatureError at
registration so a misconfigured app never starts.
"""

from __future__ import annotations

import collections.abc
import enum
import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import Response

from handlerkit.handler.constants import REQ_BODY_LABEL
from handlerkit.handler.errors import (
    BodyBindError,
    ErrorCodes,
    HandlerSignatureError,
    SignatureFault,
    lookup_error_code,
)
from handlerkit.handler.filters import (
    FrontFilter,
    RequestFilter,
    call_maybe_async,
    run_front_filters,
    run_request_filters,
)
from handlerkit.handler.pagination import PaginationProcessor, parse_pagination
from handlerkit.handler.response import ResponseAdaptor, StandardResponse
from handlerkit.schemas.pagination import PaginationQuery, PaginationResult

logger = logging.getLogger(__name__)

_LIST_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)


class HandlerShape(enum.Enum):
    CONTEXT = "context"
    CONTEXT_BODY = "context+body"
    CONTEXT_PAGINATION = "context+pagination"
    CONTEXT_BODY_PAGINATION = "context+body+pagination"

    @property
    def has_body(self) -> bool:
        return self in (HandlerShape.CONTEXT_BODY, HandlerShape.CONTEXT_BODY_PAGINATION)

    @property
    def has_pagination(self) -> bool:
        return self in (HandlerShape.CONTEXT_PAGINATION, HandlerShape.CONTEXT_BODY_PAGINATION)


@dataclass(frozen=True)
class HandlerSpec:
    """What validate_func_type learned about a handler function."""

    func: Callable[..., Any]
    shape: HandlerShape
    body_type: Optional[type[BaseModel]]
    returns_value: bool


# ---------------------------------------------------------------------------
# Signature validation
# ---------------------------------------------------------------------------

def _is_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def _is_pagination_query(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, PaginationQuery)


def _is_list_result(tp: Any) -> bool:
    if tp in _LIST_ORIGINS:
        return True
    if typing.get_origin(tp) in _LIST_ORIGINS:
        return True
    return isinstance(tp, type) and issubclass(tp, PaginationResult)


def validate_func_type(func: Any) -> HandlerSpec:
    """Check a handler function against the recognized call shapes.

    Raises:
        HandlerSignatureError: with a SignatureFault naming the first problem found.
    """
    if not (inspect.isfunction(func) or inspect.ismethod(func)):
        raise HandlerSignatureError(SignatureFault.NOT_CALLABLE, "need a function", func)

    sig = inspect.signature(func)
    params = list(sig.parameters.values())
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    if any(p.kind not in positional for p in params):
        raise HandlerSignatureError(
            SignatureFault.VARIADIC, "need a non-variadic function with positional parameters", func
        )

    if not 1 <= len(params) <= 3:
        raise HandlerSignatureError(SignatureFault.PARAM_COUNT, "need one, two or three parameters", func)

    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError) as exc:
        raise HandlerSignatureError(
            SignatureFault.UNRESOLVED_ANNOTATION, f"cannot resolve annotations ({exc})", func
        ) from exc

    arg_types = [hints.get(p.name) for p in params]

    first = arg_types[0]
    if not (isinstance(first, type) and issubclass(first, Request)):
        raise HandlerSignatureError(SignatureFault.FIRST_PARAM, "the first parameter must be the Request", func)

    body_type = None
    if len(params) == 1:
        shape = HandlerShape.CONTEXT
    elif len(params) == 2 and _is_pagination_query(arg_types[1]):
        shape = HandlerShape.CONTEXT_PAGINATION
    else:
        body_type = arg_types[1]
        if not _is_model(body_type) or _is_pagination_query(body_type):
            raise HandlerSignatureError(
                SignatureFault.BODY_PARAM, "the second parameter must be a pydantic model", func
            )
        if len(params) == 2:
            shape = HandlerShape.CONTEXT_BODY
        elif _is_pagination_query(arg_types[2]):
            shape = HandlerShape.CONTEXT_BODY_PAGINATION
        else:
            raise HandlerSignatureError(
                SignatureFault.PAGINATION_PARAM, "the third parameter must be a PaginationQuery", func
            )

    if "return" not in hints:
        raise HandlerSignatureError(SignatureFault.RETURN_ARITY, "the return value must be annotated", func)
    ret = hints["return"]
    if ret is tuple or typing.get_origin(ret) is tuple:
        raise HandlerSignatureError(
            SignatureFault.RETURN_ARITY, "the handler must return a single value, not a tuple", func
        )
    if isinstance(ret, type) and issubclass(ret, BaseException):
        raise HandlerSignatureError(
            SignatureFault.RETURN_ERROR, "errors must be raised, not returned", func
        )

    returns_value = ret is not type(None)
    if shape.has_pagination and not _is_list_result(ret):
        raise HandlerSignatureError(
            SignatureFault.PAGINATION_RESULT,
            "the return value of a paginated handler must be a list or PaginationResult",
            func,
        )

    return HandlerSpec(func=func, shape=shape, body_type=body_type, returns_value=returns_value)


# ---------------------------------------------------------------------------
# Request binding
# ---------------------------------------------------------------------------

async def bind_body(request: Request, body_type: type[BaseModel]) -> BaseModel:
    """Decode the JSON body into body_type and stash its JSON on request.state.

    Raises:
        BodyBindError: chained from the decode or validation error.
    """
    raw = await request.body()
    try:
        body = body_type.model_validate_json(raw or b"null")
    except ValidationError as exc:
        raise BodyBindError("bind request body") from exc
    setattr(request.state, REQ_BODY_LABEL, body.model_dump_json())
    return body


class Handler:
    """Wraps handler functions with filters, binding and response normalization.

    Args:
        error_codes: exception class -> envelope code, looked up on the root cause.
        front_filters: run before anything is parsed.
        request_filters: run after the body is bound.
        response_adaptor: StandardResponse unless given.
    """

    def __init__(
        self,
        error_codes: Optional[ErrorCodes] = None,
        front_filters: Iterable[FrontFilter] = (),
        request_filters: Iterable[RequestFilter] = (),
        response_adaptor: Optional[ResponseAdaptor] = None,
    ):
        self.error_codes: Mapping[type[BaseException], int] = dict(error_codes or {})
        self.front_filters = tuple(front_filters)
        self.request_filters = tuple(request_filters)
        self.response_adaptor = response_adaptor or StandardResponse()

    def set_response_adaptor(self, response_adaptor: ResponseAdaptor) -> "Handler":
        self.response_adaptor = response_adaptor
        return self

    def error_code(self, exc: BaseException) -> Optional[int]:
        return lookup_error_code(exc, self.error_codes)

    def handle(self, func: Callable[..., Any]) -> Callable[[Request], Any]:
        spec = validate_func_type(func)
        logger.debug(
            "handler registered",
            extra={"handler": getattr(func, "__qualname__", repr(func)), "shape": spec.shape.value},
        )

        async def endpoint(request: Request) -> Response:
            return await self.dispatch(spec, request)

        # No functools.wraps: FastAPI would follow __wrapped__ and inject func's parameters.
        endpoint.__name__ = getattr(func, "__name__", endpoint.__name__)
        endpoint.__qualname__ = getattr(func, "__qualname__", endpoint.__qualname__)
        endpoint.__doc__ = func.__doc__
        return endpoint

    def route(self, router: Any, path: str, methods: Optional[list[str]] = None, **kwargs: Any):
        """Decorator registering a handler function on a FastAPI app or APIRouter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            router.add_api_route(path, self.handle(func), methods=methods or ["GET"], **kwargs)
            return func

        return decorator

    async def dispatch(self, spec: HandlerSpec, request: Request) -> Response:
        adaptor = self.response_adaptor
        try:
            await run_front_filters(self.front_filters, request)
            args = await self.build_args(spec, request)
            result = await call_maybe_async(spec.func, *args)
            return self.render_result(spec, request, args, result)
        except Exception as exc:
            return adaptor.respond_error(request, exc, self.error_code(exc))

    def render_result(self, spec: HandlerSpec, request: Request, args: list[Any], result: Any) -> Response:
        adaptor = self.response_adaptor
        if spec.shape.has_pagination:
            query = args[-1]
            if isinstance(result, PaginationResult):
                data, total = result.data, result.total
            else:
                data, total = result, 0
            # A handler with nothing to page returns None; render it as an empty page.
            if data is None:
                data = []
            processor = PaginationProcessor.build(query, len(data), total)
            return adaptor.respond_success_pagination(request, data, processor)

        if not spec.returns_value:
            return adaptor.respond_success(request, {})
        return adaptor.respond_success(request, result)

    async def build_args(self, spec: HandlerSpec, request: Request) -> list[Any]:
        shape = spec.shape
        body = None
        if shape.has_body:
            body = await bind_body(request, spec.body_type)

        await run_request_filters(self.request_filters, request, body)

        if shape is HandlerShape.CONTEXT:
            return [request]
        if shape is HandlerShape.CONTEXT_BODY:
            return [request, body]
        query = parse_pagination(request.query_params)
        if shape is HandlerShape.CONTEXT_PAGINATION:
            return [request, query]
        return [request, body, query]
