"""handler/errors.py — Error types and error-code resolution.

Errors are wrapped with ordinary exception chaining:

    try:
        ...
    except ValueError as exc:
        raise BodyBindError("bind request body") from exc

The innermost __cause__ of such a chain is its root cause, and the root
cause's class is what the error-code map is keyed on.
"""

from __future__ import annotations

import enum
from typing import Mapping, NamedTuple, Optional

from handlerkit.handler.constants import DEFAULT_ERROR_CODE, DEFAULT_ERROR_MSG

ErrorCodes = Mapping[type[BaseException], int]


class SignatureFault(str, enum.Enum):
    NOT_CALLABLE = "not_callable"
    VARIADIC = "variadic"
    PARAM_COUNT = "param_count"
    FIRST_PARAM = "first_param"
    BODY_PARAM = "body_param"
    PAGINATION_PARAM = "pagination_param"
    UNRESOLVED_ANNOTATION = "unresolved_annotation"
    RETURN_ARITY = "return_arity"
    RETURN_ERROR = "return_error"
    PAGINATION_RESULT = "pagination_result"


class HandlerSignatureError(TypeError):
    """A handler function does not match any recognized call shape.

    Raised at route registration, never while serving a request.
    """

    def __init__(self, reason: SignatureFault, message: str, func: object = None):
        self.reason = reason
        self.func = func
        name = getattr(func, "__qualname__", repr(func))
        super().__init__(f"{message} in {name}")


class BodyBindError(ValueError):
    """The request body could not be decoded into the handler's body model."""


class PaginationParseError(ValueError):
    field = ""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"parse pagination {self.field}: invalid value {value!r}")


class PaginationStartError(PaginationParseError):
    field = "start"


class PaginationLimitError(PaginationParseError):
    field = "limit"


class ErrorInfo(NamedTuple):
    code: int
    msg: str


def root_cause(exc: BaseException) -> BaseException:
    """Follow __cause__ links to the innermost exception."""
    seen = {id(exc)}
    while exc.__cause__ is not None and id(exc.__cause__) not in seen:
        exc = exc.__cause__
        seen.add(id(exc))
    return exc


def lookup_error_code(exc: BaseException, error_codes: ErrorCodes) -> Optional[int]:
    """Return the code mapped to the root cause's class (or nearest base), else None."""
    root = root_cause(exc)
    for cls in type(root).__mro__:
        if cls in error_codes:
            return error_codes[cls]
    return None


def error_message(exc: BaseException) -> str:
    msg = str(exc)
    return msg if msg else type(exc).__name__


def format_error(exc: BaseException, code: Optional[int]) -> ErrorInfo:
    """Turn an exception and its resolved code into the envelope's code/msg.

    Unmapped errors (code is None) never leak their message.
    """
    if code is None:
        return ErrorInfo(DEFAULT_ERROR_CODE, DEFAULT_ERROR_MSG)
    return ErrorInfo(code, error_message(root_cause(exc)))
