"""handlerkit — typed handler functions, filters, pagination and response envelopes for FastAPI."""

__version__ = "0.1.0"

from handlerkit.handler import (  # noqa: E402
    Handler, HandlerSignatureError, PaginationProcessor, SimpleResponse, StandardResponse, parse_pagination,
)
from handlerkit.params import SymbolParseError, split_symbol  # noqa: E402
from handlerkit.schemas import Display, PaginationQuery, PaginationResult  # noqa: E402

__all__ = [
    "__version__",
    "Handler", "HandlerSignatureError", "PaginationProcessor", "SimpleResponse", "StandardResponse",
    "parse_pagination", "SymbolParseError", "split_symbol", "Display", "PaginationQuery", "PaginationResult",
]
