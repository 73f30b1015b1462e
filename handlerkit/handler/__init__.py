from handlerkit.handler.constants import MAX_PAGE_LIMIT, REQ_BODY_LABEL
from handlerkit.handler.errors import (
    BodyBindError, ErrorInfo, HandlerSignatureError, PaginationLimitError, PaginationParseError,
    PaginationStartError, SignatureFault, format_error, lookup_error_code, root_cause,
)
from handlerkit.handler.filters import FrontFilter, InvalidSortOrderError, RequestFilter, display_order_filter
from handlerkit.handler.pagination import PaginationProcessor, parse_pagination
from handlerkit.handler.response import ResponseAdaptor, SimpleResponse, StandardResponse, response_adaptor_for
from handlerkit.handler.dispatcher import Handler, HandlerShape, HandlerSpec, validate_func_type

__all__ = [
    "MAX_PAGE_LIMIT", "REQ_BODY_LABEL",
    "BodyBindError", "ErrorInfo", "HandlerSignatureError", "PaginationLimitError", "PaginationParseError",
    "PaginationStartError", "SignatureFault", "format_error", "lookup_error_code", "root_cause",
    "FrontFilter", "RequestFilter", "InvalidSortOrderError", "display_order_filter",
    "PaginationProcessor", "parse_pagination",
    "ResponseAdaptor", "StandardResponse", "SimpleResponse", "response_adaptor_for",
    "Handler", "HandlerShape", "HandlerSpec", "validate_func_type",
]
