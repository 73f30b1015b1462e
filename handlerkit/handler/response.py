"""handler/response.py — Response writers used by the Handler dispatcher.

Every response goes out with HTTP 200; a logical failure is signalled by the
envelope's `code`, not the transport status.

Two writers share the ResponseAdaptor interface:
  - StandardResponse : {code, msg, data, pagination} envelope
  - SimpleResponse   : the bare payload, or the error message as a JSON string

Both log failed requests (url, request id, stored request body, error)
through the logger they were constructed with.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse

from handlerkit.handler.constants import REQ_BODY_LABEL, SUCCESS_CODE
from handlerkit.handler.errors import error_message, format_error, root_cause
from handlerkit.handler.pagination import PaginationProcessor
from handlerkit.schemas.envelope import Envelope

_HTTP_OK = 200


class ResponseAdaptor(abc.ABC):
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @abc.abstractmethod
    def respond_error(self, request: Request, exc: BaseException, code: Optional[int]) -> JSONResponse:
        """Render a failed request; `code` is the mapped error code or None."""

    @abc.abstractmethod
    def respond_success(self, request: Request, data: Any) -> JSONResponse:
        ...

    @abc.abstractmethod
    def respond_success_pagination(
        self, request: Request, data: Any, processor: PaginationProcessor
    ) -> JSONResponse:
        ...

    def log_error(self, request: Request, exc: BaseException) -> None:
        self.logger.warning(
            "request failed",
            extra={
                "url": str(request.url),
                "request_id": getattr(request.state, "request_id", None),
                "request_body": getattr(request.state, REQ_BODY_LABEL, None),
                "error": repr(exc),
            },
        )


class StandardResponse(ResponseAdaptor):
    def respond_error(self, request: Request, exc: BaseException, code: Optional[int]) -> JSONResponse:
        self.log_error(request, exc)
        info = format_error(exc, code)
        return JSONResponse(Envelope(code=info.code, msg=info.msg).render(), status_code=_HTTP_OK)

    def respond_success(self, request: Request, data: Any) -> JSONResponse:
        return JSONResponse(Envelope(code=SUCCESS_CODE, data=data).render(), status_code=_HTTP_OK)

    def respond_success_pagination(
        self, request: Request, data: Any, processor: PaginationProcessor
    ) -> JSONResponse:
        envelope = Envelope(
            code=SUCCESS_CODE,
            data=data,
            pagination=processor.to_response(request.url.path),
        )
        return JSONResponse(envelope.render(), status_code=_HTTP_OK)


class SimpleResponse(ResponseAdaptor):
    def respond_error(self, request: Request, exc: BaseException, code: Optional[int]) -> JSONResponse:
        self.log_error(request, exc)
        return JSONResponse(error_message(root_cause(exc)), status_code=_HTTP_OK)

    def respond_success(self, request: Request, data: Any) -> JSONResponse:
        return JSONResponse(jsonable_encoder(data), status_code=_HTTP_OK)

    def respond_success_pagination(
        self, request: Request, data: Any, processor: PaginationProcessor
    ) -> JSONResponse:
        return JSONResponse(jsonable_encoder(data), status_code=_HTTP_OK)


RESPONSE_STYLES: dict[str, type[ResponseAdaptor]] = {
    "standard": StandardResponse,
    "simple": SimpleResponse,
}


def response_adaptor_for(style: str, logger: Optional[logging.Logger] = None) -> ResponseAdaptor:
    try:
        cls = RESPONSE_STYLES[style]
    except KeyError:
        raise ValueError(f"unknown response style {style!r}; expected one of {sorted(RESPONSE_STYLES)}") from None
    return cls(logger)
