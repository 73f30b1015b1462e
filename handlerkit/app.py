"""app.py — FastAPI application factory.

Builds an app with logging, middleware, the HTTP error envelope and a
default Handler wired together.  Routes are added through the Handler
stored on app.state:

    app = create_app()
    handler = app.state.handler

    @handler.route(app, "/api/v1/orders", methods=["POST"])
    async def create_order(request: Request, body: CreateOrder) -> Order:
        ...

Run with:
    uvicorn myservice.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from handlerkit import __version__
from handlerkit.api.health import build_health_router
from handlerkit.core.config import Settings
from handlerkit.core.config import settings as default_settings
from handlerkit.core.logging import configure_logging
from handlerkit.core.middleware import RequestContextMiddleware
from handlerkit.handler.dispatcher import Handler
from handlerkit.handler.response import response_adaptor_for
from handlerkit.schemas.envelope import Envelope

logger = logging.getLogger(__name__)


def create_app(handler: Optional[Handler] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    if handler is None:
        handler = Handler(response_adaptor=response_adaptor_for(settings.response_style))

    # ---------------------------------------------------------------------------
    # Lifespan: startup and shutdown hooks
    # ---------------------------------------------------------------------------

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(
            module=settings.app_name,
            log_level=settings.log_level,
            log_dir=settings.log_dir,
            rotate_time=settings.log_rotate_time,
            max_age=settings.log_max_age,
            console=settings.log_to_console,
        )
        logger.info(
            "application starting",
            extra={
                "environment": settings.environment,
                "version": __version__,
                "log_level": settings.log_level,
                "response_style": type(handler.response_adaptor).__name__,
            },
        )
        yield
        logger.info("application shutting down")

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.state.handler = handler

    # ---------------------------------------------------------------------------
    # Middleware (last added = outermost):  CORS → RequestContext → route
    # ---------------------------------------------------------------------------

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------------------------------------------------------
    # Exception handlers: routing errors raised by the framework itself and
    # anything raised by routes mounted without the Handler. Errors from
    # handler functions never get here, the dispatcher renders them.
    # ---------------------------------------------------------------------------

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        logger.warning(
            "http error",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": request.url.path,
                "status_code": exc.status_code,
            },
        )
        envelope = Envelope(code=exc.status_code, msg=str(exc.detail))
        return JSONResponse(envelope.render(), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for errors raised outside a Handler: log the traceback, return an envelope."""
        logger.error(
            "unhandled exception",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": request.url.path,
                "error": str(exc),
            },
            exc_info=True,
        )
        envelope = Envelope(code=500, msg="internal server error")
        return JSONResponse(envelope.render(), status_code=500)

    app.include_router(build_health_router(handler, settings))
    return app
