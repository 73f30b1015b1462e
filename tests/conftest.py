"""
Shared fixtures for the handlerkit test suite.

App, request and logger fixtures used across test modules.
"""

from __future__ import annotations

import logging
from typing import Callable

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from handlerkit.handler.dispatcher import Handler


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_client() -> Callable[..., TestClient]:
    """Build a TestClient for a bare app with handler functions mounted.

    Usage:
        client = make_client(handler, ("GET", "/items", list_items), ("POST", "/items", create_item))
    """

    def _make(handler: Handler, *routes: tuple[str, str, Callable]) -> TestClient:
        app = FastAPI()
        for method, path, func in routes:
            handler.route(app, path, methods=[method])(func)
        return TestClient(app)

    return _make


@pytest.fixture()
def restore_root_logger():
    """Put the root logger back the way it was after configure_logging() runs."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def make_request() -> Callable[..., Request]:
    """Build bare Starlette Requests for calling response adaptors directly."""

    def _make(path: str = "/items", query: str = "") -> Request:
        scope = {
            "type": "http",
            "method": "GET",
            "path": path,
            "raw_path": path.encode(),
            "root_path": "",
            "scheme": "http",
            "server": ("testserver", 80),
            "query_string": query.encode(),
            "headers": [],
        }
        return Request(scope)

    return _make
