"""
End-to-end tests for Handler — filters, body binding, pagination and envelopes.

Handler functions are mounted on a bare FastAPI app (see conftest.make_client)
and exercised through fastapi.testclient.TestClient.
"""

from __future__ import annotations

import asyncio
import json

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field, ValidationError

from handlerkit.handler.constants import REQ_BODY_LABEL
from handlerkit.handler.dispatcher import Handler
from handlerkit.handler.errors import PaginationParseError
from handlerkit.handler.filters import display_order_filter
from handlerkit.handler.response import SimpleResponse, StandardResponse
from handlerkit.schemas.display import Display
from handlerkit.schemas.pagination import PaginationQuery, PaginationResult


# ---------------------------------------------------------------------------
# Models, errors and handler functions
# ---------------------------------------------------------------------------

class Item(BaseModel):
    id: int
    name: str


class CreateItem(BaseModel):
    name: str = Field(min_length=1)
    quantity: int = 1


class ItemSearch(Display):
    pass


class ItemNotFound(LookupError):
    pass


class Unauthorized(PermissionError):
    pass


ERROR_CODES = {
    ItemNotFound: 4004,
    Unauthorized: 4001,
    PaginationParseError: 4000,
    ValidationError: 4220,
}

CATALOG = [Item(id=i, name=f"item-{i}") for i in range(25)]


def get_item(request: Request) -> Item:
    return CATALOG[int(request.query_params.get("id", "0"))]


def missing_item(request: Request) -> Item:
    try:
        raise KeyError("id 99")
    except KeyError as exc:
        raise ItemNotFound("item 99 not found") from exc


def unmapped_failure(request: Request) -> Item:
    raise RuntimeError("database password is hunter2")


async def create_item(request: Request, body: CreateItem) -> Item:
    await asyncio.sleep(0)
    return Item(id=100, name=body.name)


def delete_item(request: Request, body: CreateItem) -> None:
    return None


def ping(request: Request) -> None:
    pass


def list_items(request: Request, query: PaginationQuery) -> list[Item]:
    return CATALOG[query.start:query.start + query.limit]


def list_items_with_total(request: Request, query: PaginationQuery) -> PaginationResult[Item]:
    return PaginationResult[Item](data=CATALOG[query.start:query.start + query.limit], total=len(CATALOG))


def search_items(request: Request, body: ItemSearch, query: PaginationQuery) -> list[Item]:
    prefix = body.get_filter_string("prefix") if "prefix" in body.filter else ""
    hits = [i for i in CATALOG if i.name.startswith(prefix)]
    if body.get_order() == "desc":
        hits.reverse()
    return hits[query.start:query.start + query.limit]


def empty_page(request: Request, query: PaginationQuery) -> list[Item]:
    return None


def opaque_value(request: Request) -> object:
    return object()


# ---------------------------------------------------------------------------
# Success paths
# ---------------------------------------------------------------------------

class TestSuccess:

    def test_value_becomes_data(self, make_client):
        client = make_client(Handler(), ("GET", "/item", get_item))
        resp = client.get("/item?id=3")
        assert resp.status_code == 200
        assert resp.json() == {"code": 200, "msg": "", "data": {"id": 3, "name": "item-3"}}

    def test_no_return_value_writes_empty_payload(self, make_client):
        client = make_client(Handler(), ("GET", "/ping", ping))
        assert client.get("/ping").json() == {"code": 200, "msg": "", "data": {}}

    def test_async_body_handler(self, make_client):
        client = make_client(Handler(), ("POST", "/items", create_item))
        resp = client.post("/items", json={"name": "lamp"})
        assert resp.json() == {"code": 200, "msg": "", "data": {"id": 100, "name": "lamp"}}

    def test_body_handler_without_value(self, make_client):
        client = make_client(Handler(), ("DELETE", "/items", delete_item))
        assert client.request("DELETE", "/items", json={"name": "lamp"}).json()["data"] == {}

    def test_simple_response_adaptor(self, make_client):
        handler = Handler(response_adaptor=SimpleResponse())
        client = make_client(handler, ("GET", "/item", get_item))
        assert client.get("/item?id=1").json() == {"id": 1, "name": "item-1"}


# ---------------------------------------------------------------------------
# Error paths
# ---------------------------------------------------------------------------

class TestErrors:

    def test_mapped_root_cause(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("GET", "/missing", missing_item))
        resp = client.get("/missing")
        assert resp.status_code == 200
        assert resp.json() == {"code": 4004, "msg": "item 99 not found"}

    def test_unmapped_error_is_generic(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("GET", "/boom", unmapped_failure))
        assert client.get("/boom").json() == {"code": 300, "msg": "request error"}

    def test_invalid_json_body(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("POST", "/items", create_item))
        resp = client.post("/items", content=b"{not json", headers={"content-type": "application/json"})
        assert resp.status_code == 200
        assert resp.json()["code"] == 4220

    def test_body_validation_failure(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("POST", "/items", create_item))
        assert client.post("/items", json={"name": ""}).json()["code"] == 4220

    def test_missing_body(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("POST", "/items", create_item))
        assert client.post("/items").json()["code"] == 4220

    def test_bad_pagination(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("GET", "/items", list_items))
        resp = client.get("/items?start=abc")
        assert resp.json()["code"] == 4000
        assert "start" in resp.json()["msg"]

    def test_simple_adaptor_error(self, make_client):
        handler = Handler(ERROR_CODES, response_adaptor=SimpleResponse())
        client = make_client(handler, ("GET", "/missing", missing_item))
        assert client.get("/missing").json() == "item 99 not found"


# ---------------------------------------------------------------------------
# Rendering the handler result
# ---------------------------------------------------------------------------

class StampingResponse(StandardResponse):
    """Adaptor that writes into the payload it is given."""

    def respond_success(self, request, data):
        seen = dict(data)
        data["stamped"] = True
        return super().respond_success(request, seen)


class TestResultRendering:

    def test_none_page_is_empty(self, make_client):
        client = make_client(Handler(), ("GET", "/items", empty_page))
        resp = client.get("/items?start=10")
        assert resp.status_code == 200
        body = resp.json()
        assert body["data"] == []
        assert body["pagination"] == {
            "start": 10,
            "limit": 10,
            "_links": {"prev": "/items?limit=10&start=0"},
        }

    def test_unserializable_value_becomes_error(self, make_client):
        client = make_client(Handler(ERROR_CODES), ("GET", "/opaque", opaque_value))
        resp = client.get("/opaque")
        assert resp.status_code == 200
        assert resp.json() == {"code": 300, "msg": "request error"}

    def test_empty_payload_is_fresh_per_request(self, make_client):
        client = make_client(Handler(response_adaptor=StampingResponse()), ("GET", "/ping", ping))
        assert client.get("/ping").json()["data"] == {}
        assert client.get("/ping").json()["data"] == {}


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

class TestFrontFilters:

    def test_short_circuit(self, make_client):
        calls = []

        def first(request: Request) -> None:
            calls.append("first")

        def second(request: Request) -> None:
            calls.append("second")
            raise Unauthorized("missing token")

        def third(request: Request) -> None:
            calls.append("third")

        handled = []

        def body(request: Request) -> None:
            handled.append(True)

        handler = Handler(ERROR_CODES, front_filters=[first, second, third])
        client = make_client(handler, ("GET", "/guarded", body))
        resp = client.get("/guarded")

        assert resp.json() == {"code": 4001, "msg": "missing token"}
        assert calls == ["first", "second"]
        assert handled == []

    def test_front_filter_runs_before_body_binding(self, make_client):
        def reject(request: Request) -> None:
            raise Unauthorized("nope")

        client = make_client(Handler(ERROR_CODES, front_filters=[reject]), ("POST", "/items", create_item))
        # the body is invalid too, but the front filter wins
        assert client.post("/items", content=b"garbage").json()["code"] == 4001

    def test_async_front_filter(self, make_client):
        async def tag(request: Request) -> None:
            request.state.tenant = "acme"

        def whoami(request: Request) -> dict:
            return {"tenant": request.state.tenant}

        client = make_client(Handler(front_filters=[tag]), ("GET", "/whoami", whoami))
        assert client.get("/whoami").json()["data"] == {"tenant": "acme"}


class TestRequestFilters:

    def test_receives_decoded_body(self, make_client):
        seen = []

        def capture(request: Request, body) -> None:
            seen.append(body)

        client = make_client(Handler(request_filters=[capture]), ("POST", "/items", create_item))
        client.post("/items", json={"name": "lamp", "quantity": 2})
        assert seen == [CreateItem(name="lamp", quantity=2)]

    def test_receives_none_without_body(self, make_client):
        seen = []

        def capture(request: Request, body) -> None:
            seen.append(body)

        client = make_client(Handler(request_filters=[capture]), ("GET", "/ping", ping))
        client.get("/ping")
        assert seen == [None]

    def test_rejection(self, make_client):
        def limit_quantity(request: Request, body) -> None:
            if body is not None and body.quantity > 10:
                raise Unauthorized("quantity over limit")

        client = make_client(Handler(ERROR_CODES, request_filters=[limit_quantity]), ("POST", "/items", create_item))
        assert client.post("/items", json={"name": "lamp", "quantity": 50}).json() == {
            "code": 4001,
            "msg": "quantity over limit",
        }

    def test_stored_body_available_to_filters(self, make_client):
        stored = []

        def capture(request: Request, body) -> None:
            stored.append(getattr(request.state, REQ_BODY_LABEL))

        client = make_client(Handler(request_filters=[capture]), ("POST", "/items", create_item))
        client.post("/items", json={"name": "lamp"})
        assert json.loads(stored[0]) == {"name": "lamp", "quantity": 1}


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

class TestPagination:

    def test_first_page(self, make_client):
        client = make_client(Handler(), ("GET", "/items", list_items))
        body = client.get("/items").json()
        assert [i["id"] for i in body["data"]] == list(range(10))
        assert body["pagination"] == {
            "start": 0,
            "limit": 10,
            "_links": {"next": "/items?limit=10&start=10"},
        }

    def test_last_partial_page(self, make_client):
        client = make_client(Handler(), ("GET", "/items", list_items))
        body = client.get("/items?start=20&limit=10").json()
        assert len(body["data"]) == 5
        assert body["pagination"]["_links"] == {"prev": "/items?limit=10&start=10"}

    def test_limit_clamped(self, make_client):
        client = make_client(Handler(), ("GET", "/items", list_items))
        body = client.get("/items?limit=5000").json()
        assert body["pagination"]["limit"] == 1000
        assert len(body["data"]) == 25

    def test_total_from_pagination_result(self, make_client):
        client = make_client(Handler(), ("GET", "/items", list_items_with_total))
        body = client.get("/items?start=5&limit=5").json()
        assert [i["id"] for i in body["data"]] == [5, 6, 7, 8, 9]
        assert body["pagination"] == {
            "start": 5,
            "limit": 5,
            "total": 25,
            "_links": {"next": "/items?limit=5&start=10", "prev": "/items?limit=5&start=0"},
        }

    def test_body_and_pagination(self, make_client):
        handler = Handler(request_filters=[display_order_filter])
        client = make_client(handler, ("POST", "/items/search", search_items))
        resp = client.post(
            "/items/search?limit=3",
            json={"filter": {"prefix": "item-2"}, "sort": {"by": "id", "order": "DESC"}},
        )
        body = resp.json()
        assert [i["id"] for i in body["data"]] == [24, 23, 22]
        assert body["pagination"]["_links"] == {"next": "/items/search?limit=3&start=3"}

    def test_simple_adaptor_returns_bare_list(self, make_client):
        client = make_client(Handler(response_adaptor=SimpleResponse()), ("GET", "/items", list_items))
        assert len(client.get("/items?limit=2").json()) == 2


@pytest.mark.parametrize("method", ["handle", "route"])
def test_registration_entry_points(method):
    """Both Handler.handle() and Handler.route() produce working endpoints."""
    app = FastAPI()
    handler = Handler()
    if method == "handle":
        app.add_api_route("/ping", handler.handle(ping), methods=["GET"])
    else:
        handler.route(app, "/ping")(ping)
    assert TestClient(app).get("/ping").json() == {"code": 200, "msg": "", "data": {}}
