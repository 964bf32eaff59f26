import json
from collections.abc import Callable

import httpx
import pytest

from tushare_query.client.tushare import Tushare

TOKEN = "test-token-0000"


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def token():
    return TOKEN


@pytest.fixture
def stock_basic_response():
    """Well-formed success payload for stock_basic."""
    return {
        "request_id": "a1b2c3",
        "code": 0,
        "msg": "",
        "data": {
            "fields": ["ts_code", "list_status"],
            "items": [["000001.SZ", "L"]],
            "has_more": False,
        },
    }


@pytest.fixture
def make_client():
    """Build a Tushare client whose transport answers with ``respond``."""
    clients: list[Tushare] = []

    def _make(respond: Callable[[httpx.Request], httpx.Response]):
        recorder = Recorder(respond)
        client = Tushare(TOKEN, transport=httpx.MockTransport(recorder))
        clients.append(client)
        return client, recorder

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def json_client(make_client):
    """Client answering every request with HTTP 200 and the given JSON body."""

    def _make(body):
        return make_client(lambda request: httpx.Response(200, json=body))

    return _make


@pytest.fixture
def offline_client():
    """Client for tests that build queries but never send them."""
    client = Tushare(TOKEN, transport=httpx.MockTransport(_no_network))
    yield client
    client.close()


def _no_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")
