"""
Pytest configuration and fixtures for tsdb_client.

Provides an in-memory HTTP server (httpx.MockTransport) and client factories.
"""

import json
import threading
from typing import Callable, Optional

import httpx
import pytest

from tsdb_client import Client


class FakeServer:
    """
    Records every request and answers with `handler(request)`.

    The default handler returns 200 with an empty JSON list.
    """

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json=[]))
        self._lock = threading.Lock()
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        return self.handler(request)

    @property
    def hosts(self) -> list[str]:
        return [r.url.host for r in self.requests]

    def bodies(self) -> list:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def sleeps():
    """Recorded backoff delays; the fixture's callable never actually sleeps."""
    return []


@pytest.fixture
def make_client(server, sleeps):
    created = []

    def _make(**overrides) -> Client:
        cfg = {"database": "metrics", "hosts": ["db1", "db2", "db3"]}
        cfg.update(overrides)
        c = Client(cfg, http_transport=server.transport, sleep=sleeps.append)
        created.append(c)
        return c

    yield _make

    for c in created:
        c.stop()


@pytest.fixture
def client(make_client):
    return make_client()
