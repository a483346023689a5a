import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio

from flashdeck.config import settings
from flashdeck.db.sqlite import get_db, init_sqlite

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def db(tmp_path):
    """A fresh SQLite database with the schema applied."""
    await init_sqlite(tmp_path)
    async for conn in get_db():
        yield conn


@pytest.fixture
def client(tmp_path, monkeypatch, clock):
    """TestClient over a throwaway data dir with the clock frozen at T0."""
    from fastapi.testclient import TestClient

    from flashdeck import app
    from flashdeck.dependencies import get_clock

    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_ollama():
    """
    Route every httpx.AsyncClient to an in-process handler.

    Usage:
        mock_ollama(lambda request: httpx.Response(200, json={...}))
    """
    real_client = httpx.AsyncClient
    active = []

    def install(handler):
        transport = httpx.MockTransport(handler)

        def factory(*args, **kwargs):
            kwargs["transport"] = transport
            return real_client(*args, **kwargs)

        p = patch("httpx.AsyncClient", factory)
        p.start()
        active.append(p)
        return transport

    yield install
    for p in reversed(active):
        p.stop()


class ChunkedBody(httpx.AsyncByteStream):
    """Response body that is only produced when iterated, like a live socket."""

    def __init__(self, *chunks: bytes):
        self._chunks = chunks

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk


def streamed_json(status_code: int, payload) -> httpx.Response:
    body = json.dumps(payload).encode()
    return httpx.Response(
        status_code,
        headers={"content-type": "application/json"},
        stream=ChunkedBody(body[:5], body[5:]),
    )


def refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)
