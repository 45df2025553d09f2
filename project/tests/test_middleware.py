# tests/test_middleware.py

import pytest

from nursery.middleware.db_middleware import DBSessionMiddleware


class RecordingSession:
    def __init__(self):
        self.events = []

    async def rollback(self):
        self.events.append("rollback")

    async def close(self):
        self.events.append("close")


async def _noop_receive():
    return {"type": "http.request"}


async def _noop_send(message):
    pass


async def test_session_is_exposed_and_closed():
    session = RecordingSession()
    seen = {}

    async def endpoint(scope, receive, send):
        seen["db"] = scope["state"]["db"]

    middleware = DBSessionMiddleware(endpoint, session_factory=lambda: session)
    await middleware({"type": "http"}, _noop_receive, _noop_send)

    assert seen["db"] is session
    assert session.events == ["close"]


async def test_failed_request_rolls_back_before_close():
    session = RecordingSession()

    async def endpoint(scope, receive, send):
        raise RuntimeError("handler crashed")

    middleware = DBSessionMiddleware(endpoint, session_factory=lambda: session)
    with pytest.raises(RuntimeError):
        await middleware({"type": "http"}, _noop_receive, _noop_send)

    assert session.events == ["rollback", "close"]


async def test_non_http_scope_gets_no_session():
    calls = []

    async def endpoint(scope, receive, send):
        calls.append(scope)

    middleware = DBSessionMiddleware(endpoint, session_factory=lambda: pytest.fail("session opened"))
    await middleware({"type": "lifespan"}, _noop_receive, _noop_send)

    assert calls == [{"type": "lifespan"}]
