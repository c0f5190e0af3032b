"""Apps and backends shared by the session tests."""

from typing import Optional

from fastapi import FastAPI, Request, Depends
from httpx import AsyncClient, ASGITransport
from pydantic import BaseModel

from session import (
    MemoryBackend,
    SessionData,
    SessionMiddleware,
    SessionIdentifier,
    session_dependency,
    take_session,
)
from session.backends.memory_backend import MemorySessionBackend


class CounterSession(BaseModel):
    val: int = 0


class RecordingMemoryBackend(MemoryBackend):
    """MemoryBackend that remembers every read and persist made through its handles."""

    def __init__(self):
        super().__init__()
        self.read_calls = []
        self.persist_calls = []

    def new_backend(self):
        return RecordingSessionBackend(self)


class RecordingSessionBackend(MemorySessionBackend):
    def __init__(self, factory: RecordingMemoryBackend):
        super().__init__(factory._storage, factory._lock)
        self._factory = factory

    async def read_session(self, identifier):
        self._factory.read_calls.append(identifier)
        return await super().read_session(identifier)

    async def persist_session(self, identifier, payload):
        self._factory.persist_calls.append((identifier, payload))
        await super().persist_session(identifier, payload)


def build_counter_app(backend, **middleware_options) -> FastAPI:
    """Small app with routes reading, mutating and ignoring a CounterSession."""
    app = FastAPI()
    app.state.handler_calls = 0
    app.add_middleware(SessionMiddleware, backend=backend, value_type=CounterSession, **middleware_options)

    get_counter = session_dependency(CounterSession)

    @app.get("/read")
    async def read(request: Request, session: SessionData[CounterSession] = Depends(get_counter)):
        request.app.state.handler_calls += 1
        return {"val": session.value.val}

    @app.post("/increment")
    async def increment(request: Request, session: SessionData[CounterSession] = Depends(get_counter)):
        request.app.state.handler_calls += 1
        counter = session.borrow_mut()
        counter.val += 1
        return {"val": counter.val}

    @app.get("/untouched")
    async def untouched(request: Request):
        request.app.state.handler_calls += 1
        return {"ok": True}

    @app.get("/detach")
    async def detach(request: Request):
        take_session(request, CounterSession)
        return {"detached": True}

    @app.get("/boom")
    async def boom():
        raise RuntimeError("handler failed")

    return app


async def send(app: FastAPI, method: str, path: str, cookie: Optional[str] = None):
    """Send one request with a fresh client so no cookie jar carries over between requests."""
    headers = {"Cookie": cookie} if cookie else {}
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        return await client.request(method, path, headers=headers)


def session_cookies(response, name: str = "_gotham_session"):
    return [value for value in response.headers.get_list("set-cookie") if value.startswith(f"{name}=")]


def cookie_token(set_cookie: str) -> SessionIdentifier:
    first = set_cookie.split(";")[0]
    return SessionIdentifier(first.split("=", 1)[1])


