import msgpack
import pytest
from httpx import AsyncClient, ASGITransport

from session import (
    ConfigError,
    DecodeFailurePolicy,
    MemoryBackend,
    NewBackend,
    SessionCookieConfig,
    SessionIdentifier,
)
from service import create_app
from helpers import cookie_token, session_cookies


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def app(backend):
    return create_app(backend=backend, cookie_config=SessionCookieConfig.insecure("_visit"))


async def call(app, method, path, cookie=None):
    headers = {"Cookie": cookie} if cookie else {}
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost:5000") as client:
        return await client.request(method, path, headers=headers)


@pytest.mark.asyncio
async def test_status(app):
    response = await call(app, "GET", "/status")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_visits_are_counted_per_session(app, backend):
    first = await call(app, "POST", "/visits")
    assert first.json() == {"visits": 1}
    cookies = session_cookies(first, "_visit")
    assert len(cookies) == 1
    cookie = f"_visit={cookie_token(cookies[0]).value}"

    second = await call(app, "POST", "/visits", cookie=cookie)
    assert second.json() == {"visits": 2}
    assert session_cookies(second, "_visit") == []

    current = await call(app, "GET", "/visits", cookie=cookie)
    assert current.json() == {"visits": 2, "last_path": "/visits"}

    # A different client starts from zero
    other = await call(app, "GET", "/visits")
    assert other.json() == {"visits": 0, "last_path": None}
    assert len(backend) == 2


@pytest.mark.asyncio
async def test_corrupted_session_returns_generic_error(app, backend):
    identifier = SessionIdentifier("corrupted")
    await backend.new_backend().persist_session(identifier, msgpack.packb({"visits": "lots"}))

    response = await call(app, "GET", "/visits", cookie="_visit=corrupted")

    assert response.status_code == 500
    assert response.json()["error_code"] == "session_corrupted"


@pytest.mark.asyncio
async def test_corrupted_session_reset_policy(backend):
    app = create_app(
        backend=backend,
        cookie_config=SessionCookieConfig.insecure("_visit"),
        on_decode_error=DecodeFailurePolicy.RESET,
    )
    await backend.new_backend().persist_session(SessionIdentifier("corrupted"), b"\xc1")

    response = await call(app, "GET", "/visits", cookie="_visit=corrupted")

    assert response.status_code == 200
    assert response.json()["visits"] == 0
    assert len(session_cookies(response, "_visit")) == 1


@pytest.mark.asyncio
async def test_empty_backend_passed_in_is_used(monkeypatch):
    # An environment backend must not take the place of an explicit one
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379")
    backend = MemoryBackend()
    assert len(backend) == 0
    app = create_app(backend=backend, cookie_config=SessionCookieConfig.insecure("_visit"))

    response = await call(app, "POST", "/visits")

    assert response.status_code == 200
    assert len(backend) == 1


class BrokenFactory(NewBackend):
    def new_backend(self):
        raise ConfigError("storage unreachable")


def test_backend_config_error_raised_when_app_is_built():
    with pytest.raises(ConfigError):
        create_app(backend=BrokenFactory(), cookie_config=SessionCookieConfig.insecure("_visit"))


def test_invalid_redis_url_raised_when_app_is_built(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "http://localhost:6379")
    monkeypatch.delenv("SESSION_TTL_SECONDS", raising=False)

    with pytest.raises(ConfigError):
        create_app(cookie_config=SessionCookieConfig.insecure("_visit"))
