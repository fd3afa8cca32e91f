"""Tests for biscuit.middleware.cookies — ASGI CookieMiddleware."""

from typing import Any

import pytest

from biscuit.config import CookieConfig
from biscuit.http.cookies import Cookie, parse_set_cookie
from biscuit.middleware.cookies import CookieMiddleware, get_cookies
from biscuit.security.keys import Key

KEY = Key.derive_from(b"middleware-tests")


def _make_scope(cookie: str | None = None, **overrides: object) -> dict[str, Any]:
    """Build a minimal valid ASGI HTTP scope dict."""
    headers: list[tuple[bytes, bytes]] = [(b"accept", b"*/*")]
    if cookie is not None:
        headers.append((b"cookie", cookie.encode("latin-1")))
    base: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "method": "GET",
        "path": "/",
        "headers": headers,
    }
    base.update(overrides)
    return base


async def _receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


async def _run(app: Any, scope: dict[str, Any]) -> list[dict[str, Any]]:
    sent: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    await app(scope, _receive, send)
    return sent


def _handler(body: Any) -> Any:
    """ASGI app that runs *body* against the current jar, then responds 200."""

    async def app(scope: dict[str, Any], receive: Any, send: Any) -> None:
        body(get_cookies())
        await send({"type": "http.response.start", "status": 200, "headers": [(b"x-app", b"1")]})
        await send({"type": "http.response.body", "body": b"ok"})

    return app


def _set_cookies(messages: list[dict[str, Any]]) -> list[Cookie]:
    start = messages[0]
    assert start["type"] == "http.response.start"
    cookies = [
        parse_set_cookie(value.decode("utf-8"))
        for name, value in start["headers"]
        if name == b"set-cookie"
    ]
    return [c for c in cookies if c is not None]


class TestGetCookies:
    def test_raises_outside_request(self) -> None:
        with pytest.raises(LookupError, match="No active cookie jar"):
            get_cookies()


class TestCookieMiddleware:
    @pytest.mark.anyio
    async def test_loads_request_cookies(self) -> None:
        seen: dict[str, str | None] = {}

        def body(jar: Any) -> None:
            cookie = jar.get("session")
            seen["session"] = cookie.value if cookie else None

        await _run(CookieMiddleware(_handler(body), KEY), _make_scope("session=abc; theme=dark"))
        assert seen == {"session": "abc"}

    @pytest.mark.anyio
    async def test_no_changes_no_set_cookie(self) -> None:
        messages = await _run(CookieMiddleware(_handler(lambda jar: None), KEY), _make_scope("a=1"))

        assert _set_cookies(messages) == []
        assert messages[0]["headers"] == [(b"x-app", b"1")]

    @pytest.mark.anyio
    async def test_emits_one_header_per_change(self) -> None:
        def body(jar: Any) -> None:
            jar.add(Cookie("theme", "dark"))
            jar.add(Cookie("theme", "light"))
            jar.remove(Cookie.named("session"))

        messages = await _run(CookieMiddleware(_handler(body), KEY), _make_scope("session=abc"))
        cookies = {c.name: c for c in _set_cookies(messages)}

        assert set(cookies) == {"theme", "session"}
        assert cookies["theme"].value == "light"
        assert cookies["session"].max_age == 0
        assert (b"x-app", b"1") in messages[0]["headers"]

    @pytest.mark.anyio
    async def test_private_cookie_round_trip(self) -> None:
        def write(jar: Any) -> None:
            jar.add_private(Cookie("user_id", "42"))

        messages = await _run(CookieMiddleware(_handler(write), KEY), _make_scope())
        (sealed,) = _set_cookies(messages)
        assert sealed.value != "42"
        assert sealed.http_only is True

        seen: list[str | None] = []

        def read(jar: Any) -> None:
            cookie = jar.get_private("user_id")
            seen.append(cookie.value if cookie else None)

        await _run(CookieMiddleware(_handler(read), KEY), _make_scope(f"user_id={sealed.value}"))
        assert seen == ["42"]

    @pytest.mark.anyio
    async def test_jar_is_per_request(self) -> None:
        jars: list[Any] = []
        app = CookieMiddleware(_handler(jars.append), KEY)

        await _run(app, _make_scope())
        await _run(app, _make_scope())

        assert jars[0] is not jars[1]
        with pytest.raises(LookupError):
            get_cookies()

    @pytest.mark.anyio
    async def test_non_http_scope_passes_through(self) -> None:
        called: list[str] = []

        async def app(scope: dict[str, Any], receive: Any, send: Any) -> None:
            called.append(scope["type"])
            with pytest.raises(LookupError):
                get_cookies()

        await _run(CookieMiddleware(app, KEY), {"type": "lifespan"})
        assert called == ["lifespan"]

    @pytest.mark.anyio
    async def test_from_config(self) -> None:
        seen: list[str | None] = []

        def body(jar: Any) -> None:
            cookie = jar.get_private("user_id")
            seen.append(cookie.value if cookie else None)

        app = CookieMiddleware.from_config(
            _handler(body), CookieConfig(private_cookies=False)
        )
        await _run(app, _make_scope("user_id=42"))
        assert seen == ["42"]

    @pytest.mark.anyio
    async def test_non_ascii_value_round_trip(self) -> None:
        def write(jar: Any) -> None:
            jar.add(Cookie("greeting", "héllo ☃"))

        messages = await _run(CookieMiddleware(_handler(write), KEY), _make_scope())
        raw = next(value for name, value in messages[0]["headers"] if name == b"set-cookie")
        echoed = raw.split(b";", 1)[0]

        seen: list[str | None] = []

        def read(jar: Any) -> None:
            cookie = jar.get("greeting")
            seen.append(cookie.value if cookie else None)

        scope = _make_scope()
        scope["headers"].append((b"cookie", echoed))
        await _run(CookieMiddleware(_handler(read), KEY), scope)
        assert seen == ["héllo ☃"]
