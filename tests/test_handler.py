"""Tests for wren.server.handler — the per-request pipeline."""

from typing import Any

import anyio
import pytest

from wren.app import App
from wren.config import AppConfig, BodyPolicy
from wren.errors import HTTPError
from wren.http.body import EmptyBody, JSONBody, MalformedBody
from wren.http.context import RequestContext, RequestState
from wren.http.response import Response
from wren.testing import TestClient


def _scope(method: str = "POST", path: str = "/echo", headers=()) -> dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": list(headers),
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


async def _call(app: App, scope: dict[str, Any], receive) -> list[dict[str, Any]]:
    sent: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    await app(scope, receive, send)
    return sent


def _echo_app(config: AppConfig | None = None, seen: list[RequestContext] | None = None) -> App:
    app = App(config)

    @app.route("/echo", methods=["POST"])
    def echo(ctx: RequestContext):
        if seen is not None:
            seen.append(ctx)
        return {"kind": type(ctx.body).__name__, "value": ctx.body.value}

    return app


class TestIngestionOutcomes:
    @pytest.mark.asyncio
    async def test_json_body_reaches_handler(self) -> None:
        async with TestClient(_echo_app()) as client:
            response = await client.post("/echo", json={"name": "sapato"})
        assert response.json == {"kind": "JSONBody", "value": {"name": "sapato"}}

    @pytest.mark.asyncio
    async def test_empty_body_reaches_handler(self) -> None:
        async with TestClient(_echo_app()) as client:
            response = await client.post("/echo")
        assert response.json == {"kind": "EmptyBody", "value": None}

    @pytest.mark.asyncio
    async def test_malformed_body_reaches_handler_when_lenient(self) -> None:
        async with TestClient(_echo_app()) as client:
            response = await client.post("/echo", body=b"{oops")
        assert response.status == 200
        assert response.json == {"kind": "MalformedBody", "value": None}

    @pytest.mark.asyncio
    async def test_chunked_body(self) -> None:
        async with TestClient(_echo_app()) as client:
            response = await client.post("/echo", chunks=[b"[1,", b"2,", b"3]"])
        assert response.json["value"] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_body_attached_before_handler(self) -> None:
        seen: list[RequestContext] = []
        async with TestClient(_echo_app(seen=seen)) as client:
            await client.post("/echo", json=[1])
        assert isinstance(seen[0].body, JSONBody)


class TestIngestionFailures:
    @pytest.mark.asyncio
    async def test_oversized_body_is_413_without_handler(self) -> None:
        seen: list[RequestContext] = []
        app = _echo_app(AppConfig(max_body_bytes=8), seen=seen)
        async with TestClient(app) as client:
            response = await client.post("/echo", body=b'{"name":"sapato"}')

        assert response.status == 413
        assert response.content_type == "application/json"
        assert "8 bytes" in response.json["error"]
        assert seen == []

    @pytest.mark.asyncio
    async def test_oversized_declared_length(self) -> None:
        app = _echo_app(AppConfig(max_body_bytes=8))
        async with TestClient(app) as client:
            response = await client.post(
                "/echo", body=b"{}", headers={"content-length": "1000"}
            )
        assert response.status == 413

    @pytest.mark.asyncio
    async def test_oversized_body_on_unknown_route_is_still_413(self) -> None:
        app = _echo_app(AppConfig(max_body_bytes=2))
        async with TestClient(app) as client:
            response = await client.post("/nowhere", body=b"[1, 2, 3]")
        assert response.status == 413

    @pytest.mark.asyncio
    async def test_stalled_body_is_408(self) -> None:
        seen: list[RequestContext] = []
        app = _echo_app(AppConfig(read_timeout_ms=50), seen=seen)
        first = True

        async def receive():
            nonlocal first
            if first:
                first = False
                return {"type": "http.request", "body": b"[", "more_body": True}
            await anyio.sleep(10)
            return {"type": "http.request", "body": b"]", "more_body": False}

        sent = await _call(app, _scope(), receive)

        assert sent[0]["status"] == 408
        assert seen == []

    @pytest.mark.asyncio
    async def test_disconnect_sends_nothing(self) -> None:
        seen: list[RequestContext] = []
        app = _echo_app(seen=seen)
        messages = iter(
            [
                {"type": "http.request", "body": b'{"a":', "more_body": True},
                {"type": "http.disconnect"},
            ]
        )

        async def receive():
            return next(messages)

        sent = await _call(app, _scope(), receive)

        assert sent == []
        assert seen == []


class TestDispatch:
    @pytest.mark.asyncio
    async def test_lifecycle_reaches_response_sent(self) -> None:
        seen: list[RequestContext] = []
        async with TestClient(_echo_app(seen=seen)) as client:
            await client.post("/echo")
        assert seen[0].state is RequestState.RESPONSE_SENT

    @pytest.mark.asyncio
    async def test_async_handler(self) -> None:
        app = App()

        @app.route("/slow")
        async def slow(ctx):
            await anyio.sleep(0)
            return Response("done", status=202)

        async with TestClient(app) as client:
            response = await client.get("/slow")
        assert response.status == 202
        assert response.text == "done"

    @pytest.mark.asyncio
    async def test_handler_returning_none_is_500(self) -> None:
        app = App()

        @app.route("/broken")
        def broken(ctx):
            return None

        async with TestClient(app) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert response.json == {"error": "Internal Server Error"}

    @pytest.mark.asyncio
    async def test_handler_exception_is_500(self) -> None:
        app = App()

        @app.route("/boom")
        def boom(ctx):
            raise ValueError("kaboom")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500

    @pytest.mark.asyncio
    async def test_debug_500_includes_exception(self) -> None:
        app = App(AppConfig(debug=True))

        @app.route("/boom")
        def boom(ctx):
            raise ValueError("kaboom")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert "kaboom" in response.json["exception"]
        assert response.json["request"]["path"] == "/boom"

    @pytest.mark.asyncio
    async def test_handler_http_error(self) -> None:
        app = App()

        @app.route("/teapot")
        def teapot(ctx):
            raise HTTPError(status=418, detail="short and stout", headers=(("X-Tea", "1"),))

        async with TestClient(app) as client:
            response = await client.get("/teapot")
        assert response.status == 418
        assert response.json == {"error": "short and stout"}
        assert response.header("x-tea") == "1"

    @pytest.mark.asyncio
    async def test_non_http_scope_ignored(self) -> None:
        app = _echo_app()
        sent = await _call(app, {"type": "websocket", "path": "/"}, None)
        assert sent == []


class TestHooks:
    @pytest.mark.asyncio
    async def test_before_hook_short_circuits(self) -> None:
        seen: list[RequestContext] = []
        app = _echo_app(seen=seen)

        @app.before_dispatch
        def deny(ctx):
            return Response("nope", status=403)

        async with TestClient(app) as client:
            response = await client.post("/echo")
        assert response.status == 403
        assert seen == []

    @pytest.mark.asyncio
    async def test_before_hook_sees_body(self) -> None:
        bodies: list[object] = []
        app = _echo_app()

        @app.before_dispatch
        async def record(ctx):
            bodies.append(ctx.body)

        async with TestClient(app) as client:
            await client.post("/echo", json={"a": 1})
        assert bodies == [JSONBody({"a": 1})]

    @pytest.mark.asyncio
    async def test_after_hook_runs_on_errors(self) -> None:
        app = _echo_app(AppConfig(max_body_bytes=1))

        @app.after_dispatch
        def tag(ctx, response):
            return response.with_header("X-Seen", ctx.path)

        async with TestClient(app) as client:
            response = await client.post("/echo", body=b"[1]")
        assert response.status == 413
        assert response.header("x-seen") == "/echo"

    @pytest.mark.asyncio
    async def test_failing_after_hook_is_500(self) -> None:
        app = _echo_app()

        @app.after_dispatch
        def explode(ctx, response):
            raise RuntimeError("after")

        async with TestClient(app) as client:
            response = await client.post("/echo")
        assert response.status == 500

    @pytest.mark.asyncio
    async def test_strict_policy_rejects_malformed(self) -> None:
        seen: list[RequestContext] = []
        app = _echo_app(AppConfig(body_policy=BodyPolicy.STRICT), seen=seen)
        async with TestClient(app) as client:
            bad = await client.post("/echo", body=b"{oops")
            empty = await client.post("/echo")

        assert bad.status == 400
        assert bad.json["error"] == "Malformed JSON body"
        assert empty.status == 200
        assert len(seen) == 1
        assert isinstance(seen[0].body, EmptyBody)

    @pytest.mark.asyncio
    async def test_lenient_policy_lets_handler_decide(self) -> None:
        app = App()

        @app.route("/strict-handler", methods=["POST"])
        def requires_body(ctx):
            if isinstance(ctx.body, MalformedBody | EmptyBody):
                return {"error": "A JSON body is required"}, 400
            return ctx.body.value

        async with TestClient(app) as client:
            response = await client.post("/strict-handler", body=b"nope")
        assert response.status == 400
        assert response.json == {"error": "A JSON body is required"}


class TestErrorHandlers:
    @pytest.mark.asyncio
    async def test_status_code_handler(self) -> None:
        app = _echo_app(AppConfig(max_body_bytes=1))

        @app.error(413)
        def too_large(ctx, exc):
            return f"limit hit on {ctx.path}"

        async with TestClient(app) as client:
            response = await client.post("/echo", body=b"[1]")
        assert response.status == 413
        assert response.text == "limit hit on /echo"

    @pytest.mark.asyncio
    async def test_exception_type_handler(self) -> None:
        app = App()

        class Boom(Exception):
            pass

        @app.route("/boom")
        def boom(ctx):
            raise Boom

        @app.error(Boom)
        def handle_boom():
            return Response("handled", status=503)

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 503
        assert response.text == "handled"

    @pytest.mark.asyncio
    async def test_failing_status_handler_falls_back_to_500(self) -> None:
        app = _echo_app(AppConfig(max_body_bytes=1))

        @app.error(413)
        def too_large(ctx, exc):
            raise RuntimeError("handler bug")

        async with TestClient(app) as client:
            response = await client.post("/echo", body=b"[1]")
        assert response.status == 500
        assert response.json == {"error": "Internal Server Error"}

    @pytest.mark.asyncio
    async def test_failing_500_handler_falls_back_to_default(self) -> None:
        app = App()

        @app.route("/boom")
        def boom(ctx):
            raise ValueError("kaboom")

        @app.error(500)
        async def broken_handler(ctx, exc):
            raise RuntimeError("handler bug")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.json == {"error": "Internal Server Error"}


class TestEncoding:
    @pytest.mark.asyncio
    async def test_unencodable_body_is_500(self) -> None:
        app = App()

        @app.route("/raw")
        def raw(ctx):
            return Response("\ud800")

        async with TestClient(app) as client:
            response = await client.get("/raw")
        assert response.status == 500
        assert response.json == {"error": "Internal Server Error"}

    @pytest.mark.asyncio
    async def test_lone_surrogate_in_json_value(self) -> None:
        async with TestClient(_echo_app()) as client:
            response = await client.post("/echo", body=b'"\\udc00"')
        assert response.status == 200
        assert response.json == {"kind": "JSONBody", "value": "\udc00"}
