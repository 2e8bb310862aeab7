"""Async test client for wren applications.

Uses the same Response type as production and sends requests through
the ASGI interface directly — no sockets involved.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Iterable
from typing import Any

from wren._internal.invoke import invoke
from wren.app import App
from wren.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for wren applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/products")
            assert response.status == 200

    Bodies can be sent in pieces to exercise incremental ingestion::

        await client.post("/products", chunks=[b'{"na', b'me":"x"}'])
    """

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> TestClient:
        self.app._ensure_frozen()
        for hook in self.app._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.app._shutdown_hooks:
            await invoke(hook)

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
        chunks: Iterable[bytes] | None = None,
    ) -> Response:
        """Send a POST request.

        Pass raw *body* bytes, a *json* value (serialized for you), or
        *chunks* to deliver the body across several ASGI messages.
        """
        extra_headers: dict[str, str] = {}
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"
        merged = {**extra_headers, **(headers or {})}
        return await self.request("POST", path, headers=merged, body=body, chunks=chunks)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        chunks: Iterable[bytes] | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        Raises:
            AssertionError: If the app finished without sending a response.
        """
        if body is not None and chunks is not None:
            msg = "Cannot specify both 'body' and 'chunks'."
            raise TypeError(msg)

        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part, query_string = path, ""

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        parts = list(chunks) if chunks is not None else [body or b""]
        messages = [
            {"type": "http.request", "body": part, "more_body": i < len(parts) - 1}
            for i, part in enumerate(parts)
        ]
        pending = iter(messages)

        async def receive() -> dict[str, Any]:
            # After the body is consumed the client stays until disconnect
            return next(pending, {"type": "http.disconnect"})

        status: int | None = None
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        if status is None:
            msg = f"{method.upper()} {path} finished without sending a response."
            raise AssertionError(msg)

        content_type: str | None = None
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name_str = name_b.decode("latin-1")
            value_str = value_b.decode("latin-1")
            if name_str == "content-type":
                content_type = value_str
            elif name_str != "content-length":
                extra_headers.append((name_str, value_str))

        return Response(
            body=b"".join(body_parts),
            status=status,
            content_type=content_type,
            headers=tuple(extra_headers),
        )
