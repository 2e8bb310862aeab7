"""Request body ingestion.

Drains the ASGI ``receive`` stream into a bounded buffer and turns it
into a ``ParsedBody``. The three outcomes a handler can observe are
explicit variants rather than a shared ``None``:

- ``EmptyBody``     -- the client sent zero bytes (typical for GET/DELETE)
- ``JSONBody``      -- UTF-8 JSON that parsed cleanly
- ``MalformedBody`` -- bytes that are not UTF-8 JSON

Oversized bodies, stalled clients, and disconnects are not variants:
they raise ``BodyTooLarge``, ``StreamTimeout`` and ``ConnectionAborted``
so the pipeline can answer (or not answer) before any handler runs.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import anyio

from wren._internal.asgi import Receive
from wren.errors import BodyTooLarge, ConnectionAborted, MalformedJSON, StreamTimeout

logger = logging.getLogger("wren.body")


@dataclass(frozen=True, slots=True)
class EmptyBody:
    """No body bytes were sent."""

    @property
    def value(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class JSONBody:
    """A successfully parsed JSON document.

    ``value`` may itself be ``None`` when the client sent the literal
    ``null`` -- that is still distinct from ``EmptyBody``.
    """

    value: Any


@dataclass(frozen=True, slots=True)
class MalformedBody:
    """Body bytes that failed UTF-8 decoding or JSON parsing."""

    reason: str

    @property
    def value(self) -> None:
        return None


# Every variant exposes ``.value``; empty and malformed bodies read as None
ParsedBody = EmptyBody | JSONBody | MalformedBody

EMPTY = EmptyBody()


def _reject_constant(name: str) -> Any:
    # json accepts NaN/Infinity by default; they are not JSON
    msg = f"{name} is not valid JSON"
    raise ValueError(msg)


def decode_json(raw: bytes) -> Any:
    """Decode *raw* as UTF-8 and parse it as a JSON document.

    Raises:
        MalformedJSON: On invalid UTF-8 (including a byte-order mark),
            any JSON syntax error, or nesting deeper than the
            interpreter's recursion limit.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedJSON(f"Body is not valid UTF-8: {exc.reason} at byte {exc.start}") from exc
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedJSON(f"Body is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise MalformedJSON("Body is nested too deeply") from exc


def parse_body(raw: bytes) -> ParsedBody:
    """Classify a complete body buffer."""
    if not raw:
        return EMPTY
    try:
        return JSONBody(decode_json(raw))
    except MalformedJSON as exc:
        return MalformedBody(exc.reason)


async def read_body(receive: Receive, *, max_bytes: int) -> bytes:
    """Drain ``http.request`` messages into a buffer of at most *max_bytes*.

    Stops reading as soon as the limit is crossed. A ``http.disconnect``
    before ``more_body`` goes false drops the partial buffer.
    """
    buffer = bytearray()
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            logger.debug("Client disconnected after %d body bytes", len(buffer))
            raise ConnectionAborted("Client disconnected before the body was complete")

        chunk = message.get("body", b"")
        if chunk:
            buffer += chunk
            if len(buffer) > max_bytes:
                logger.info("Request body exceeded %d bytes; aborting read", max_bytes)
                raise BodyTooLarge(max_bytes)
        if not message.get("more_body", False):
            return bytes(buffer)


async def ingest_body(
    receive: Receive,
    *,
    max_bytes: int,
    read_timeout: float | None,
    content_length: int | None = None,
) -> ParsedBody:
    """Read the whole request body and parse it.

    Args:
        receive: ASGI receive callable for the current request.
        max_bytes: Hard upper bound on accumulated body bytes.
        read_timeout: Seconds allowed for the whole body to arrive,
            or ``None`` for no deadline.
        content_length: Declared ``Content-Length``, if any. A declared
            size over the limit fails before anything is read.

    Returns:
        ``EmptyBody``, ``JSONBody`` or ``MalformedBody``.

    Raises:
        BodyTooLarge: The body is (or is declared to be) over *max_bytes*.
        StreamTimeout: The body did not finish within *read_timeout*.
        ConnectionAborted: The client went away mid-body.
    """
    if content_length is not None and content_length > max_bytes:
        logger.info("Declared Content-Length %d exceeds %d bytes", content_length, max_bytes)
        raise BodyTooLarge(max_bytes)

    try:
        with anyio.fail_after(read_timeout):
            raw = await read_body(receive, max_bytes=max_bytes)
    except TimeoutError:
        logger.info("Request body not received within %ss", read_timeout)
        raise StreamTimeout(read_timeout or 0) from None

    return parse_body(raw)
