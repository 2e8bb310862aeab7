"""Serve a wren App with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``),
but wren has a live ``App`` object. We use ``pounce.Server`` directly
with the ASGI callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    log_level: str = "info",
    app_path: str | None = None,
) -> None:
    """Start a pounce server for *app*.

    Args:
        app: ASGI callable (wren App instance).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count (0 = auto-detect from CPU count).
        reload: Restart on source changes (development only; forces a
            single worker).
        log_level: Log level for pounce's logging setup.
        app_path: Optional ``"module:attribute"`` import string. When
            provided with *reload*, pounce reimports the app on each
            reload cycle so code changes take effect.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        log_level=log_level,
    )
    server = Server(config, app, app_path=app_path)
    server.run()
