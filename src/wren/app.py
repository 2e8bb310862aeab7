"""Wren application class.

Mutable during setup (route registration, hooks, error handlers).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren._internal.types import ErrorHandler, Handler
from wren.config import AppConfig, BodyPolicy
from wren.hooks.builtin import DefaultContentType, reject_malformed_body
from wren.hooks.protocol import AfterHook, BeforeHook
from wren.routing.route import RouteEntry
from wren.routing.table import RouteTable, not_found
from wren.server.handler import handle_request


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be frozen into the table."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The wren application.

    Mutable during setup (routes, hooks, error handlers). Frozen at
    runtime when ``app.run()`` or ``__call__()`` is first invoked::

        app = App(AppConfig(port=3333))

        @app.route("/products")
        def list_products(ctx):
            return "Lista de produtos!"

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread builds the route table, even when several workers
        receive their first request at once.
    """

    __slots__ = (
        "_after_hooks",
        "_after_hooks_list",
        "_before_hooks",
        "_before_hooks_list",
        "_error_handlers",
        "_fallback",
        "_freeze_lock",
        "_frozen",
        "_pending_routes",
        "_shutdown_hooks",
        "_startup_hooks",
        # Compiled state (populated by _freeze)
        "_table",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._before_hooks_list: list[BeforeHook] = []
        self._after_hooks_list: list[AfterHook] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._fallback: Handler = not_found
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._table: RouteTable | None = None
        self._before_hooks: tuple[Callable[..., Any], ...] = ()
        self._after_hooks: tuple[Callable[..., Any], ...] = ()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: Exact URL path (no parameters, no prefix matching).
            methods: HTTP methods. Defaults to ``["GET"]``. Each method
                becomes its own table entry, in the order given.
            name: Optional route name, shown by ``wren routes``.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    def not_found(self, func: Handler) -> Handler:
        """Replace the terminal handler for unmatched requests."""
        self._check_not_frozen()
        self._fallback = func
        return func

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Hooks --

    def before_dispatch(self, func: BeforeHook) -> BeforeHook:
        """Register a hook that runs after body ingestion, before routing.

        Returning a response value skips routing and the handler.
        """
        self._check_not_frozen()
        self._before_hooks_list.append(func)
        return func

    def after_dispatch(self, func: AfterHook) -> AfterHook:
        """Register a hook that may replace every outgoing response."""
        self._check_not_frozen()
        self._after_hooks_list.append(func)
        return func

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def table(self) -> RouteTable:
        """The frozen route table (freezes the app if needed)."""
        self._ensure_frozen()
        assert self._table is not None
        return self._table

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        reload: bool | None = None,
    ) -> None:
        """Freeze the app and serve it with pounce.

        Args:
            host: Override bind host.
            port: Override bind port.
            reload: Auto-reload on code changes. Defaults to ``config.debug``.
        """
        self._ensure_frozen()

        from wren.server.serve import run_server

        run_server(
            self,
            host or self.config.host,
            port if port is not None else self.config.port,
            workers=self.config.workers,
            reload=self.config.debug if reload is None else reload,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._table is not None

        await handle_request(
            scope,
            receive,
            send,
            table=self._table,
            before_hooks=self._before_hooks,
            after_hooks=self._after_hooks,
            error_handlers=self._error_handlers,
            max_body_bytes=self.config.max_body_bytes,
            read_timeout=self.config.read_timeout,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Route table, in declaration order
        entries: list[RouteEntry] = []
        for pending in self._pending_routes:
            for method in pending.methods or ["GET"]:
                entries.append(
                    RouteEntry(
                        method=method.upper(),
                        path=pending.path,
                        handler=pending.handler,
                        name=pending.name,
                    )
                )
        self._table = RouteTable(entries, fallback=self._fallback)

        # 2. Before hooks: the strict body policy runs ahead of user hooks
        before = list(self._before_hooks_list)
        if self.config.body_policy is BodyPolicy.STRICT:
            before.insert(0, reject_malformed_body)
        self._before_hooks = tuple(before)

        # 3. After hooks: the content-type policy runs last so it sees
        #    whatever user hooks produced
        after = list(self._after_hooks_list)
        if self.config.default_content_type is not None:
            after.append(DefaultContentType(self.config.default_content_type))
        self._after_hooks = tuple(after)

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, hooks, and error handlers before calling app.run()."
            )
            raise RuntimeError(msg)

