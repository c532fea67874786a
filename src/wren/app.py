"""Server: the composed ASGI application.

Wires the route table, middleware, and cross-origin policy into one
ASGI callable.  The router is built eagerly, so a bad route table
fails at construction, before anything is served.
"""

import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren.config import ServerConfig
from wren.middleware.cors import CORSMiddleware
from wren.registry import MiddlewareSet, build
from wren.routing.route import Endpoint, Route
from wren.routing.router import Router
from wren.server.handler import handle_request

logger = logging.getLogger("wren.server")


class Server:
    """The wren ASGI application.

    Usage::

        server = Server(
            [Route("GET", "ping", adapt("GET", ping), version=1)],
            MiddlewareSet(pre=(request_logger,)),
        )
        server.run()  # or hand ``server`` to any ASGI server
    """

    __slots__ = (
        "_outer",
        "_router",
        "_routes",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        routes: Sequence[Route],
        middleware: MiddlewareSet | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self._routes: tuple[Route, ...] = tuple(routes)
        self._router: Router = build(self._routes, middleware)
        self._outer: tuple[Callable[..., Any], ...] = (
            (CORSMiddleware(self.config.cors),) if self.config.cors is not None else ()
        )
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

    # -- Introspection --

    @property
    def router(self) -> Router:
        return self._router

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def endpoints(self) -> list[Endpoint]:
        return self._router.endpoints

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.

        Usage::

            @server.on_startup
            async def setup():
                await db.connect()
        """
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve with pounce until interrupted.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        from dataclasses import replace

        from wren.server.serve import run_server

        config = replace(
            self.config,
            host=host or self.config.host,
            port=port or self.config.port,
        )
        logger.info("Serving %d routes on %s:%d", len(self._routes), config.host, config.port)
        run_server(self, config)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._outer,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return
