"""Route registry: validate a route table and compile it into a router.

``build()`` is the only entry point.  It checks the whole table before
registering anything, so a bad table never yields a half-built router::

    router = build(
        [
            Route("GET", "ping", adapt("GET", ping), version=1),
            Route("POST", "orders", adapt("POST", create_order), version=1, requires_auth=True),
        ],
        MiddlewareSet(pre=(request_logger,), auth=BearerAuth(verify)),
    )

Middleware runs in this order around each handler::

    pre... -> auth (authenticated routes only) -> post... -> handler
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from wren.errors import (
    DuplicateRouteError,
    HandlerMethodMismatchError,
    InvalidVersionError,
    MissingAuthMiddlewareError,
    MissingHandlerError,
    MissingMethodError,
    MissingPathError,
    NoRoutesError,
)
from wren.routing.route import Route
from wren.routing.router import Router, Scope

logger = logging.getLogger("wren.registry")


@dataclass(frozen=True, slots=True)
class MiddlewareSet:
    """Middleware applied by ``build()``.

    Attributes:
        pre: Outermost, runs on every request.
        auth: Gates routes with ``requires_auth``.  Required if any route
            sets it.
        post: Innermost, closest to the handler.
    """

    pre: tuple[Callable[..., Any], ...] = ()
    auth: Callable[..., Any] | None = None
    post: tuple[Callable[..., Any], ...] = ()


def route_pattern(route: Route) -> str:
    """The full path *route* is served at, ``/v{version}/{path}``."""
    return route.pattern


def build(routes: Sequence[Route], middleware: MiddlewareSet | None = None) -> Router:
    """Validate *routes* and return a compiled router.

    Raises a ``ConfigurationError`` subclass on the first problem found:
    ``NoRoutesError``, ``MissingMethodError``, ``MissingPathError``,
    ``MissingHandlerError``, ``InvalidVersionError``,
    ``HandlerMethodMismatchError``, ``DuplicateRouteError``, or
    ``MissingAuthMiddlewareError``.
    """
    mw = middleware or MiddlewareSet()
    _validate(routes, mw)

    router = Router()
    base = router.scope()
    for fn in mw.pre:
        base.use(fn)

    authenticated: Scope | None = None
    for route in routes:
        scope = base
        if route.requires_auth:
            if authenticated is None:
                authenticated = base.subscope()
                authenticated.use(mw.auth)
            scope = authenticated

        assert route.handler is not None
        scope.handle(route.method, route.pattern, route.handler)
        logger.info(
            "Registered route %s %s%s",
            route.method.upper(),
            route.pattern,
            " (auth)" if route.requires_auth else "",
        )

    for fn in mw.post:
        router.use(fn)

    router.compile()
    return router


def _validate(routes: Sequence[Route], mw: MiddlewareSet) -> None:
    if not routes:
        raise NoRoutesError()

    for route in routes:
        if not route.method:
            raise MissingMethodError(route.path)
        if not route.path:
            raise MissingPathError(route.method)
        if route.handler is None:
            raise MissingHandlerError(route.method, route.path)
        if isinstance(route.version, bool) or not isinstance(route.version, int) or route.version < 0:
            raise InvalidVersionError(route.method, route.path, route.version)
        adapted = getattr(route.handler, "method", None)
        if adapted is not None and adapted != route.method.upper():
            raise HandlerMethodMismatchError(route.method, route.path, adapted)

    seen: set[str] = set()
    for route in routes:
        key = f"{route.method.upper()} {route.pattern}"
        if key in seen:
            raise DuplicateRouteError(key)
        seen.add(key)

    if mw.auth is None:
        for route in routes:
            if route.requires_auth:
                raise MissingAuthMiddlewareError(route.method, route.pattern)
