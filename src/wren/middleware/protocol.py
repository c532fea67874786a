"""Middleware protocol, Next type alias, and chain composition.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from wren.http.request import Request
from wren.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RateLimiter:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...


def apply_middleware(handler: Next, middleware: Sequence[Middleware]) -> Next:
    """Wrap *handler* so *middleware* runs outermost-first around it."""
    wrapped = handler
    for mw in reversed(middleware):

        async def call(req: Request, _mw: Middleware = mw, _next: Next = wrapped) -> Response:
            return await _mw(req, _next)

        wrapped = call
    return wrapped
