"""Bearer token authentication middleware.

A ready-made ``MiddlewareSet.auth`` function.  It reads
``Authorization: Bearer <token>``, asks a caller-supplied callback who
the token belongs to, and stores the answer in a ContextVar for the
duration of the request.  Requests without a valid token are answered
with a 401 error envelope and never reach the handler.

Usage::

    from wren.middleware.auth import BearerAuth, get_principal

    async def verify(token: str) -> User | None:
        return await users.by_token(token)

    middleware = MiddlewareSet(auth=BearerAuth(verify))

    # In a business function:
    user = get_principal()
"""

from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import Any

from wren._internal.invoke import invoke
from wren.envelope import write_error
from wren.errors import Unauthorized
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next

type TokenVerifier = Callable[[str], Awaitable[Any | None]] | Callable[[str], Any | None]

_principal_var: ContextVar[Any] = ContextVar("wren_principal")


def get_principal() -> Any:
    """Return whatever the token verifier returned for this request.

    Raises ``LookupError`` outside a route guarded by ``BearerAuth``.
    """
    try:
        return _principal_var.get()
    except LookupError:
        msg = "No authenticated principal. Is the route registered with requires_auth=True?"
        raise LookupError(msg) from None


class BearerAuth:
    """Authenticate requests with a bearer token.

    Attributes:
        verify_token: Sync or async callback ``(token) -> principal | None``.
            ``None`` means the token is not valid.
        header: Header carrying the credentials.
        scheme: Expected scheme prefix.
    """

    __slots__ = ("header", "scheme", "verify_token")

    def __init__(
        self,
        verify_token: TokenVerifier,
        *,
        header: str = "Authorization",
        scheme: str = "Bearer",
    ) -> None:
        self.verify_token = verify_token
        self.header = header
        self.scheme = scheme

    def _extract_token(self, request: Request) -> str | None:
        value = request.headers.get(self.header)
        if value is None:
            return None
        prefix, _, token = value.partition(" ")
        if prefix.lower() != self.scheme.lower():
            return None
        return token.strip() or None

    async def __call__(self, request: Request, next: Next) -> Response:
        token = self._extract_token(request)
        if token is None:
            return write_error(0, Unauthorized("missing bearer token", scheme=self.scheme))

        principal = await invoke(self.verify_token, token)
        if principal is None:
            return write_error(0, Unauthorized("invalid bearer token", scheme=self.scheme))

        ctx_token = _principal_var.set(principal)
        try:
            return await next(request)
        finally:
            _principal_var.reset(ctx_token)
