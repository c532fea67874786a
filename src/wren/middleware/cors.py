"""CORS middleware.

Installed outermost by the server, around the whole router, so a
preflight for ``/v1/x`` is answered even when ``x`` only registers GET.

A preflight (``OPTIONS`` from an allowed origin) is checked before it is
answered:

- no ``Access-Control-Request-Method``: 400
- requested method not in ``allow_methods``: 405
- a requested header outside ``allow_headers``: 403

Rejections are written as error envelopes.  Accepted preflights get an
empty 204.  Requests from origins that are not allowed pass through
untouched and carry no CORS headers.
"""

from dataclasses import dataclass

from wren.envelope import write_error
from wren.errors import BadRequest, Forbidden, MethodNotAllowed
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next

# Headers a browser may send without listing them in allow_headers
SAFELISTED_HEADERS = frozenset({"accept", "accept-language", "content-language", "origin"})


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """Cross-origin policy.

    Defaults allow nothing.  Header and method names compare
    case-insensitively.
    """

    allow_origins: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
    allow_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 600

    def allows_origin(self, origin: str) -> bool:
        return "*" in self.allow_origins or origin in self.allow_origins

    def allows_method(self, method: str) -> bool:
        return method.upper() in {m.upper() for m in self.allow_methods}

    def disallowed_headers(self, requested: str) -> list[str]:
        """Names from an ``Access-Control-Request-Headers`` value we refuse."""
        allowed = {h.lower() for h in self.allow_headers} | SAFELISTED_HEADERS
        names = (part.strip() for part in requested.split(","))
        return [name for name in names if name and name.lower() not in allowed]


PERMISSIVE_CORS = CORSConfig(
    allow_origins=("*",),
    allow_methods=("HEAD", "GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"),
    allow_headers=("Content-Type", "Authorization"),
    allow_credentials=True,
)
"""Any origin, with credentials. Suitable for development only."""


class CORSMiddleware:
    """Apply a :class:`CORSConfig` to every request."""

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    async def __call__(self, request: Request, next: Next) -> Response:
        origin = request.headers.get("origin")
        if origin is None or not self.config.allows_origin(origin):
            return await next(request)

        if request.method == "OPTIONS":
            return self._with_origin(self._preflight(request), origin)

        response = await next(request)
        if self.config.expose_headers:
            response = response.with_header(
                "Access-Control-Expose-Headers", ", ".join(self.config.expose_headers)
            )
        return self._with_origin(response, origin)

    def _preflight(self, request: Request) -> Response:
        cfg = self.config
        method = request.headers.get("access-control-request-method")
        if not method:
            return write_error(0, BadRequest("preflight is missing Access-Control-Request-Method"))
        if not cfg.allows_method(method):
            return write_error(0, MethodNotAllowed(frozenset(cfg.allow_methods)))

        refused = cfg.disallowed_headers(request.headers.get("access-control-request-headers", ""))
        if refused:
            return write_error(0, Forbidden(f"header not allowed: {', '.join(refused)}"))

        response = Response(body=b"", status=204).with_header(
            "Access-Control-Allow-Methods", ", ".join(cfg.allow_methods)
        )
        if cfg.allow_headers:
            response = response.with_header(
                "Access-Control-Allow-Headers", ", ".join(cfg.allow_headers)
            )
        return response.with_header("Access-Control-Max-Age", str(cfg.max_age))

    def _with_origin(self, response: Response, origin: str) -> Response:
        cfg = self.config
        if cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Credentials", "true")
        if "*" in cfg.allow_origins and not cfg.allow_credentials:
            return response.with_header("Access-Control-Allow-Origin", "*")
        # Browsers reject "*" together with credentials
        return response.with_header("Access-Control-Allow-Origin", origin).with_header(
            "Vary", "Origin"
        )
