"""Wren: typed JSON APIs from a declarative route table.

Describe the API as a list of routes, wrap typed business functions
with ``adapt``, and every response comes back in the same envelope.

Basic usage::

    from dataclasses import dataclass
    from wren import Request, Route, Server, adapt

    @dataclass(frozen=True, slots=True)
    class PingReq:
        Msg: str = ""

    def ping(request: Request, req: PingReq) -> dict[str, str]:
        return {"Msg": f"You said: {req.Msg}"}

    server = Server([Route("GET", "ping", adapt("GET", ping), version=1)])
    server.run()

``GET /v1/ping?req={"Msg":"hi"}`` answers
``{"StatusCode":200,"Data":{"Msg":"You said: hi"}}``.
"""

__version__ = "0.1.0"
__all__ = [
    "BadRequest",
    "ConfigurationError",
    "Forbidden",
    "HTTPError",
    "MiddlewareSet",
    "NotFound",
    "Request",
    "Response",
    "Route",
    "Server",
    "ServerConfig",
    "StandardResponse",
    "Unauthorized",
    "UnprocessableEntity",
    "WrenError",
    "adapt",
    "build",
    "g",
    "get_request",
    "unmarshal_json_from_request",
    "write_error",
    "write_success",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "Server":
        from wren.app import Server

        return Server

    if name == "ServerConfig":
        from wren.config import ServerConfig

        return ServerConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name == "Route":
        from wren.routing.route import Route

        return Route

    if name in ("MiddlewareSet", "build"):
        from wren import registry as _registry

        return getattr(_registry, name)

    if name in ("adapt", "unmarshal_json_from_request"):
        from wren import adapter as _adapter

        return getattr(_adapter, name)

    if name in ("StandardResponse", "write_error", "write_success"):
        from wren import envelope as _envelope

        return getattr(_envelope, name)

    if name in ("g", "get_request"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "BadRequest",
        "ConfigurationError",
        "Forbidden",
        "HTTPError",
        "NotFound",
        "Unauthorized",
        "UnprocessableEntity",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
