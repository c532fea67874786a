"""Route descriptor and router record types."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

# Transport-level handler: takes a Request, returns a Response
type Handler = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class Route:
    """One exposed endpoint, as declared by the caller.

    Exposed at ``/v{version}/{path}``.  A single leading ``/`` on *path*
    is dropped, so ``"ping"`` and ``"/ping"`` are the same route.

    Usage::

        Route("GET", "ping", adapt("GET", ping), version=1)
        Route("POST", "orders", adapt("POST", create_order), version=1, requires_auth=True)
    """

    method: str
    path: str
    handler: Handler | None
    version: int = 0
    requires_auth: bool = False

    @property
    def normalized_path(self) -> str:
        return self.path.removeprefix("/")

    @property
    def pattern(self) -> str:
        """The fully-qualified path the route is served at."""
        return f"/v{self.version}/{self.normalized_path}"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A handler bound to a method and path inside the router.

    ``middleware`` is the resolved chain, outermost first.
    """

    path: str
    method: str
    handler: Handler
    middleware: tuple[Callable[..., Any], ...] = ()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    endpoint: Endpoint
    path_params: dict[str, str]
