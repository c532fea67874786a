"""Wren exception hierarchy.

Shared across the registry, adapter, router, and middleware so every
module raises and catches the same types.

Two families matter:

- ``ConfigurationError``: the route table or adapter setup is wrong.
  Raised while building, before any request is served.
- ``HTTPError``: anything that maps to a status code and a message that
  is safe to show a client. Business functions raise these (or their
  subclasses) to pick the response status.
"""

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Roots
# ---------------------------------------------------------------------------


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when the route table or middleware setup is invalid.

    Raised synchronously from ``build()`` and ``adapt()``; never retried.
    """


class EnvelopeEncodingError(WrenError):
    """The error envelope itself could not be encoded.

    Escalated to the server loop, which logs it and sends a fixed
    minimal 500 body.
    """


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class NoRoutesError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("no routes provided")


class MissingMethodError(ConfigurationError):
    def __init__(self, path: str) -> None:
        super().__init__(f"no http method for route {path!r}")


class MissingPathError(ConfigurationError):
    def __init__(self, method: str) -> None:
        super().__init__(f"no path for {method} route")


class MissingHandlerError(ConfigurationError):
    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"no handler for route '{method} {path}'")


class InvalidVersionError(ConfigurationError):
    def __init__(self, method: str, path: str, version: object) -> None:
        super().__init__(
            f"route '{method} {path}' has version {version!r}; "
            "expected a non-negative integer"
        )


class HandlerMethodMismatchError(ConfigurationError):
    """A route's method differs from the method its handler was adapted for."""

    def __init__(self, method: str, path: str, adapted: str) -> None:
        super().__init__(
            f"route '{method} {path}' uses a handler adapted for {adapted}"
        )


class DuplicateRouteError(ConfigurationError):
    """Two routes share a method and a fully-qualified path."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"multiple routes registered for '{key}'")


class MissingAuthMiddlewareError(ConfigurationError):
    def __init__(self, method: str, path: str) -> None:
        super().__init__(
            f"route '{method} {path}' has requires_auth set "
            "but no auth middleware has been provided"
        )


class UnsupportedMethodError(ConfigurationError):
    """The adapter has no input-extraction strategy for this method."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(
            f"HTTP method {method!r} is not supported by adapt(); "
            "use GET, POST, PUT, or PATCH"
        )


# ---------------------------------------------------------------------------
# HTTP errors
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    ``detail`` is the external message: it is written to the error
    envelope verbatim, so keep internal detail out of it.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request could not be understood."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """401: missing or invalid credentials."""

    def __init__(self, detail: str = "Unauthorized", scheme: str = "Bearer") -> None:
        super().__init__(
            status=401,
            detail=detail,
            headers=(("WWW-Authenticate", scheme),),
        )


class Forbidden(HTTPError):  # noqa: N818
    """403: authenticated but not allowed."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class UnprocessableEntity(HTTPError):  # noqa: N818
    """422: well-formed input that breaks a validation rule."""

    def __init__(self, detail: str = "Unprocessable Entity") -> None:
        super().__init__(status=422, detail=detail)


# ---------------------------------------------------------------------------
# Request errors (raised while extracting typed input)
# ---------------------------------------------------------------------------


class MissingQueryParamError(BadRequest):
    def __init__(self, name: str = "req") -> None:
        super().__init__(f"URL param '{name}' is required")


class AmbiguousQueryParamError(BadRequest):
    def __init__(self, name: str = "req") -> None:
        super().__init__(f"multiple URL params with name '{name}' found")


class DeserializationError(BadRequest):
    """The ``req`` query parameter is not a valid encoding of the request type."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"could not decode URL param 'req': {reason}")


class EmptyBodyError(BadRequest):
    def __init__(self) -> None:
        super().__init__("request body is empty")


class InvalidPayloadError(BadRequest):
    """The request body is not a valid encoding of the request type."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"request body is not valid JSON for this endpoint: {reason}")


class ValidationError(UnprocessableEntity):
    """The decoded request broke one or more field rules.

    ``errors`` maps field paths to their messages.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        parts = [f"{name}: {'; '.join(messages)}" for name, messages in errors.items()]
        super().__init__("validation failed: " + ", ".join(parts))
        object.__setattr__(self, "_errors", dict(errors))

    @property
    def errors(self) -> dict[str, list[str]]:
        return dict(self._errors)
