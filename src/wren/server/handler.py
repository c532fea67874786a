"""ASGI handler: translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly.  Converts the scope
to a typed Request, dispatches through middleware and routing, and
sends the Response back through ASGI send().
"""

import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren.codec import dumps
from wren.context import g, request_var
from wren.envelope import ERROR_KEY, STATUS_KEY, write_error
from wren.errors import EnvelopeEncodingError, HTTPError
from wren.http.request import Request
from wren.http.response import JSON_CONTENT_TYPE, Response
from wren.middleware.protocol import apply_middleware
from wren.routing.router import Router
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")

# Sent when not even the error envelope can be encoded
FALLBACK_BODY = dumps({STATUS_KEY: 500, ERROR_KEY: "internal server error"})


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...] = (),
) -> None:
    """Process a single HTTP request through the full pipeline.

    *middleware* wraps the router as a whole (CORS), so it also sees
    requests that match no route.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)

    try:

        async def dispatch(req: Request) -> Response:
            try:
                match = router.match(req.method, req.path)
            except HTTPError as exc:
                return write_error(0, exc)
            endpoint = match.endpoint
            handler = apply_middleware(endpoint.handler, endpoint.middleware)
            return await handler(req.with_path_params(match.path_params))

        response = await apply_middleware(dispatch, middleware)(request)

    except EnvelopeEncodingError:
        logger.exception("Sending fallback error body for %s %s", request.method, request.path)
        response = Response(body=FALLBACK_BODY, status=500, content_type=JSON_CONTENT_TYPE)
    except Exception as exc:
        logger.exception("Unhandled error for %s %s", request.method, request.path)
        response = _internal_error(exc)
    finally:
        g._reset()
        request_var.reset(token)

    await send_response(response, send)


def _internal_error(exc: Exception) -> Response:
    try:
        return write_error(500, exc)
    except EnvelopeEncodingError:
        return Response(body=FALLBACK_BODY, status=500, content_type=JSON_CONTENT_TYPE)
