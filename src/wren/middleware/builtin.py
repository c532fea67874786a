"""Built-in middleware: request logging and JSON content type.

Both are plain functions, ready to drop into ``MiddlewareSet.pre`` or
``MiddlewareSet.post``.
"""

import logging
import time

from wren.http.request import Request
from wren.http.response import JSON_CONTENT_TYPE, Response
from wren.middleware.protocol import Next

logger = logging.getLogger("wren.middleware")


async def request_logger(request: Request, next: Next) -> Response:
    """Log every request with its status and duration."""
    logger.debug("HTTP request received: %s %s", request.method, request.path)
    start = time.perf_counter()
    response = await next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.path,
        response.status,
        elapsed_ms,
    )
    return response


async def json_content_type(request: Request, next: Next) -> Response:
    """Force ``Content-Type: application/json; charset=UTF-8`` on the response."""
    response = await next(request)
    return response.with_content_type(JSON_CONTENT_TYPE)
