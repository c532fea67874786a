"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    BearerAuth -- Bearer token authentication for ``MiddlewareSet.auth``
    CORSMiddleware -- Cross-Origin Resource Sharing (installed by ``Server``)
    json_content_type -- Force the JSON content type on responses
    request_logger -- Log method, path, status, and duration
"""

from wren.middleware.auth import BearerAuth, get_principal
from wren.middleware.builtin import json_content_type, request_logger
from wren.middleware.cors import PERMISSIVE_CORS, CORSConfig, CORSMiddleware
from wren.middleware.protocol import Middleware, Next, apply_middleware

__all__ = [
    "PERMISSIVE_CORS",
    "BearerAuth",
    "CORSConfig",
    "CORSMiddleware",
    "Middleware",
    "Next",
    "apply_middleware",
    "get_principal",
    "json_content_type",
    "request_logger",
]
