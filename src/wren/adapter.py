"""Handler adapter: typed business functions to transport handlers.

A business function takes the request and a typed input value and
returns a typed output value::

    @dataclass(frozen=True, slots=True)
    class PingReq:
        Msg: str = ""

    @dataclass(frozen=True, slots=True)
    class PingResp:
        Msg: str

    async def ping(request: Request, req: PingReq) -> PingResp:
        return PingResp(Msg=f"You said: {req.Msg}")

    handler = adapt("GET", ping)

The adapter picks how the typed input is read from the HTTP method:

- **GET**: JSON in the single ``req`` query parameter.
- **POST / PUT / PATCH**: JSON request body.

Every decoded value is validated against the rules on its dataclass
fields.  Failures before the call, and whatever the function raises,
become error envelopes; a return value becomes a 200 success envelope.
Nothing raised at request time escapes the handler.
"""

import functools
import inspect
import logging
import typing
from collections.abc import Callable
from typing import Any

from wren._internal.invoke import invoke
from wren.codec import DecodeError, decode_json
from wren.envelope import write_error, write_success
from wren.errors import (
    AmbiguousQueryParamError,
    DeserializationError,
    EmptyBodyError,
    InvalidPayloadError,
    MissingQueryParamError,
    UnsupportedMethodError,
    ValidationError,
)
from wren.http.request import Request
from wren.http.response import Response
from wren.routing.route import Handler
from wren.validation import validate_dataclass

logger = logging.getLogger("wren.adapter")

REQ_PARAM = "req"

READ_METHODS = frozenset({"GET"})
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})

type BusinessFunc = Callable[[Request, Any], Any]


def adapt(
    method: str,
    fn: BusinessFunc,
    *,
    request_type: Any = None,
    response_type: Any = None,
) -> Handler:
    """Wrap *fn* into a transport handler for *method*.

    *request_type* defaults to the annotation of *fn*'s second
    parameter, and to ``Any`` (the raw JSON value) when there is none.
    *response_type* is informational; it defaults to the return
    annotation.

    Raises ``UnsupportedMethodError`` right away for methods other than
    GET, POST, PUT, and PATCH.
    """
    verb = method.upper()
    if verb in READ_METHODS:
        extract = _from_query
    elif verb in WRITE_METHODS:
        extract = _from_body
    else:
        raise UnsupportedMethodError(method)

    hints = _hints(fn)
    req_type = request_type if request_type is not None else hints.get("request", Any)
    resp_type = response_type if response_type is not None else hints.get("return", Any)
    name = getattr(fn, "__qualname__", type(fn).__name__)

    async def handler(request: Request) -> Response:
        logger.debug("Starting %s for %s %s", name, request.method, request.path)
        try:
            typed = await extract(request, req_type)
            result = await invoke(fn, request, typed)
        except Exception as exc:
            return write_error(0, exc)
        return write_success(result)

    functools.update_wrapper(handler, fn, updated=())
    handler.method = verb  # type: ignore[attr-defined]
    handler.request_type = req_type  # type: ignore[attr-defined]
    handler.response_type = resp_type  # type: ignore[attr-defined]
    return handler


async def unmarshal_json_from_request(request: Request, target: Any) -> Any:
    """Read the request body, decode it into *target*, and validate it.

    Raises ``EmptyBodyError``, ``InvalidPayloadError``, or
    ``ValidationError``.  Useful in hand-written handlers that still
    want the adapter's body rules.
    """
    return await _from_body(request, target)


# ---------------------------------------------------------------------------
# Input extraction
# ---------------------------------------------------------------------------


async def _from_query(request: Request, target: Any) -> Any:
    values = request.query.get_list(REQ_PARAM)
    if not values:
        raise MissingQueryParamError(REQ_PARAM)
    if len(values) > 1:
        raise AmbiguousQueryParamError(REQ_PARAM)

    try:
        value = decode_json(target, values[0])
    except DecodeError as exc:
        raise DeserializationError(str(exc)) from exc

    _check(value)
    return value


async def _from_body(request: Request, target: Any) -> Any:
    raw = await request.body()
    if not raw:
        raise EmptyBodyError()

    try:
        value = decode_json(target, raw)
    except DecodeError as exc:
        logger.debug("Rejected request body for %s %s: %s", request.method, request.path, exc)
        raise InvalidPayloadError(str(exc)) from exc

    _check(value)
    return value


def _check(value: Any) -> None:
    result = validate_dataclass(value)
    if not result:
        raise ValidationError(result.errors)


# ---------------------------------------------------------------------------
# Signature inspection
# ---------------------------------------------------------------------------


def _hints(fn: Any) -> dict[str, Any]:
    """Request and return annotations of *fn*, keyed ``request``/``return``.

    The request annotation is the one on the second positional parameter.
    """
    target = fn
    while isinstance(target, functools.partial):
        target = target.func
    if not inspect.isfunction(target) and not inspect.ismethod(target):
        target = getattr(target, "__call__", target)

    try:
        sig = inspect.signature(target)
        annotations = typing.get_type_hints(target)
    except (NameError, TypeError, ValueError):
        return {}

    params = [
        p
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if isinstance(fn, functools.partial):
        params = params[len(fn.args) :]

    hints: dict[str, Any] = {}
    if len(params) >= 2 and params[1].name in annotations:
        hints["request"] = annotations[params[1].name]
    if "return" in annotations:
        hints["return"] = annotations["return"]
    return hints
