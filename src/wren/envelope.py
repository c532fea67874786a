"""Standard response envelope.

Every response body has the same shape::

    {"StatusCode": 200, "Data": {...}}           # success
    {"StatusCode": 404, "Error": "not found"}    # failure

The outcome is a tagged union, ``Success`` or ``Failure``, so an
envelope can never carry both ``Data`` and ``Error``.  ``StatusCode``
always equals the status line actually sent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from wren.classify import classify
from wren.codec import DecodeError, decode, dumps, loads
from wren.errors import EnvelopeEncodingError
from wren.http.response import JSON_CONTENT_TYPE, Response

logger = logging.getLogger("wren.envelope")

STATUS_KEY = "StatusCode"
DATA_KEY = "Data"
ERROR_KEY = "Error"


@dataclass(frozen=True, slots=True)
class Success:
    data: Any


@dataclass(frozen=True, slots=True)
class Failure:
    error: Any


type Outcome = Success | Failure


@dataclass(frozen=True, slots=True)
class StandardResponse:
    """The wire envelope around every response body."""

    status_code: int
    outcome: Outcome

    @classmethod
    def success(cls, data: Any, status_code: int = HTTPStatus.OK) -> StandardResponse:
        return cls(status_code=int(status_code), outcome=Success(data))

    @classmethod
    def failure(cls, error: Any, status_code: int) -> StandardResponse:
        return cls(status_code=int(status_code), outcome=Failure(error))

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)

    @property
    def data(self) -> Any:
        return self.outcome.data if isinstance(self.outcome, Success) else None

    @property
    def error(self) -> Any:
        return self.outcome.error if isinstance(self.outcome, Failure) else None

    def to_wire(self) -> dict[str, Any]:
        """The JSON object for this envelope; ``None`` payloads are omitted."""
        wire: dict[str, Any] = {STATUS_KEY: self.status_code}
        match self.outcome:
            case Success(data=data) if data is not None:
                wire[DATA_KEY] = data
            case Failure(error=error) if error is not None:
                wire[ERROR_KEY] = error
        return wire

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any], data_type: Any = Any) -> StandardResponse:
        """Rebuild an envelope from its JSON object.

        With *data_type*, ``Data`` is decoded into that type.
        """
        if not isinstance(payload, Mapping) or STATUS_KEY not in payload:
            raise DecodeError("", f"not a response envelope (missing {STATUS_KEY!r})")
        if DATA_KEY in payload and ERROR_KEY in payload:
            raise DecodeError("", f"envelope carries both {DATA_KEY!r} and {ERROR_KEY!r}")

        status = decode(int, payload[STATUS_KEY], STATUS_KEY)
        if ERROR_KEY in payload:
            return cls.failure(payload[ERROR_KEY], status)
        data = payload.get(DATA_KEY)
        if data is not None:
            data = decode(data_type, data, DATA_KEY)
        return cls.success(data, status)


def encode_envelope(envelope: StandardResponse) -> bytes:
    """Serialize an envelope to JSON bytes."""
    return dumps(envelope.to_wire())


def decode_envelope(raw: str | bytes, data_type: Any = Any) -> StandardResponse:
    """Parse an envelope from JSON text."""
    return StandardResponse.from_wire(loads(raw), data_type)


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def write_success(value: Any) -> Response:
    """Build a 200 response whose envelope carries *value* as ``Data``.

    A value that cannot be encoded becomes a 500 error envelope.
    """
    envelope = StandardResponse.success(value)
    try:
        body = encode_envelope(envelope)
    except (TypeError, ValueError) as exc:
        logger.exception("Could not encode response data of type %s", type(value).__name__)
        return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, exc)
    return Response(body=body, status=envelope.status_code, content_type=JSON_CONTENT_TYPE)


def write_error(status: int, exc: BaseException) -> Response:
    """Build an error response for *exc*.

    *status* is a caller override; pass ``0`` to let the classifier
    derive it.  Raises ``EnvelopeEncodingError`` if even the error
    envelope cannot be encoded.
    """
    classified = classify(status, exc)
    if classified.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("Writing %d error response", classified.status_code, exc_info=exc)
    else:
        logger.debug("Writing %d error response: %s", classified.status_code, exc)

    envelope = StandardResponse.failure(classified.external_message, classified.status_code)
    try:
        body = encode_envelope(envelope)
    except (TypeError, ValueError) as encode_exc:
        logger.critical("Failed to encode error envelope for %r", exc)
        raise EnvelopeEncodingError("failed to encode the error envelope") from encode_exc

    return Response(
        body=body,
        status=envelope.status_code,
        content_type=JSON_CONTENT_TYPE,
        headers=classified.headers,
    )
