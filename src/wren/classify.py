"""Error classification: map any exception to a status and a safe message.

Only ``HTTPError`` (and subclasses) are *classified*: their ``detail`` was
written for clients and is exposed as-is.  Every other exception is
treated as an internal failure.  Its text goes to the log, never to the
response, whenever the resolved status is 500.

Status precedence:

1. A non-zero ``status`` passed by the caller always wins.
2. Otherwise a classified error's own status is used.
3. Otherwise 500.
"""

from dataclasses import dataclass
from http import HTTPStatus

from wren.errors import HTTPError

GENERIC_ERROR_MESSAGE = (
    "There was an error processing the request. "
    "Please try again later or contact support."
)
"""External message for unclassified internal failures."""


@dataclass(frozen=True, slots=True)
class ClassifiedError:
    """Result of classifying an exception for the wire."""

    status_code: int
    external_message: str
    headers: tuple[tuple[str, str], ...] = ()


def classify(status: int, exc: BaseException) -> ClassifiedError:
    """Derive the response status and external message for *exc*.

    Pass ``status=0`` to let the error decide.
    """
    message = ""
    headers: tuple[tuple[str, str], ...] = ()

    if isinstance(exc, HTTPError):
        message = exc.detail or _phrase(exc.status)
        headers = exc.headers
        if status < 1:
            status = exc.status

    if status < 1:
        status = HTTPStatus.INTERNAL_SERVER_ERROR

    if not message and status == HTTPStatus.INTERNAL_SERVER_ERROR:
        message = GENERIC_ERROR_MESSAGE

    if not message:
        message = str(exc) or _phrase(status)

    return ClassifiedError(status_code=int(status), external_message=message, headers=headers)


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""
