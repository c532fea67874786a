"""Typed access to single query and path parameters.

For handlers that read a plain parameter instead of a typed ``req``
value.  Every failure raises ``BadRequest``, so an adapted handler turns
it into a 400 envelope.
"""

from wren.errors import BadRequest
from wren.http.request import Request


def query_param_int(request: Request, name: str, default: int) -> int:
    """Return query parameter *name* as an int, or *default* when absent.

    A repeated or non-numeric parameter is a client error.
    """
    values = request.query.get_list(name)
    if not values:
        return default
    if len(values) > 1:
        raise BadRequest(f"multiple URL params with name '{name}' found")
    try:
        return int(values[0])
    except ValueError:
        raise BadRequest(f"URL param '{name}' must be an integer") from None


def path_param_str(request: Request, name: str) -> str:
    """Return path parameter *name*; missing or empty is a client error."""
    value = request.path_params.get(name, "")
    if not value:
        raise BadRequest(f"path param '{name}' is required")
    return value


def path_param_int(request: Request, name: str) -> int:
    """Return path parameter *name* as an int."""
    value = path_param_str(request, name)
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"path param '{name}' must be an integer") from None
