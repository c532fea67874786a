"""JSON codec for typed request and response values.

Encoding turns dataclasses (and containers of them) into plain JSON
values.  Decoding is the strict inverse: a parsed JSON value is checked
against a type annotation and turned back into instances.

Decoding rules:

- **dataclass**: JSON object.  Keys match field names exactly, then
  case-insensitively.  Unknown keys are ignored.  Missing fields use the
  field default; a missing field without a default is an error.
- **str / int / float / bool**: exact JSON type (``int`` is accepted for
  ``float``; ``bool`` is never accepted for ``int``).
- **list[T] / tuple[T, ...] / set[T] / dict[str, T]**: decoded recursively.
- **T | None**: ``null`` becomes ``None``; anything else decodes as ``T``.
- **Enum**: decoded by value.
- **Any / object**: the raw JSON value.

A field can be renamed on the wire with ``field(metadata={"json": "Name"})``.
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import json
import types
import typing
from collections.abc import Mapping
from typing import Any

_MISSING = object()


class DecodeError(ValueError):
    """A JSON value does not match the target type.

    ``path`` locates the offending value (``"items[2].name"``).
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f"{path}: " if path else ""
        super().__init__(f"{where}{reason}")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def field_key(f: dataclasses.Field[Any]) -> str:
    """Wire name for a dataclass field."""
    return f.metadata.get("json", f.name)


def to_jsonable(value: Any) -> Any:
    """Convert *value* into plain JSON-compatible Python values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field_key(f): to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, enum.Enum):
        return to_jsonable(value.value)
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return value


def dumps(value: Any) -> bytes:
    """Encode *value* as compact UTF-8 JSON.

    Raises ``TypeError`` for unserializable objects and ``ValueError``
    for NaN/Infinity, which JSON cannot represent.
    """
    return json.dumps(
        to_jsonable(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def loads(raw: str | bytes) -> Any:
    """Parse JSON text, raising ``DecodeError`` when it is malformed."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DecodeError("", f"malformed JSON ({exc.msg} at position {exc.pos})") from None
    except UnicodeDecodeError:
        raise DecodeError("", "body is not valid UTF-8") from None


def decode_json[T](target: type[T], raw: str | bytes) -> T:
    """Parse JSON text and decode it into *target*."""
    return decode(target, loads(raw))


def decode(target: Any, data: Any, path: str = "") -> Any:
    """Decode a parsed JSON value into an instance of *target*."""
    if target is Any or target is object:
        return data

    origin = typing.get_origin(target)

    if origin in (typing.Union, types.UnionType):
        return _decode_union(target, data, path)

    if origin is typing.Literal:
        if data not in typing.get_args(target):
            options = ", ".join(repr(a) for a in typing.get_args(target))
            raise DecodeError(path, f"expected one of {options}, got {data!r}")
        return data

    if origin in (list, tuple, set, frozenset):
        return _decode_sequence(target, origin, data, path)

    if origin is dict or target is dict:
        return _decode_mapping(target, data, path)

    if target in (list, tuple, set, frozenset):
        return _decode_sequence(target, target, data, path)

    if isinstance(target, type):
        if dataclasses.is_dataclass(target):
            return _decode_dataclass(target, data, path)
        if issubclass(target, enum.Enum):
            try:
                return target(data)
            except ValueError:
                raise DecodeError(path, f"{data!r} is not a valid {target.__name__}") from None
        return _decode_scalar(target, data, path)

    # Unknown annotation (TypeVar, NewType): accept the raw value
    return data


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return {
        bool: "boolean",
        int: "number",
        float: "number",
        str: "string",
        list: "array",
        dict: "object",
    }.get(type(value), type(value).__name__)


def _decode_scalar(target: type, data: Any, path: str) -> Any:
    if target is bool:
        if isinstance(data, bool):
            return data
    elif target is int:
        if isinstance(data, int) and not isinstance(data, bool):
            return data
    elif target is float:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return float(data)
    elif target is str:
        if isinstance(data, str):
            return data
    elif target in (datetime.datetime, datetime.date):
        if isinstance(data, str):
            try:
                return target.fromisoformat(data)
            except ValueError:
                raise DecodeError(path, f"{data!r} is not an ISO 8601 {target.__name__}") from None
    elif isinstance(data, target):
        return data
    raise DecodeError(path, f"expected {target.__name__}, got {_type_name(data)}")


def _decode_union(target: Any, data: Any, path: str) -> Any:
    args = typing.get_args(target)
    if data is None and type(None) in args:
        return None
    errors: list[str] = []
    for arg in args:
        if arg is type(None):
            continue
        try:
            return decode(arg, data, path)
        except DecodeError as exc:
            errors.append(exc.reason)
    raise DecodeError(path, " or ".join(errors) or f"unexpected {_type_name(data)}")


def _decode_sequence(target: Any, origin: type, data: Any, path: str) -> Any:
    if not isinstance(data, list):
        raise DecodeError(path, f"expected array, got {_type_name(data)}")
    args = typing.get_args(target)

    if origin is tuple and args and args[-1] is not Ellipsis:
        if len(args) != len(data):
            raise DecodeError(path, f"expected {len(args)} items, got {len(data)}")
        return tuple(
            decode(arg, item, f"{path}[{i}]") for i, (arg, item) in enumerate(zip(args, data))
        )

    item_type = args[0] if args else Any
    items = [decode(item_type, item, f"{path}[{i}]") for i, item in enumerate(data)]
    if origin is list:
        return items
    return origin(items)


def _decode_mapping(target: Any, data: Any, path: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(path, f"expected object, got {_type_name(data)}")
    args = typing.get_args(target)
    value_type = args[1] if len(args) == 2 else Any
    return {
        key: decode(value_type, value, f"{path}.{key}" if path else key)
        for key, value in data.items()
    }


def _decode_dataclass(target: type, data: Any, path: str) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(path, f"expected object, got {_type_name(data)}")

    try:
        hints = typing.get_type_hints(target)
    except NameError:
        hints = {}
    folded = {key.lower(): key for key in data}
    kwargs: dict[str, Any] = {}

    for f in dataclasses.fields(target):
        if not f.init:
            continue
        key = field_key(f)
        child = f"{path}.{key}" if path else key

        raw = data.get(key, _MISSING)
        if raw is _MISSING and key.lower() in folded:
            raw = data[folded[key.lower()]]

        if raw is _MISSING:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise DecodeError(child, "required field is missing")
            continue

        kwargs[f.name] = decode(hints.get(f.name, Any), raw, child)

    try:
        return target(**kwargs)
    except (TypeError, ValueError) as exc:
        raise DecodeError(path, str(exc)) from exc
