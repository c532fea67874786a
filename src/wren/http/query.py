"""Immutable query string parameters.

Keys may repeat (``?req=a&req=b``).  The typed GET adapter relies on
``get_list`` to tell a missing parameter from an ambiguous one, so the
parsed form keeps every value.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs, urlencode


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _data: dict[str, list[str]]
    _raw: bytes

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        object.__setattr__(self, "_raw", query_string)
        # Raw non-ASCII bytes are read as UTF-8, like percent-escapes
        parsed = parse_qs(query_string.decode("utf-8", "replace"), keep_blank_values=True)
        object.__setattr__(self, "_data", parsed)

    @classmethod
    def from_pairs(cls, pairs: Mapping[str, str] | list[tuple[str, str]]) -> "QueryParams":
        """Build params from decoded pairs, percent-encoding as needed."""
        items = list(pairs.items()) if isinstance(pairs, Mapping) else list(pairs)
        return cls(urlencode(items).encode("latin-1"))

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self.get_list(k)!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    @property
    def raw(self) -> bytes:
        return self._raw
