"""Read-only query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Parsed query string. ``params[key]`` is the first value."""

    __slots__ = ("_data", "raw")

    def __init__(self, query_string: bytes = b"") -> None:
        self.raw = query_string
        self._data = parse_qs(query_string.decode("latin-1"), keep_blank_values=True)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        """Return every value for *key*."""
        return list(self._data.get(key, []))
