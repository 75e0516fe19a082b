"""Case-insensitive, read-only request headers.

Built once from the raw ASGI ``(name, value)`` byte pairs. Lookups are
case-insensitive; repeated headers keep every value.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only header mapping.

    ``headers["Content-Type"]`` returns the first value;
    ``headers.get_list("accept")`` returns all of them.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._values = values

    def __getitem__(self, key: str) -> str:
        return self._values[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        """Return every value sent for *key*."""
        return list(self._values.get(key.lower(), []))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The original ASGI byte pairs."""
        return self._raw
