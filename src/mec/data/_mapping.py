"""Row-to-dataclass mapping.

Rows are dicts keyed by column name. Columns without a matching field are
dropped, so ``SELECT *`` works against a narrower dataclass. SQLite
returns loosely typed values; ``int``, ``float`` and ``bool`` fields are
coerced.
"""

import dataclasses
import types
from typing import Any, get_args, get_origin

_COERCE: dict[type, Any] = {
    int: int,
    float: float,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
}


def _field_types(cls: type) -> dict[str, type | None]:
    types_by_name: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = f.type
        if get_origin(annotation) is types.UnionType:
            # ``int | None`` -> int
            non_none = [a for a in get_args(annotation) if a is not type(None)]
            annotation = non_none[0] if len(non_none) == 1 else None
        types_by_name[f.name] = annotation if annotation in _COERCE else None
    return types_by_name


def map_rows[T](cls: type[T], rows: list[dict[str, Any]]) -> list[T]:
    """Build one *cls* instance per row.

    Raises ``TypeError`` if *cls* is not a dataclass or a required field
    has no column.
    """
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass"
        raise TypeError(msg)
    targets = _field_types(cls)
    return [
        cls(**{key: _coerce(value, targets[key]) for key, value in row.items() if key in targets})
        for row in rows
    ]


def _coerce(value: Any, target: type | None) -> Any:
    if target is None or value is None or isinstance(value, target):
        return value
    return _COERCE[target](value)
