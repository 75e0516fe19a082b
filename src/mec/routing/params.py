"""Path parameter converters for segments like ``{id:int}``."""

import re

# converter name -> (segment regex, python type)
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"-?\d+", int),
    "float": (r"-?\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def compile_converter(param_type: str) -> re.Pattern[str]:
    """Return the anchored regex for *param_type*.

    Raises ``KeyError`` for an unknown converter name.
    """
    pattern, _ = CONVERTERS[param_type]
    return re.compile(f"^{pattern}$")


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type."""
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
