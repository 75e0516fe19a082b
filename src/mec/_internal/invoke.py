"""Call sync or async user callables uniformly.

Route handlers, view ``render`` functions, model ``define`` functions,
and lifecycle hooks can all be ``def`` or ``async def``.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
