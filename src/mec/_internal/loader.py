"""Load user modules from file paths.

Route, view, and model files are imported once at startup by path, not
by package name, so their directories need no ``__init__.py`` and file
names may contain dots (``users.get.py``, ``query.gql.py``).
"""

import importlib.util
import re
from pathlib import Path
from types import ModuleType

from mec.errors import ConfigurationError

_UNSAFE_CHARS = re.compile(r"\W")


def load_module(path: Path, namespace: str) -> ModuleType:
    """Execute the Python file at *path* and return the module object.

    The module is registered under a synthetic name built from
    *namespace* and the path, never in ``sys.modules``.
    """
    module_name = f"_mec_{namespace}_{_UNSAFE_CHARS.sub('_', str(path.with_suffix('')))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load module from {path}"
        raise ConfigurationError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
