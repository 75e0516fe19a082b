"""Model loading.

Each ``models/<name>.py`` exports ``define(ctx)``, sync or async. It
typically creates its table and returns a model object (a dataclass, a
small repository class, ...). The return value is stored as
``ctx.models[<name>]``.
"""

import logging
from pathlib import Path
from typing import Any

from mec._internal.invoke import invoke
from mec._internal.loader import load_module
from mec.errors import ConfigurationError

logger = logging.getLogger("mec.data")


async def load_models(models_dir: str | Path, ctx: Any) -> dict[str, Any]:
    """Run every model's ``define(ctx)`` in file-name order.

    A missing directory loads nothing. Raises ``ConfigurationError`` for a
    model module without a callable ``define``.
    """
    root = Path(models_dir)
    if not root.is_dir():
        logger.debug("No models directory at %s", root)
        return ctx.models

    for file in sorted(root.glob("*.py")):
        if file.name.startswith(("_", ".")):
            continue
        module = load_module(file, "models")
        define = getattr(module, "define", None)
        if not callable(define):
            msg = f"Model module {file} must define a callable 'define(ctx)'"
            raise ConfigurationError(msg)
        ctx.models[file.stem] = await invoke(define, ctx)
        logger.debug("Loaded model %s", file.stem)
    return ctx.models
