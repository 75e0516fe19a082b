"""``mec create``: scaffold one framework file interactively."""

import re
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

from mec.cli._templates import SCAFFOLDS
from mec.errors import ScaffoldError

console = Console()

CHOICES: dict[str, str] = {
    "model": "Create a new database model",
    "route": "Create a new route file",
    "gql": "Create a new GraphQL schema",
    "clientview": "Create a new frontend client view",
}

_SEPARATOR_RUNS = re.compile(r"[\s_]+")
_CASE_BOUNDARY = re.compile(r"([a-z\d_])([A-Z])")


def to_snake_case(value: str) -> str:
    """Convert *value* to snake_case.

    Whitespace/underscore runs collapse to one ``_``, an ``_`` is inserted
    between a lowercase letter, digit or ``_`` and a following capital,
    and the result is lowercased::

        >>> to_snake_case("MyThing one")
        'my_thing_one'
    """
    collapsed = _SEPARATOR_RUNS.sub("_", value)
    return _CASE_BOUNDARY.sub(r"\1_\2", collapsed).lower()


def class_name_for(name: str) -> str:
    """``"my_thing"`` -> ``"MyThing"``."""
    return "".join(part.capitalize() for part in name.split("_") if part) or "Model"


def scaffold(kind: str, name: str, root: Path | None = None) -> Path:
    """Write the *kind* template for *name* under *root*; return its path.

    Raises:
        ScaffoldError: Unknown kind, empty name, or the file already exists.
    """
    if kind not in SCAFFOLDS:
        msg = f"Unknown scaffold type {kind!r}. Expected one of: {', '.join(SCAFFOLDS)}"
        raise ScaffoldError(msg)
    snake = to_snake_case(name.strip())
    if not snake.strip("_"):
        msg = "A name is required"
        raise ScaffoldError(msg)

    template, parts, suffix = SCAFFOLDS[kind]
    dest_dir = (root or Path.cwd()).joinpath(*parts)
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Failed to create directory: {exc}"
        raise ScaffoldError(msg) from exc

    dest = (dest_dir / f"{snake}{suffix}").resolve()
    if dest.exists():
        msg = f"{dest} already exists"
        raise ScaffoldError(msg)
    dest.write_text(template.format(name=snake, class_name=class_name_for(snake)), encoding="utf-8")
    return dest


def run_create() -> None:
    """Prompt for a scaffold type and a name, then write the file."""
    for kind, description in CHOICES.items():
        console.print(f"  [bold]{kind}[/bold]  {description}")
    kind = Prompt.ask("What would you like to scaffold?", choices=list(CHOICES), default="route")
    name = Prompt.ask(f"Enter a name for your {kind.upper()}")
    path = scaffold(kind, name)
    console.print(f"Created {path}!", soft_wrap=True, highlight=False)
