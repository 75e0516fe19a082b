"""``mec init``: write a new application skeleton.

Refuses to run in a directory that already holds a project (``app.py``
or ``pyproject.toml``). Files already written are left in place if a
later step fails.
"""

import shutil
import subprocess
from pathlib import Path

from rich.console import Console

from mec.cli._templates import (
    APP_PY,
    COMPONENT_JS,
    DEFAULT_JSON,
    GITIGNORE,
    HEALTH_ROUTE_PY,
    LOGO_SVG,
    PACKAGE_JSON,
    VIEW_PY,
)
from mec.errors import ScaffoldError

console = Console()

# relative path -> content
SKELETON: dict[str, str] = {
    "app.py": APP_PY,
    "views/mec.py": VIEW_PY,
    "components/mec.js": COMPONENT_JS,
    "static/mec.svg": LOGO_SVG,
    "routes/api/health.py": HEALTH_ROUTE_PY,
    "config/default.json": DEFAULT_JSON,
    "package.json": PACKAGE_JSON,
    ".gitignore": GITIGNORE,
}

PROJECT_MARKERS = ("app.py", "pyproject.toml")


def init_project(directory: str | Path | None = None, *, install: bool = True) -> list[Path]:
    """Write the skeleton into *directory* (default: cwd); return written paths.

    Raises:
        ScaffoldError: The directory already holds a project, or a file
            cannot be written.
    """
    root = Path(directory) if directory is not None else Path.cwd()
    root.mkdir(parents=True, exist_ok=True)

    for marker in PROJECT_MARKERS:
        if (root / marker).exists():
            msg = (
                f"Directory {root} already contains a {marker}. "
                "Aborting to prevent overwriting existing project."
            )
            raise ScaffoldError(msg)

    if any(root.iterdir()):
        console.print(
            "Warning: New application directory not empty. New files will be added to existing ones."
        )

    written: list[Path] = []
    for relative, content in SKELETON.items():
        dest = root / relative
        console.print(f"Creating {dest}...", soft_wrap=True, highlight=False)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(content, encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {dest}: {exc}"
            raise ScaffoldError(msg) from exc
        written.append(dest)

    if install:
        install_dependencies(root)
    return written


def install_dependencies(root: Path) -> None:
    """Run ``npm install`` for the browser libraries, when npm is available."""
    npm = shutil.which("npm")
    if npm is None:
        console.print("npm not found; run `npm install` to fetch the browser libraries.")
        return
    console.print("Installing dependencies...")
    result = subprocess.run([npm, "install"], cwd=root, check=False)
    if result.returncode != 0:
        msg = f"npm install failed with exit code {result.returncode}"
        raise ScaffoldError(msg)


def run_init(directory: str | None) -> None:
    init_project(directory)
    console.print(
        "New Mec application initialized. Run `mec dev` to start the new app "
        "or `mec create` to scaffold!"
    )
