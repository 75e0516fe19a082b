"""Production build: minify component scripts.

``components/**/*.js`` is minified with rjsmin into
``<build_dir>/components/`` keeping relative paths; in production the
``/components`` mount serves that directory instead of the sources.
"""

import logging
from pathlib import Path

import rjsmin

logger = logging.getLogger("mec.optimize")


class Optimizer:
    __slots__ = ("build_dir", "components_dir")

    def __init__(self, components_dir: str | Path = "components", build_dir: str | Path = ".mec") -> None:
        self.components_dir = Path(components_dir)
        self.build_dir = Path(build_dir)

    @property
    def output_dir(self) -> Path:
        return self.build_dir / "components"

    def minify_scripts(self) -> list[Path]:
        """Minify every component script; return the written paths."""
        if not self.components_dir.is_dir():
            logger.debug("No components directory at %s, nothing to minify", self.components_dir)
            return []

        written: list[Path] = []
        for source in sorted(self.components_dir.rglob("*.js")):
            target = self.output_dir / source.relative_to(self.components_dir)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(rjsmin.jsmin(source.read_text(encoding="utf-8")), encoding="utf-8")
            written.append(target)
        logger.info("Minified %d component script(s) into %s", len(written), self.output_dir)
        return written
