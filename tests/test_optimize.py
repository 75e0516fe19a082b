"""Tests for mec.frontend.optimize: production minification."""

from pathlib import Path

from mec.frontend.optimize import Optimizer

SOURCE = """\
// Greeting component
export function greet ( name ) {
  /* say hello */
  return "Hello, " + name;
}
"""


class TestOptimizer:
    def test_minifies_into_build_dir(self, write_file, project_dir: Path) -> None:
        write_file("components/greet.js", SOURCE)
        written = Optimizer().minify_scripts()

        target = project_dir / ".mec" / "components" / "greet.js"
        assert written == [Path(".mec") / "components" / "greet.js"]
        minified = target.read_text()
        assert "Greeting component" not in minified
        assert "say hello" not in minified
        assert '"Hello, "' in minified
        assert len(minified) < len(SOURCE)

    def test_keeps_relative_paths(self, write_file) -> None:
        write_file("components/a.js", "var a = 1;")
        write_file("components/widgets/b.js", "var b = 2;")
        optimizer = Optimizer("components", "dist")

        written = optimizer.minify_scripts()

        assert optimizer.output_dir == Path("dist") / "components"
        assert written == [
            Path("dist/components/a.js"),
            Path("dist/components/widgets/b.js"),
        ]

    def test_ignores_other_files(self, write_file) -> None:
        write_file("components/style.css", "p { }")
        assert Optimizer().minify_scripts() == []

    def test_missing_components_dir(self) -> None:
        assert Optimizer().minify_scripts() == []
