"""Mec CLI: project scaffolding and the development loop.

Entry point registered as ``mec`` in ``pyproject.toml``::

    [project.scripts]
    mec = "mec.cli:main"
"""

import argparse
import sys

from mec.errors import ScaffoldError


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``mec`` command."""
    from mec import __version__

    parser = argparse.ArgumentParser(
        prog="mec",
        usage="%(prog)s <cmd> [args]",
        description="Mec: a small full-stack web framework.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command")

    init_parser = subparsers.add_parser("init", help="initialize a new Mec app")
    init_parser.add_argument("directory", nargs="?", default=None, help="Target directory (default: cwd)")

    subparsers.add_parser("dev", help="watch for server changes and restart")
    subparsers.add_parser("create", help="create a framework component")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "init":
        from mec.cli._init import run_init

        try:
            run_init(args.directory)
        except ScaffoldError as exc:
            print(f"Error initializing Mec application: {exc}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "create":
        from mec.cli._create import run_create

        try:
            run_create()
        except ScaffoldError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "dev":
        from mec.cli._dev import run_dev

        run_dev()
