"""Shared fixtures: every test runs in its own project directory."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from mec.http.request import Request

ENV_VARS = ("MEC_ENV", "NODE_ENV", "MEC_PORT", "MEC_HOST", "MEC_DATABASE_URL")


@pytest.fixture(autouse=True)
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each test from an empty directory with a clean environment.

    App directories (``routes``, ``views``, ``models``...) are relative to
    the working directory, so tests lay files out under ``tmp_path``.
    """
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_mec_logging() -> Iterator[None]:
    yield
    root = logging.getLogger("mec")
    for handler in list(root.handlers):
        if getattr(handler, "_mec_handler", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def write_file(project_dir: Path) -> Callable[[str, str], Path]:
    """Write ``content`` to ``relative`` under the project directory."""

    def write(relative: str, content: str) -> Path:
        path = project_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return write


def make_request(
    path: str = "/",
    method: str = "GET",
    *,
    headers: list[tuple[bytes, bytes]] | None = None,
    query_string: bytes = b"",
    body: bytes = b"",
) -> Request:
    """Build a Request straight from an ASGI scope."""
    scope: dict[str, Any] = {
        "type": "http",
        "method": method,
        "path": path,
        "headers": headers or [],
        "query_string": query_string,
        "http_version": "1.1",
        "client": ("127.0.0.1", 5000),
    }
    messages = [{"type": "http.request", "body": body, "more_body": False}]

    async def receive() -> dict[str, Any]:
        return messages.pop(0) if messages else {"type": "http.disconnect"}

    return Request.from_asgi(scope, receive)
