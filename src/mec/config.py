"""Application configuration.

AppConfig is a frozen dataclass and cannot change after creation. Fields are
plain attributes, not string-key dict lookups.

Settings files follow the layered ``config/`` convention: ``default.json``
is loaded first, then ``<env>.json`` is deep-merged on top::

    settings = load_settings("config")
    config = AppConfig.from_settings(settings, port=9000)
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from mec.errors import ConfigurationError

logger = logging.getLogger("mec.app")

DEFAULT_DATABASE_URL = "sqlite:///:memory:"


def current_env() -> str:
    """Return the deployment environment name (``MEC_ENV`` or ``NODE_ENV``)."""
    return os.environ.get("MEC_ENV") or os.environ.get("NODE_ENV") or "development"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=9000, gql=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8081
    debug: bool = False
    production: bool = False

    # Reload (development mode, pounce reload)
    reload_dirs: tuple[str, ...] = ()

    # Project layout
    routes_dir: str | Path = "routes"
    views_dir: str | Path = "views"
    components_dir: str | Path = "components"
    models_dir: str | Path = "models"
    static_dir: str | Path | None = "static"
    build_dir: str | Path = ".mec"
    framework_dir: str | Path = "node_modules"

    # GraphQL
    gql: bool = False
    graphql_path: str = "/graphql"

    # Database
    database_url: str = DEFAULT_DATABASE_URL

    # Logging
    log_level: str = "info"
    log_dir: str | Path = "."
    log_console: bool | None = None  # None = console unless production

    @property
    def components_root(self) -> Path:
        """Directory served at ``/components`` (minified build in production)."""
        if self.production:
            return Path(self.build_dir) / "components"
        return Path(self.components_dir)

    @classmethod
    def from_env(cls, **overrides: Any) -> AppConfig:
        """Build a config from ``MEC_*`` environment variables.

        ``MEC_ENV=production`` (or ``NODE_ENV=production``) switches to
        production mode: minified components, no console logging.
        """
        values: dict[str, Any] = {"production": current_env() == "production"}
        if port := os.environ.get("MEC_PORT"):
            try:
                values["port"] = int(port)
            except ValueError:
                msg = f"MEC_PORT must be an integer, got {port!r}"
                raise ConfigurationError(msg) from None
        if host := os.environ.get("MEC_HOST"):
            values["host"] = host
        if url := os.environ.get("MEC_DATABASE_URL"):
            values["database_url"] = url
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_settings(cls, settings: dict[str, Any], **overrides: Any) -> AppConfig:
        """Build a config from a layered settings dict (see ``load_settings``)."""
        server = settings.get("server", {})
        database = settings.get("database", {})
        values: dict[str, Any] = {}
        for key in ("host", "port", "gql", "routes_dir", "debug"):
            if key in server:
                values[key] = server[key]
        if "connection_uri" in database:
            values["database_url"] = database["connection_uri"]
        else:
            logger.info("Using default database configuration...")
        base = cls.from_env()
        return replace(base, **{**values, **overrides})


def load_settings(config_dir: str | Path = "config", env: str | None = None) -> dict[str, Any]:
    """Load ``default.json`` then deep-merge ``<env>.json`` over it.

    Missing files are skipped, so an app without a ``config/`` directory
    gets an empty dict.

    Raises:
        ConfigurationError: If a settings file is not valid JSON or its
            top level is not an object.
    """
    root = Path(config_dir)
    env = env or current_env()
    settings: dict[str, Any] = {}
    for name in ("default", env):
        path = root / f"{name}.json"
        if not path.is_file():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON in {path}: {exc}"
            raise ConfigurationError(msg) from exc
        if not isinstance(data, dict):
            msg = f"{path} must contain a JSON object"
            raise ConfigurationError(msg)
        settings = _deep_merge(settings, data)
    return settings


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
