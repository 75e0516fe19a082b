"""Async SQLite and PostgreSQL access, and model loading.

SQL in, dataclasses out::

    from mec.data import Database

    db = Database("sqlite:///app.db")
    packages = await db.fetch(Package, "SELECT * FROM packages")

Model modules under ``models/`` are loaded at startup with ``load_models``.
"""

from mec.data.database import Database
from mec.data.errors import DataError, QueryError
from mec.data.models import load_models

__all__ = ["DataError", "Database", "QueryError", "load_models"]
