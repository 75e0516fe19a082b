"""Data layer error hierarchy."""

from mec.errors import MecError


class DataError(MecError):
    """Base for all mec.data errors."""


class ConnectionError(DataError):  # noqa: A001
    """The database cannot be opened or does not answer."""


class QueryError(DataError):
    """A SQL statement failed."""
