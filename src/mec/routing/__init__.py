"""HTTP routing: route definitions and the compiled trie router."""

from mec.routing.route import ALL_METHODS, VALID_METHODS, Route, RouteMatch, normalize_methods
from mec.routing.router import Router

__all__ = ["ALL_METHODS", "VALID_METHODS", "Route", "RouteMatch", "Router", "normalize_methods"]
