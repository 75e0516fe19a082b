"""Tests for mec.context: request_var, g, and AppContext."""

import logging

import pytest
from conftest import make_request

from mec.config import AppConfig
from mec.context import AppContext, g, get_request, request_var


class TestRequestVar:
    def test_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    def test_inside_request(self) -> None:
        request = make_request("/here")
        token = request_var.set(request)
        try:
            assert get_request() is request
        finally:
            request_var.reset(token)


class TestGlobals:
    def teardown_method(self) -> None:
        g._reset()

    def test_set_and_get(self) -> None:
        g.user = "ada"
        assert g.user == "ada"
        assert "user" in g
        assert g.get("user") == "ada"

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError, match="'g' has no attribute 'nope'"):
            _ = g.nope
        assert g.get("nope", "fallback") == "fallback"

    def test_delete(self) -> None:
        g.temp = 1
        del g.temp
        assert "temp" not in g
        with pytest.raises(AttributeError):
            del g.temp

    def test_reset_clears(self) -> None:
        g.user = "ada"
        g._reset()
        assert "user" not in g


class TestAppContext:
    def test_defaults(self) -> None:
        ctx = AppContext(config=AppConfig(), logger=logging.getLogger("mec.app"))
        assert ctx.db is None
        assert ctx.models == {}

    def test_models_not_shared(self) -> None:
        first = AppContext(config=AppConfig(), logger=logging.getLogger("mec.app"))
        second = AppContext(config=AppConfig(), logger=logging.getLogger("mec.app"))
        first.models["todo"] = object()
        assert second.models == {}
