"""Tests for mec.frontend.client_view and mec.frontend.router."""

import logging

import pytest
from conftest import make_request

from mec.config import AppConfig
from mec.context import AppContext
from mec.errors import ClientRouteNotFound, ViewError
from mec.frontend.client_view import ClientView, ViewRegistry
from mec.frontend.router import ClientRoute, match_client_route, split_pathname


class TestViewRegistry:
    def test_load(self, write_file) -> None:
        write_file("views/home.py", "def render():\n    return '<p>home</p>'\n")
        write_file("views/about.py", "async def render(request):\n    return request.path\n")
        registry = ViewRegistry.load("views")

        assert registry.names == ("about", "home")
        assert "home" in registry
        assert len(registry) == 2
        assert registry.get("home")() == "<p>home</p>"

    def test_skips_private_and_hidden(self, write_file) -> None:
        write_file("views/_helpers.py", "x = 1\n")
        write_file("views/.draft.py", "x = 1\n")
        write_file("views/home.py", "def render():\n    return ''\n")
        assert ViewRegistry.load("views").names == ("home",)

    def test_missing_directory(self) -> None:
        assert len(ViewRegistry.load("views")) == 0

    def test_module_without_render(self, write_file) -> None:
        write_file("views/broken.py", "render = 'not callable'\n")
        with pytest.raises(ViewError, match="Component broken is not a function or could not be found!"):
            ViewRegistry.load("views")

    def test_unknown_name(self) -> None:
        with pytest.raises(ViewError, match="Component nope is not a function"):
            ViewRegistry().get("nope")


class TestClientView:
    async def test_wraps_markup_in_shell(self) -> None:
        registry = ViewRegistry({"home": lambda: "<h1>Hi</h1>"})
        response = await ClientView("home", "Welcome").create(make_request(), registry=registry)

        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert "<h1>Hi</h1>" in response.text
        assert "<title>Welcome</title>" in response.text
        assert "/components/home.js" in response.text

    async def test_view_sets_status_and_headers(self) -> None:
        def render(request, response):
            response.status = 404
            response.headers["X-View"] = request.path
            return "<p>missing</p>"

        registry = ViewRegistry({"missing": render})
        response = await ClientView("missing").create(make_request("/gone"), registry=registry)
        assert response.status == 404
        assert response.header("X-View") == "/gone"

    async def test_view_returning_component(self) -> None:
        def render():
            def frameworks(request, response):
                response.status = 202
                return f"<p>{request.path}</p>"

            return frameworks

        registry = ViewRegistry({"frameworks": render})
        response = await ClientView("frameworks").create(make_request("/fw"), registry=registry)
        assert response.status == 202
        assert "<p>/fw</p>" in response.text

    async def test_async_view_gets_context(self) -> None:
        ctx = AppContext(config=AppConfig(port=9123), logger=logging.getLogger("test"))

        async def render(ctx):
            return f"<p>{ctx.config.port}</p>"

        registry = ViewRegistry({"port": render})
        response = await ClientView("port").create(make_request(), registry=registry, ctx=ctx)
        assert "<p>9123</p>" in response.text

    async def test_context_by_annotation(self) -> None:
        ctx = AppContext(config=AppConfig(), logger=logging.getLogger("test"))

        def render(app: AppContext):
            return f"<p>{app.logger.name}</p>"

        registry = ViewRegistry({"ctx": render})
        response = await ClientView("ctx").create(
            make_request(), registry=registry, providers={AppContext: lambda: ctx}
        )
        assert "<p>test</p>" in response.text

    async def test_unknown_view(self) -> None:
        with pytest.raises(ViewError):
            await ClientView("nope").create(make_request(), registry=ViewRegistry())


ROUTES = [
    ClientRoute("/", "<home-page></home-page>"),
    ClientRoute("/about", "<about-page></about-page>"),
    ClientRoute("/about/team", "<team-page></team-page>"),
]


class TestClientRouter:
    def test_split_pathname(self) -> None:
        assert split_pathname("/a/b") == ["a", "b"]
        assert split_pathname("/") == [""]

    def test_route_segments(self) -> None:
        assert ClientRoute("/about/team").segments == ("about", "team")
        assert ClientRoute("/").segments == ("",)

    def test_match_root(self) -> None:
        assert match_client_route(ROUTES, split_pathname("/")).template == "<home-page></home-page>"

    def test_match_exact_segments(self) -> None:
        assert match_client_route(ROUTES, ["about"]).path == "/about"
        assert match_client_route(ROUTES, ["about", "team"]).path == "/about/team"

    def test_segment_count_must_match(self) -> None:
        with pytest.raises(ClientRouteNotFound):
            match_client_route(ROUTES, ["about", "team", "lead"])

    def test_prefix_of_longer_route_does_not_match(self) -> None:
        routes = [ClientRoute("/a/b"), ClientRoute("/c")]
        with pytest.raises(ClientRouteNotFound):
            match_client_route(routes, ["a"])

    def test_no_match(self) -> None:
        with pytest.raises(ClientRouteNotFound, match="No client route matches /missing"):
            match_client_route(ROUTES, ["missing"])

    def test_first_match_wins(self) -> None:
        routes = [ClientRoute("/a", "first"), ClientRoute("/a", "second")]
        assert match_client_route(routes, ["a"]).template == "first"
