"""Test named-route URL generation."""

import pytest

from bootstrap_form.errors import RouteNotFoundError
from bootstrap_form.urls import Route, UrlGenerator


@pytest.fixture
def urls():
    return UrlGenerator(
        [
            Route("users/{user}/posts/{post}", name="users.posts.show"),
            Route("users/{user}", name="users.show", action="UserController@show"),
        ],
        base_url="http://x.test/",
        current_url="http://x.test/current",
    )


class TestUrlGenerator:
    """Test UrlGenerator."""

    def test_positional_parameters(self, urls):
        assert urls.route("users.posts.show", [1, 2]) == "http://x.test/users/1/posts/2"

    def test_named_parameters_and_query_string(self, urls):
        """Parameters without a placeholder become the query string."""
        url = urls.route("users.posts.show", {"user": 1, "post": 2, "page": 3})
        assert url == "http://x.test/users/1/posts/2?page=3"

    def test_action(self, urls):
        assert urls.action("UserController@show", [7]) == "http://x.test/users/7"

    def test_to(self, urls):
        assert urls.to("/about") == "http://x.test/about"
        assert urls.to("https://other.test/x") == "https://other.test/x"
        assert urls.to("#top") == "#top"

    def test_current(self, urls):
        assert urls.current() == "http://x.test/current"

    def test_unknown_route(self, urls):
        with pytest.raises(RouteNotFoundError) as exc_info:
            urls.route("missing")
        assert str(exc_info.value) == "Route [missing] not defined."

    def test_unknown_action(self, urls):
        with pytest.raises(RouteNotFoundError) as exc_info:
            urls.action("MissingController@index")
        assert str(exc_info.value) == "Action [MissingController@index] not defined."
        assert isinstance(exc_info.value, LookupError)
