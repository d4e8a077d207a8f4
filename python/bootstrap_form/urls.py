"""Named-route URL generation for form actions."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlencode

from .errors import RouteNotFoundError

logger = logging.getLogger(__name__)

_PARAMETER_PATTERN = re.compile(r'\{(\w+)\??\}')


@dataclass(frozen=True)
class Route:
    """A registered application route."""

    uri: str
    name: str | None = None
    action: str | None = None  # "UserController@update" style handler name


class UrlGenerator:
    """Builds absolute URLs from a list of routes.

    Args:
        routes: Registered routes, searched in order.
        base_url: Prefix for every generated URL (e.g. "https://example.com").
        current_url: URL of the request being rendered; the default form action.
    """

    def __init__(self, routes: Iterable[Route] = (), base_url: str = "", current_url: str = ""):
        self.routes = list(routes)
        self.base_url = base_url.rstrip("/")
        self.current_url = current_url

    def current(self) -> str:
        return self.current_url

    def to(self, path: str) -> str:
        if re.match(r'^([a-z][a-z0-9+.-]*:)?//', path, flags=re.IGNORECASE) or path.startswith("#"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def route(self, name: str, parameters=None) -> str:
        for route in self.routes:
            if route.name == name:
                return self._build(route, parameters)
        logger.debug("No route named %s among %d routes", name, len(self.routes))
        raise RouteNotFoundError(name, "route")

    def action(self, name: str, parameters=None) -> str:
        for route in self.routes:
            if route.action == name:
                return self._build(route, parameters)
        raise RouteNotFoundError(name, "action")

    def _build(self, route: Route, parameters) -> str:
        if parameters is None:
            parameters = []
        elif isinstance(parameters, dict):
            parameters = dict(parameters)
        elif isinstance(parameters, (list, tuple)):
            parameters = list(parameters)
        else:
            parameters = [parameters]

        def fill(match):
            key = match.group(1)
            if isinstance(parameters, dict):
                if key in parameters:
                    return str(parameters.pop(key))
            elif parameters:
                return str(parameters.pop(0))
            return ''

        path = _PARAMETER_PATTERN.sub(fill, route.uri)
        path = re.sub(r'/+$', '', path) or '/'
        url = self.to(path)

        if isinstance(parameters, dict):
            extra = parameters
        else:
            extra = {str(i): v for i, v in enumerate(parameters)}
        if extra:
            url += "?" + urlencode(extra)
        return url
