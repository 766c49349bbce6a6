"""Routing table and middleware stack of the HTTP API."""

from __future__ import annotations

import ipaddress
from collections.abc import Callable, Iterable
from typing import Any

from werkzeug.wrappers import Request, Response

from prreviewer.middleware import LimitBodySize, Recovery, RequestIDMiddleware, RequestLogger
from prreviewer.ports import Logger

View = Callable[[Request], Response]
WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]

_NO_CACHE_HEADERS = (
    ("Expires", "Thu, 01 Jan 1970 00:00:00 GMT"),
    ("Cache-Control", "no-cache, no-store, no-transform, must-revalidate, private, max-age=0"),
    ("Pragma", "no-cache"),
    ("X-Accel-Expires", "0"),
)

_ETAG_ENVIRON_KEYS = (
    "HTTP_ETAG",
    "HTTP_IF_MODIFIED_SINCE",
    "HTTP_IF_MATCH",
    "HTTP_IF_NONE_MATCH",
    "HTTP_IF_RANGE",
    "HTTP_IF_UNMODIFIED_SINCE",
)


def _no_cache(app: WSGIApp) -> WSGIApp:
    """Drop conditional request headers and mark every response uncacheable."""

    def wrapped(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        for key in _ETAG_ENVIRON_KEYS:
            environ.pop(key, None)

        def _start(status: str, headers: list, exc_info: Any = None) -> Any:
            present = {name.lower() for name, _ in headers}
            extra = [(k, v) for k, v in _NO_CACHE_HEADERS if k.lower() not in present]
            return start_response(status, [*headers, *extra], exc_info)

        return app(environ, _start)

    return wrapped


def _client_ip(environ: dict) -> str:
    ip = environ.get("HTTP_TRUE_CLIENT_IP") or environ.get("HTTP_X_REAL_IP")
    if not ip:
        ip = environ.get("HTTP_X_FORWARDED_FOR", "").split(",", 1)[0].strip()
    if not ip:
        return ""
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return ""
    return ip


def _real_ip(app: WSGIApp) -> WSGIApp:
    """Take the client address from proxy headers when they carry a valid one."""

    def wrapped(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        ip = _client_ip(environ)
        if ip:
            environ["REMOTE_ADDR"] = ip
        return app(environ, start_response)

    return wrapped


def _health(request: Request) -> Response:
    body = b"" if request.method == "HEAD" else b"OK"
    return Response(body, status=200, content_type="text/plain")


def _not_found() -> Response:
    response = Response(
        "404 page not found\n", status=404, content_type="text/plain; charset=utf-8"
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


class Router:
    """Collects the API routes and builds the WSGI application serving them."""

    def __init__(
        self,
        team_handler: Any,
        user_handler: Any,
        pull_request_handler: Any,
        statistics_handler: Any,
        logger: Logger,
        max_body_size: int,
    ) -> None:
        self._handlers = (team_handler, user_handler, pull_request_handler, statistics_handler)
        self.logger = logger
        self.max_body_size = max_body_size
        self._routes: dict[str, dict[str, View]] = {}

    def add(self, method: str, path: str, view: View) -> None:
        """Serve ``path`` with ``view`` for requests of ``method``."""
        self._routes.setdefault(path, {})[method.upper()] = view

    def _dispatch(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        request = Request(environ)
        methods = self._routes.get(request.path)
        if methods is None:
            response = _not_found()
        elif (view := methods.get(request.method)) is None:
            response = Response(status=405, headers=[("Allow", method) for method in methods])
        else:
            response = view(request)
        return response(environ, start_response)

    def setup(self) -> WSGIApp:
        """Register every route and return the application wrapped in its middleware."""
        self.add("GET", "/health", _health)
        self.add("HEAD", "/health", _health)
        for handler in self._handlers:
            handler.register_routes(self)

        app: WSGIApp = self._dispatch
        app = _no_cache(app)
        app = _real_ip(app)
        app = Recovery(app, self.logger)
        app = RequestLogger(app, self.logger)
        app = LimitBodySize(app, self.max_body_size)
        return RequestIDMiddleware(app, generate=True)