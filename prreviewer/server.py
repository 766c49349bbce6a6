"""The HTTP server that runs the API application."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import Any

from werkzeug.serving import BaseWSGIServer, WSGIRequestHandler, make_server
from werkzeug.wrappers import Response

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]

DEFAULT_MAX_HEADER_BYTES = 1 << 20
_HEADER_SLACK = 4096


class ServerClosedError(RuntimeError):
    """The server was shut down and cannot be started."""

    def __init__(self) -> None:
        super().__init__("http: Server closed")


def _header_bytes(environ: dict) -> int:
    size = (
        len(environ.get("REQUEST_METHOD", ""))
        + len(environ.get("REQUEST_URI") or environ.get("RAW_URI") or environ.get("PATH_INFO", ""))
        + len(environ.get("SERVER_PROTOCOL", ""))
    )
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            size += len(key) - 5 + len(str(value)) + 4
        elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
            size += len(key) + len(str(value)) + 4
    return size


class Server:
    """Serves a WSGI application over HTTP.

    A zero timeout means none; the socket timeout is the largest of the given
    timeouts. ``max_header_bytes`` of zero means the default of 1 MiB.
    """

    def __init__(
        self,
        handler: WSGIApp,
        host: str = "",
        port: int | str = 8080,
        read_timeout: float = 0,
        write_timeout: float = 0,
        idle_timeout: float = 0,
        max_header_bytes: int = 0,
    ) -> None:
        if handler is None:
            raise ValueError("HTTP handler cannot be None")
        self._handler = handler
        self.host = host
        self.port = str(port)
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.idle_timeout = idle_timeout
        self.max_header_bytes = max_header_bytes or DEFAULT_MAX_HEADER_BYTES
        self._lock = threading.Lock()
        self._listening = threading.Event()
        self._server: BaseWSGIServer | None = None
        self._closed = False

    def _guarded(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        if _header_bytes(environ) > self.max_header_bytes + _HEADER_SLACK:
            status = HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE
            response = Response(
                f"{status.value} {status.phrase}",
                status=status.value,
                content_type="text/plain; charset=utf-8",
            )
            response.headers["Connection"] = "close"
            return response(environ, start_response)
        return self._handler(environ, start_response)

    def _request_handler_class(self) -> type[WSGIRequestHandler]:
        timeouts = [t for t in (self.read_timeout, self.write_timeout, self.idle_timeout) if t > 0]
        socket_timeout = max(timeouts) if timeouts else None

        class _RequestHandler(WSGIRequestHandler):
            timeout = socket_timeout

        return _RequestHandler

    def start(self) -> None:
        """Listen and serve until :meth:`shutdown` is called."""
        with self._lock:
            if self._closed:
                raise ServerClosedError()
            if self._server is not None:
                raise RuntimeError("server already started")
            server = make_server(
                self.host or "0.0.0.0",
                int(self.port),
                self._guarded,
                threaded=True,
                request_handler=self._request_handler_class(),
            )
            self._server = server
        self._listening.set()
        server.serve_forever()

    def wait_listening(self, timeout: float | None = None) -> int:
        """Wait until the server accepts connections and return its bound port."""
        if not self._listening.wait(timeout):
            raise TimeoutError("server is not listening")
        assert self._server is not None
        return self._server.server_port

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop accepting requests and close the listener, waiting at most ``timeout`` seconds."""
        with self._lock:
            self._closed = True
            server = self._server
        if server is None:
            return
        worker = threading.Thread(target=server.shutdown, daemon=True)
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            raise TimeoutError("server shutdown timed out")

    def address(self) -> str:
        """The configured listen address as host:port."""
        return f"{self.host}:{self.port}"

    def handler(self) -> WSGIApp:
        """The application being served."""
        return self._handler