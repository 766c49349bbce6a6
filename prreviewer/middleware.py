"""WSGI middleware: body size limit, request logging, panic recovery, request ids."""

from __future__ import annotations

import itertools
import secrets
import socket
import time
from collections.abc import Callable, Iterable, Iterator
from contextvars import ContextVar
from typing import Any

from prreviewer.ports import Logger

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def current_request_id() -> str | None:
    """Return the id of the request being handled, or None outside a request."""
    return _request_id.get()


def _status_code(status: str) -> int:
    return int(status.split(None, 1)[0])


def _close(body: Iterable[bytes]) -> None:
    close = getattr(body, "close", None)
    if close is not None:
        close()


class _BodyTooLargeError(OSError):
    def __init__(self) -> None:
        super().__init__("http: request body too large")


class _MaxBytesStream:
    """An input stream that fails once more than ``limit`` bytes are read."""

    def __init__(self, stream: Any, limit: int) -> None:
        self._stream = stream
        self._limit = max(limit, 0)
        self._consumed = 0

    def _take(self, data: bytes, remaining: int) -> bytes:
        if len(data) > remaining:
            self._consumed = self._limit
            raise _BodyTooLargeError()
        self._consumed += len(data)
        return data

    def read(self, size: int | None = -1) -> bytes:
        remaining = self._limit - self._consumed
        wanted = remaining + 1 if size is None or size < 0 else min(size, remaining + 1)
        return self._take(self._stream.read(wanted), remaining)

    def readline(self, size: int | None = -1) -> bytes:
        remaining = self._limit - self._consumed
        wanted = remaining + 1 if size is None or size < 0 else min(size, remaining + 1)
        return self._take(self._stream.readline(wanted), remaining)

    def __iter__(self) -> Iterator[bytes]:
        while line := self.readline():
            yield line


class LimitBodySize:
    """Refuse to read more than ``max_body_size`` bytes of a request body."""

    def __init__(self, app: WSGIApp, max_body_size: int) -> None:
        self.app = app
        self.max_body_size = max_body_size

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        environ["wsgi.input"] = _MaxBytesStream(environ["wsgi.input"], self.max_body_size)
        return self.app(environ, start_response)


class _Exchange:
    def __init__(self) -> None:
        self.status = 200
        self.written = 0


class _LoggedBody:
    """Counts the bytes of a response body and reports once it is closed."""

    def __init__(self, body: Iterable[bytes], exchange: _Exchange, on_close: Callable[[], None]) -> None:
        self._body = body
        self._exchange = exchange
        self._on_close = on_close
        self._closed = False

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._body:
            self._exchange.written += len(chunk)
            yield chunk

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            _close(self._body)
        finally:
            self._on_close()


class RequestLogger:
    """Log method, path, status, duration and size of every request."""

    def __init__(self, app: WSGIApp, logger: Logger) -> None:
        self.app = app
        self.logger = logger

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        started = time.perf_counter()
        exchange = _Exchange()
        request_id = current_request_id()
        log = self.logger.bind(**({"request_id": request_id} if request_id else {}))

        def _start(status: str, headers: list, exc_info: Any = None) -> Callable[[bytes], Any]:
            exchange.status = _status_code(status)
            write = start_response(status, headers, exc_info)

            def counting_write(data: bytes) -> Any:
                exchange.written += len(data)
                return write(data)

            return counting_write

        def _report() -> None:
            fields: dict[str, Any] = {
                "method": environ.get("REQUEST_METHOD", ""),
                "path": environ.get("PATH_INFO", ""),
                "status": exchange.status,
                "duration_ms": int((time.perf_counter() - started) * 1000),
                "bytes": exchange.written,
            }
            query = environ.get("QUERY_STRING", "")
            if query:
                fields["query"] = query
            if exchange.status >= 500:
                log.error("HTTP request", **fields)
            elif exchange.status >= 400:
                log.warning("HTTP request", **fields)
            else:
                log.info("HTTP request", **fields)

        body = self.app(environ, _start)
        return _LoggedBody(body, exchange, _report)


class Recovery:
    """Turn an unhandled exception into a JSON internal-error response."""

    BODY = b'{"error":{"code":"INTERNAL_ERROR","message":"internal server error"}}'

    def __init__(self, app: WSGIApp, logger: Logger) -> None:
        self.app = app
        self.logger = logger

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        started: tuple[str, list] | None = None
        chunks: list[bytes] = []

        def _start(status: str, headers: list, exc_info: Any = None) -> Callable[[bytes], Any]:
            nonlocal started
            if started is None or exc_info is not None:
                started = (status, list(headers))
            return chunks.append

        try:
            body = self.app(environ, _start)
            try:
                for chunk in body:
                    chunks.append(chunk)
            finally:
                _close(body)
        except Exception as exc:
            request_id = current_request_id()
            log = self.logger.bind(**({"request_id": request_id} if request_id else {}))
            log.error(
                "panic recovered",
                error=exc,
                method=environ.get("REQUEST_METHOD", ""),
                path=environ.get("PATH_INFO", ""),
            )
            if started is None:
                status = "500 Internal Server Error"
                headers = [("Content-Type", "application/json")]
            else:
                status = started[0]
                headers = [(k, v) for k, v in started[1] if k.lower() != "content-length"]
            chunks.append(self.BODY)
            start_response(status, headers)
            return chunks

        if started is None:
            raise RuntimeError("application did not start a response")
        start_response(*started)
        return chunks


class RequestIDMiddleware:
    """Expose the request id to the handlers and echo it in the response.

    The id comes from the X-Request-ID header; with ``generate`` a new one is
    made up when the header is missing.
    """

    def __init__(self, app: WSGIApp, generate: bool = False) -> None:
        self.app = app
        self.generate = generate
        host = socket.gethostname() or "localhost"
        self._prefix = f"{host}/{secrets.token_urlsafe(8)[:10]}"
        self._counter = itertools.count(1)

    def _new_id(self) -> str:
        return f"{self._prefix}-{next(self._counter):06d}"

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        request_id = environ.get("HTTP_X_REQUEST_ID", "")
        if not request_id and self.generate:
            request_id = self._new_id()
        if not request_id:
            return self.app(environ, start_response)

        def _start(status: str, headers: list, exc_info: Any = None) -> Callable[[bytes], Any]:
            if not any(name.lower() == "x-request-id" for name, _ in headers):
                headers = [*headers, (REQUEST_ID_HEADER, request_id)]
            return start_response(status, headers, exc_info)

        token = _request_id.set(request_id)
        try:
            return self.app(environ, _start)
        finally:
            _request_id.reset(token)