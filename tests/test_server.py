import threading
import urllib.error
import urllib.request

import pytest

from prreviewer.server import Server, ServerClosedError


def hello_app(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [b"hello"]


def _run(server):
    thread = threading.Thread(target=server.start, daemon=True)
    thread.start()
    return thread, server.wait_listening(5)


def test_none_handler_rejected():
    with pytest.raises(ValueError):
        Server(None)


def test_address_and_handler():
    server = Server(hello_app, host="127.0.0.1", port=8080)
    assert server.address() == "127.0.0.1:8080"
    assert server.handler() is hello_app


def test_serves_until_shutdown():
    server = Server(hello_app, host="127.0.0.1", port=0, read_timeout=5)
    thread, port = _run(server)
    try:
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/", timeout=5) as response:
            body = response.read()
    finally:
        server.shutdown(5)
    thread.join(5)
    assert body == b"hello"
    assert not thread.is_alive()


def test_oversized_headers_rejected():
    server = Server(hello_app, host="127.0.0.1", port=0, max_header_bytes=64)
    thread, port = _run(server)
    request = urllib.request.Request(
        f"http://127.0.0.1:{port}/", headers={"X-Filler": "a" * 5000}
    )
    try:
        with pytest.raises(urllib.error.HTTPError) as info:
            urllib.request.urlopen(request, timeout=5)
        info.value.close()
    finally:
        server.shutdown(5)
    thread.join(5)
    assert info.value.code == 431


def test_start_after_shutdown_fails():
    server = Server(hello_app, host="127.0.0.1", port=0)
    server.shutdown(1)
    with pytest.raises(ServerClosedError):
        server.start()


def test_wait_listening_times_out_when_not_started():
    server = Server(hello_app, host="127.0.0.1", port=0)
    with pytest.raises(TimeoutError):
        server.wait_listening(0.01)