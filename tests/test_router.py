import json

import pytest
from werkzeug.test import Client
from werkzeug.wrappers import Response

from prreviewer.pull_request_handler import PullRequestHandler
from prreviewer.router import Router
from prreviewer.statistics_handler import StatisticsHandler
from prreviewer.team_handler import TeamHandler
from prreviewer.user_handler import UserHandler


class RecordingLogger:
    def __init__(self, records=None, fields=None):
        self.records = [] if records is None else records
        self.fields = fields or {}

    def _log(self, level, msg, kwargs):
        self.records.append((level, msg, {**self.fields, **kwargs}))

    def debug(self, msg, **kwargs):
        self._log("debug", msg, kwargs)

    def info(self, msg, **kwargs):
        self._log("info", msg, kwargs)

    def warning(self, msg, **kwargs):
        self._log("warning", msg, kwargs)

    def error(self, msg, **kwargs):
        self._log("error", msg, kwargs)

    def bind(self, **kwargs):
        return RecordingLogger(self.records, {**self.fields, **kwargs})


class Unused:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise AssertionError(f"unexpected call to {name}")

        return fail


class TeamService(Unused):
    def get_team(self, team_name):
        return {"team_name": team_name, "members": []}


def _router(max_body_size=1 << 20):
    logger = RecordingLogger()
    router = Router(
        TeamHandler(TeamService()),
        UserHandler(Unused()),
        PullRequestHandler(Unused()),
        StatisticsHandler(Unused()),
        logger,
        max_body_size,
    )
    return router, logger


@pytest.fixture
def setup():
    router, logger = _router()
    return router, Client(router.setup()), logger


def test_health_get(setup):
    _, client, _ = setup
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"OK"
    assert response.headers["Content-Type"] == "text/plain"


def test_health_head_has_no_body(setup):
    _, client, _ = setup
    response = client.head("/health")
    assert response.status_code == 200
    assert response.data == b""


def test_registered_handler_route(setup):
    _, client, _ = setup
    response = client.get("/team/get", query_string={"team_name": "team-1"})
    assert response.status_code == 200
    assert json.loads(response.data) == {"team_name": "team-1", "members": []}


def test_unknown_path(setup):
    _, client, _ = setup
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.data == b"404 page not found\n"


def test_method_not_allowed(setup):
    _, client, _ = setup
    response = client.get("/team/add")
    assert response.status_code == 405
    assert response.headers.getlist("Allow") == ["POST"]


def test_request_id_echoed(setup):
    _, client, _ = setup
    response = client.get("/health", headers={"X-Request-ID": "req-1"})
    assert response.headers["X-Request-ID"] == "req-1"


def test_request_id_generated_when_missing(setup):
    _, client, _ = setup
    first = client.get("/health").headers.get("X-Request-ID", "")
    second = client.get("/health").headers.get("X-Request-ID", "")
    assert first and second
    assert first != second


def test_responses_are_not_cacheable(setup):
    _, client, _ = setup
    response = client.get("/health")
    assert response.headers["Pragma"] == "no-cache"
    assert "no-store" in response.headers["Cache-Control"]


def test_conditional_headers_are_dropped(setup):
    router, client, _ = setup
    router.add(
        "GET", "/probe",
        lambda request: Response(request.headers.get("If-None-Match", "absent")),
    )
    response = client.get("/probe", headers={"If-None-Match": "abc"})
    assert response.data == b"absent"


def test_real_ip_from_header(setup):
    router, client, _ = setup
    router.add("GET", "/ip", lambda request: Response(request.remote_addr))
    response = client.get("/ip", headers={"X-Real-IP": "10.0.0.7"})
    assert response.data == b"10.0.0.7"


def test_invalid_real_ip_is_ignored(setup):
    router, client, _ = setup
    router.add("GET", "/ip", lambda request: Response(request.remote_addr))
    response = client.get(
        "/ip", headers={"X-Real-IP": "not-an-ip"}, environ_base={"REMOTE_ADDR": "192.0.2.1"}
    )
    assert response.data == b"192.0.2.1"


def test_exception_in_view_becomes_internal_error(setup):
    router, client, logger = setup

    def boom(request):
        raise RuntimeError("test panic")

    router.add("GET", "/boom", boom)
    response = client.get("/boom", buffered=True)
    assert response.status_code == 500
    assert json.loads(response.data)["error"]["code"] == "INTERNAL_ERROR"
    assert any(level == "error" and msg == "panic recovered" for level, msg, _ in logger.records)


def test_requests_are_logged(setup):
    _, client, logger = setup
    client.get("/health", buffered=True)
    client.get("/nowhere", buffered=True)
    http_records = [r for r in logger.records if r[1] == "HTTP request"]
    assert [(level, fields["path"], fields["status"]) for level, _, fields in http_records] == [
        ("info", "/health", 200),
        ("warning", "/nowhere", 404),
    ]
    assert all(fields["request_id"] for _, _, fields in http_records)


def test_body_size_limit():
    router, _ = _router(max_body_size=10)
    client = Client(router.setup())
    body = json.dumps({"pull_request_id": "pr-1", "pull_request_name": "PR", "author_id": "u-1"})
    response = client.post("/pullRequest/create", data=body, content_type="application/json")
    assert response.status_code == 400
    assert json.loads(response.data)["error"]["message"] == "invalid request body"