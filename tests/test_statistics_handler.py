import json

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from prreviewer.service_errors import TeamNotFoundError
from prreviewer.statistics_handler import StatisticsHandler

_PR_STATS = {"total": 10, "open": 5, "merged": 5}


class _FakeService:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def get_statistics(self, team_name):
        self.calls.append(team_name)
        if self.error is not None:
            raise self.error
        return self.result


def _get(query=None):
    environ = EnvironBuilder(method="GET", path="/statistics", query_string=query).get_environ()
    return Request(environ)


@pytest.mark.parametrize(
    "query, expected_team, stats",
    [
        (None, "", {"pr_stats": _PR_STATS}),
        (
            {"team_name": "team-1"},
            "team-1",
            {
                "pr_stats": _PR_STATS,
                "user_stats": [
                    {"user_id": "user-1", "total_reviews": 3, "active_reviews": 2},
                    {"user_id": "user-2", "total_reviews": 2, "active_reviews": 1},
                ],
            },
        ),
        ({"team_name": "team-1"}, "team-1", {"pr_stats": _PR_STATS, "user_stats": []}),
    ],
)
def test_get_statistics_success(query, expected_team, stats):
    service = _FakeService(result=stats)
    response = StatisticsHandler(service).get_statistics(_get(query))
    assert response.status_code == 200
    assert json.loads(response.get_data()) == stats
    assert service.calls == [expected_team]


def test_get_statistics_trims_team_name():
    service = _FakeService(result={"pr_stats": _PR_STATS})
    StatisticsHandler(service).get_statistics(_get({"team_name": "  team-1  "}))
    assert service.calls == ["team-1"]


def test_get_statistics_team_not_found():
    service = _FakeService(error=TeamNotFoundError())
    response = StatisticsHandler(service).get_statistics(_get({"team_name": "ghost"}))
    assert response.status_code == 404
    assert json.loads(response.get_data())["error"] == {
        "code": "NOT_FOUND",
        "message": "team not found",
    }


def test_get_statistics_unknown_error():
    service = _FakeService(error=RuntimeError("boom"))
    response = StatisticsHandler(service).get_statistics(_get())
    assert response.status_code == 500
    assert json.loads(response.get_data())["error"]["code"] == "INTERNAL_ERROR"


def test_get_statistics_nil_result():
    response = StatisticsHandler(_FakeService(result=None)).get_statistics(_get())
    assert response.status_code == 500
    assert json.loads(response.get_data())["error"]["message"] == "statistics data is nil"


def test_register_routes():
    added = []

    class _Routes:
        def add(self, method, path, view):
            added.append((method, path, view))

    handler = StatisticsHandler(_FakeService())
    handler.register_routes(_Routes())
    assert added == [("GET", "/statistics", handler.get_statistics)]