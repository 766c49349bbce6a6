"""HTTP handler for review statistics."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Protocol

from werkzeug.wrappers import Request, Response

from prreviewer.presenter import map_service_error, respond_error, respond_statistics


class StatisticsService(Protocol):
    """What the statistics handler needs from the application layer."""

    def get_statistics(self, team_name: str) -> Any:
        """Return pull request statistics, with per-user figures when a team is given."""


class StatisticsHandler:
    """Serves GET /statistics."""

    def __init__(self, service: StatisticsService) -> None:
        self._service = service

    def get_statistics(self, request: Request) -> Response:
        """GET /statistics?team_name= ; without a team only pull request figures are given."""
        team_name = request.args.get("team_name", "").strip()
        try:
            stats = self._service.get_statistics(team_name)
        except Exception as err:
            return respond_error(*map_service_error(err))
        return respond_statistics(HTTPStatus.OK, stats)

    def register_routes(self, routes: Any) -> None:
        """Add this handler's endpoint to a router."""
        routes.add("GET", "/statistics", self.get_statistics)