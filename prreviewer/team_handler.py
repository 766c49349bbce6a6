"""HTTP handlers for teams."""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any, Protocol

from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Request, Response

from prreviewer.presenter import (
    ErrorCode,
    map_service_error,
    respond_error,
    respond_success,
    respond_team,
)
from prreviewer.request_validation import (
    respond_validation_errors,
    validate_create_team_request,
    validate_deactivate_team_members_request,
)


class _InvalidBodyError(Exception):
    """The request body is not the JSON object that was expected."""


def _read_json_object(request: Request) -> dict[str, Any]:
    """Read the first JSON value of the body; it must be an object or null."""
    try:
        raw = request.get_data()
    except (OSError, ValueError, HTTPException) as exc:
        raise _InvalidBodyError() from exc
    text = raw.decode("utf-8", errors="replace").lstrip(" \t\r\n")
    try:
        value, _ = json.JSONDecoder().raw_decode(text)
    except ValueError as exc:
        raise _InvalidBodyError() from exc
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _InvalidBodyError()
    return value


def _string(obj: dict[str, Any], key: str) -> str:
    item = obj.get(key)
    if item is None:
        return ""
    if not isinstance(item, str):
        raise _InvalidBodyError()
    return item


def _boolean(obj: dict[str, Any], key: str) -> bool:
    item = obj.get(key)
    if item is None:
        return False
    if not isinstance(item, bool):
        raise _InvalidBodyError()
    return item


def _member(item: Any) -> dict[str, Any]:
    if item is None:
        item = {}
    if not isinstance(item, dict):
        raise _InvalidBodyError()
    return {
        "user_id": _string(item, "user_id"),
        "username": _string(item, "username"),
        "is_active": _boolean(item, "is_active"),
    }


def _decode_create_team(request: Request) -> dict[str, Any]:
    body = _read_json_object(request)
    members = body.get("members")
    if members is None:
        members = []
    elif not isinstance(members, list):
        raise _InvalidBodyError()
    return {
        "team_name": _string(body, "team_name"),
        "members": [_member(item) for item in members],
    }


def _decode_deactivate(request: Request) -> dict[str, Any]:
    body = _read_json_object(request)
    return {"team_name": _string(body, "team_name")}


def _invalid_body() -> Response:
    return respond_error(HTTPStatus.BAD_REQUEST, ErrorCode.INVALID_REQUEST, "invalid request body")


def _service_failure(err: BaseException) -> Response:
    return respond_error(*map_service_error(err))


class TeamService(Protocol):
    """What the team handler needs from the application layer."""

    def create_team(self, req: dict[str, Any]) -> Any:
        """Create a team with its members and return its representation."""

    def get_team(self, team_name: str) -> Any:
        """Return a team with its members."""

    def deactivate_team_members(self, team_name: str) -> Any:
        """Deactivate every member of a team and return the team."""


class TeamHandler:
    """Serves the /team endpoints."""

    def __init__(self, service: TeamService) -> None:
        self._service = service

    def create_team(self, request: Request) -> Response:
        """POST /team/add"""
        try:
            req = _decode_create_team(request)
        except _InvalidBodyError:
            return _invalid_body()
        if errors := validate_create_team_request(req):
            return respond_validation_errors(errors)
        try:
            team = self._service.create_team(req)
        except Exception as err:
            return _service_failure(err)
        return respond_team(HTTPStatus.CREATED, team)

    def get_team(self, request: Request) -> Response:
        """GET /team/get?team_name="""
        team_name = request.args.get("team_name", "")
        if not team_name.strip():
            return respond_error(
                HTTPStatus.BAD_REQUEST,
                ErrorCode.INVALID_REQUEST,
                "team_name parameter is required",
            )
        try:
            team = self._service.get_team(team_name)
        except Exception as err:
            return _service_failure(err)
        return respond_success(HTTPStatus.OK, team)

    def deactivate_team_members(self, request: Request) -> Response:
        """POST /team/deactivateMembers"""
        try:
            req = _decode_deactivate(request)
        except _InvalidBodyError:
            return _invalid_body()
        if errors := validate_deactivate_team_members_request(req):
            return respond_validation_errors(errors)
        try:
            team = self._service.deactivate_team_members(req["team_name"])
        except Exception as err:
            return _service_failure(err)
        return respond_team(HTTPStatus.OK, team)

    def register_routes(self, routes: Any) -> None:
        """Add this handler's endpoints to a router."""
        routes.add("POST", "/team/add", self.create_team)
        routes.add("GET", "/team/get", self.get_team)
        routes.add("POST", "/team/deactivateMembers", self.deactivate_team_members)