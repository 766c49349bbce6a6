"""JSON responses in the shape of the public API."""

from __future__ import annotations

import dataclasses
import enum
import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from http import HTTPStatus
from typing import Any

from werkzeug.wrappers import Response

from prreviewer.service_errors import (
    NoActiveCandidatesError,
    PullRequestExistsError,
    PullRequestMergedError,
    PullRequestNotFoundError,
    ReviewerNotOnPullRequestError,
    TeamAlreadyExistsError,
    TeamNotFoundError,
    UserNotFoundError,
)


class ErrorCode(str, enum.Enum):
    """Error codes the API reports."""

    TEAM_EXISTS = "TEAM_EXISTS"
    PR_EXISTS = "PR_EXISTS"
    PR_MERGED = "PR_MERGED"
    NOT_ASSIGNED = "NOT_ASSIGNED"
    NO_CANDIDATE = "NO_CANDIDATE"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_ERROR_MAP: tuple[tuple[type[BaseException], int, ErrorCode, str], ...] = (
    (TeamAlreadyExistsError, HTTPStatus.BAD_REQUEST, ErrorCode.TEAM_EXISTS, "team_name already exists"),
    (TeamNotFoundError, HTTPStatus.NOT_FOUND, ErrorCode.NOT_FOUND, "team not found"),
    (UserNotFoundError, HTTPStatus.NOT_FOUND, ErrorCode.NOT_FOUND, "user not found"),
    (PullRequestExistsError, HTTPStatus.CONFLICT, ErrorCode.PR_EXISTS, "PR id already exists"),
    (PullRequestNotFoundError, HTTPStatus.NOT_FOUND, ErrorCode.NOT_FOUND, "pull request not found"),
    (PullRequestMergedError, HTTPStatus.CONFLICT, ErrorCode.PR_MERGED, "cannot reassign on merged PR"),
    (
        ReviewerNotOnPullRequestError,
        HTTPStatus.CONFLICT,
        ErrorCode.NOT_ASSIGNED,
        "reviewer is not assigned to this PR",
    ),
    (
        NoActiveCandidatesError,
        HTTPStatus.CONFLICT,
        ErrorCode.NO_CANDIDATE,
        "no active replacement candidate in team",
    ),
)


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset, tuple)) or (
        isinstance(value, Sequence) and not isinstance(value, (str, bytes))
    ):
        return list(value)
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def respond_json(status_code: int, data: Any) -> Response:
    """Build a JSON response with the given status."""
    body = json.dumps(data, default=_json_default, ensure_ascii=False) + "\n"
    response = Response(body.encode("utf-8"), status=int(status_code), content_type="application/json")
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


def respond_error(status_code: int, code: ErrorCode | str, message: str) -> Response:
    """Build an error response of the form {"error": {"code", "message"}}."""
    code_text = code.value if isinstance(code, ErrorCode) else str(code)
    return respond_json(status_code, {"error": {"code": code_text, "message": message}})


def respond_success(status_code: int, data: Any) -> Response:
    """Build a successful JSON response carrying data."""
    return respond_json(status_code, data)


def _error_chain(err: BaseException | None):
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def map_service_error(err: BaseException | None) -> tuple[int, ErrorCode, str]:
    """Translate a service error into a status code, an error code and a message."""
    for cls, status, code, message in _ERROR_MAP:
        if any(isinstance(link, cls) for link in _error_chain(err)):
            return int(status), code, message
    return int(HTTPStatus.INTERNAL_SERVER_ERROR), ErrorCode.INTERNAL_ERROR, "internal server error"


def _internal(message: str) -> Response:
    return respond_error(HTTPStatus.INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, message)


def respond_pull_request(status_code: int, pr: Any) -> Response:
    """Respond with {"pr": pr}."""
    if pr is None:
        return _internal("pull request data is nil")
    return respond_json(status_code, {"pr": pr})


def respond_pull_request_reassign(status_code: int, pr: Any, replaced_by: str) -> Response:
    """Respond with the pull request and the id of the new reviewer."""
    if pr is None:
        return _internal("pull request data is nil")
    if not replaced_by:
        return _internal("replaced_by is empty")
    return respond_json(status_code, {"pr": pr, "replaced_by": replaced_by})


def respond_statistics(status_code: int, stats: Any) -> Response:
    """Respond with the statistics object as is."""
    if stats is None:
        return _internal("statistics data is nil")
    return respond_json(status_code, stats)


def respond_team(status_code: int, team: Any) -> Response:
    """Respond with {"team": team}."""
    if team is None:
        return _internal("team data is nil")
    return respond_json(status_code, {"team": team})


def respond_user(status_code: int, user: Any) -> Response:
    """Respond with {"user": user}."""
    if user is None:
        return _internal("user data is nil")
    return respond_json(status_code, {"user": user})


def respond_user_reviews(status_code: int, user_id: str, prs: Any) -> Response:
    """Respond with a user's id and the pull requests they review."""
    return respond_json(
        status_code,
        {"user_id": user_id, "pull_requests": [] if prs is None else list(prs)},
    )