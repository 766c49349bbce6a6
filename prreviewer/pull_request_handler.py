"""HTTP handlers for pull requests."""

from __future__ import annotations

import json
from collections.abc import Iterable
from http import HTTPStatus
from typing import Any, Protocol

from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Request, Response

from prreviewer.presenter import (
    ErrorCode,
    map_service_error,
    respond_error,
    respond_pull_request,
    respond_pull_request_reassign,
)
from prreviewer.request_validation import (
    respond_validation_errors,
    validate_create_pr_request,
    validate_merge_pr_request,
    validate_reassign_reviewer_request,
)

_CREATE_FIELDS = ("pull_request_id", "pull_request_name", "author_id")
_MERGE_FIELDS = ("pull_request_id",)
_REASSIGN_FIELDS = ("pull_request_id", "old_user_id")


class _InvalidBodyError(Exception):
    pass


def _decode_json_object(request: Request, fields: Iterable[str]) -> dict[str, str]:
    """Read the first JSON value of the body as an object of string fields."""
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
        value = {}
    if not isinstance(value, dict):
        raise _InvalidBodyError()
    decoded: dict[str, str] = {}
    for name in fields:
        item = value.get(name)
        if item is None:
            decoded[name] = ""
        elif isinstance(item, str):
            decoded[name] = item
        else:
            raise _InvalidBodyError()
    return decoded


def _invalid_body() -> Response:
    return respond_error(HTTPStatus.BAD_REQUEST, ErrorCode.INVALID_REQUEST, "invalid request body")


def _service_failure(err: BaseException) -> Response:
    return respond_error(*map_service_error(err))


class PullRequestService(Protocol):
    """What the pull request handler needs from the application layer."""

    def create_pr(self, req: dict[str, str]) -> Any:
        """Create a pull request and return its representation."""

    def merge_pr(self, pr_id: str) -> Any:
        """Merge a pull request and return its representation."""

    def reassign_reviewer(self, req: dict[str, str]) -> tuple[Any, str]:
        """Replace a reviewer; return the pull request and the new reviewer's id."""


class PullRequestHandler:
    """Serves the /pullRequest endpoints."""

    def __init__(self, service: PullRequestService) -> None:
        self._service = service

    def create_pr(self, request: Request) -> Response:
        """POST /pullRequest/create"""
        try:
            req = _decode_json_object(request, _CREATE_FIELDS)
        except _InvalidBodyError:
            return _invalid_body()
        if errors := validate_create_pr_request(req):
            return respond_validation_errors(errors)
        try:
            pr = self._service.create_pr(req)
        except Exception as err:
            return _service_failure(err)
        return respond_pull_request(HTTPStatus.CREATED, pr)

    def merge_pr(self, request: Request) -> Response:
        """POST /pullRequest/merge"""
        try:
            req = _decode_json_object(request, _MERGE_FIELDS)
        except _InvalidBodyError:
            return _invalid_body()
        if errors := validate_merge_pr_request(req):
            return respond_validation_errors(errors)
        try:
            pr = self._service.merge_pr(req["pull_request_id"])
        except Exception as err:
            return _service_failure(err)
        return respond_pull_request(HTTPStatus.OK, pr)

    def reassign_reviewer(self, request: Request) -> Response:
        """POST /pullRequest/reassign"""
        try:
            req = _decode_json_object(request, _REASSIGN_FIELDS)
        except _InvalidBodyError:
            return _invalid_body()
        if errors := validate_reassign_reviewer_request(req):
            return respond_validation_errors(errors)
        try:
            pr, replaced_by = self._service.reassign_reviewer(req)
        except Exception as err:
            return _service_failure(err)
        return respond_pull_request_reassign(HTTPStatus.OK, pr, replaced_by)

    def register_routes(self, routes: Any) -> None:
        """Add this handler's endpoints to a router."""
        routes.add("POST", "/pullRequest/create", self.create_pr)
        routes.add("POST", "/pullRequest/merge", self.merge_pr)
        routes.add("POST", "/pullRequest/reassign", self.reassign_reviewer)