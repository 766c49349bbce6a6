"""HTTP handlers for users."""

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
    respond_user,
    respond_user_reviews,
)
from prreviewer.request_validation import (
    respond_validation_errors,
    validate_set_user_active_request,
)


class _InvalidBodyError(Exception):
    """The request body is not the JSON object that was expected."""


def _decode_set_user_active(request: Request) -> dict[str, Any]:
    try:
        raw = request.get_data()
    except (OSError, ValueError, HTTPException) as exc:
        raise _InvalidBodyError() from exc
    text = raw.decode("utf-8", errors="replace").lstrip(" \t\r\n")
    try:
        body, _ = json.JSONDecoder().raw_decode(text)
    except ValueError as exc:
        raise _InvalidBodyError() from exc
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise _InvalidBodyError()
    user_id = body.get("user_id")
    is_active = body.get("is_active")
    if user_id is not None and not isinstance(user_id, str):
        raise _InvalidBodyError()
    if is_active is not None and not isinstance(is_active, bool):
        raise _InvalidBodyError()
    return {"user_id": user_id or "", "is_active": bool(is_active)}


def _service_failure(err: BaseException) -> Response:
    return respond_error(*map_service_error(err))


class UserService(Protocol):
    """What the user handler needs from the application layer."""

    def set_user_active(self, req: dict[str, Any]) -> Any:
        """Set a user's active flag and return the user."""

    def get_user_reviews(self, user_id: str) -> Any:
        """Return the pull requests the user reviews."""


class UserHandler:
    """Serves the /users endpoints."""

    def __init__(self, service: UserService) -> None:
        self._service = service

    def set_user_active(self, request: Request) -> Response:
        """POST /users/setIsActive"""
        try:
            req = _decode_set_user_active(request)
        except _InvalidBodyError:
            return respond_error(
                HTTPStatus.BAD_REQUEST, ErrorCode.INVALID_REQUEST, "invalid request body"
            )
        if errors := validate_set_user_active_request(req):
            return respond_validation_errors(errors)
        try:
            user = self._service.set_user_active(req)
        except Exception as err:
            return _service_failure(err)
        return respond_user(HTTPStatus.OK, user)

    def get_user_reviews(self, request: Request) -> Response:
        """GET /users/getReview?user_id="""
        user_id = request.args.get("user_id", "")
        if not user_id.strip():
            return respond_error(
                HTTPStatus.BAD_REQUEST,
                ErrorCode.INVALID_REQUEST,
                "user_id parameter is required",
            )
        try:
            prs = self._service.get_user_reviews(user_id)
        except Exception as err:
            return _service_failure(err)
        return respond_user_reviews(HTTPStatus.OK, user_id, prs)

    def register_routes(self, routes: Any) -> None:
        """Add this handler's endpoints to a router."""
        routes.add("POST", "/users/setIsActive", self.set_user_active)
        routes.add("GET", "/users/getReview", self.get_user_reviews)