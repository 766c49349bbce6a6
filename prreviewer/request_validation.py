"""Checks of incoming request bodies before they reach the services."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from werkzeug.wrappers import Response

from prreviewer.presenter import ErrorCode, respond_error


@dataclass(frozen=True)
class ValidationError:
    """A problem with one field of a request."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"validation error: {self.field} - {self.message}"


def _is_empty(req: Mapping[str, Any], key: str) -> bool:
    value = req.get(key)
    return value is None or value == ""


def _required(req: Mapping[str, Any], *keys: str) -> list[ValidationError]:
    return [ValidationError(key, f"{key} is required") for key in keys if _is_empty(req, key)]


def validate_create_team_request(req: Mapping[str, Any]) -> list[ValidationError]:
    """Check a team creation request: a name and a non-empty list of members."""
    errors = _required(req, "team_name")
    members: Sequence[Mapping[str, Any]] = req.get("members") or []
    if not members:
        errors.append(ValidationError("members", "members array is required and cannot be empty"))
    for index, member in enumerate(members):
        prefix = f"members[{index}]"
        errors.extend(
            ValidationError(f"{prefix}.{key}", f"{key} is required")
            for key in ("user_id", "username")
            if _is_empty(member, key)
        )
    return errors


def validate_set_user_active_request(req: Mapping[str, Any]) -> list[ValidationError]:
    """Check a request that sets a user's active flag."""
    return _required(req, "user_id")


def validate_create_pr_request(req: Mapping[str, Any]) -> list[ValidationError]:
    """Check a pull request creation request."""
    return _required(req, "pull_request_id", "pull_request_name", "author_id")


def validate_merge_pr_request(req: Mapping[str, Any]) -> list[ValidationError]:
    """Check a merge request."""
    return _required(req, "pull_request_id")


def validate_reassign_reviewer_request(req: Mapping[str, Any]) -> list[ValidationError]:
    """Check a reviewer reassignment request."""
    return _required(req, "pull_request_id", "old_user_id")


def validate_deactivate_team_members_request(req: Mapping[str, Any]) -> list[ValidationError]:
    """Check a request that deactivates all members of a team."""
    name = req.get("team_name")
    if name is None or str(name).strip() == "":
        return [ValidationError("team_name", "team_name is required")]
    return []


def respond_validation_errors(errors: Sequence[ValidationError]) -> Response | None:
    """Build a 400 response listing the errors; None when there are none."""
    if not errors:
        return None
    message = "; ".join(f"{error.field}: {error.message}" for error in errors)
    return respond_error(HTTPStatus.BAD_REQUEST, ErrorCode.INVALID_REQUEST, message)