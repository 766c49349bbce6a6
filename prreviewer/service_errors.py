"""Errors raised by the application services and mapped to HTTP responses."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures reported by the application services."""

    message = "service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.message if message is None else message)


class TeamAlreadyExistsError(ServiceError):
    """A team with this name already exists."""

    message = "team already exists"


class TeamNotFoundError(ServiceError):
    """No team has this name."""

    message = "team not found"


class UserNotFoundError(ServiceError):
    """No user has this id."""

    message = "user not found"


class PullRequestExistsError(ServiceError):
    """A pull request with this id already exists."""

    message = "pull request already exists"


class PullRequestNotFoundError(ServiceError):
    """No pull request has this id."""

    message = "pull request not found"


class PullRequestMergedError(ServiceError):
    """The pull request is merged and can no longer be changed."""

    message = "pull request already merged"


class ReviewerNotOnPullRequestError(ServiceError):
    """The user is not a reviewer of the pull request."""

    message = "reviewer not assigned to pull request"


class NoActiveCandidatesError(ServiceError):
    """No active team member is available to review."""

    message = "no active candidates"