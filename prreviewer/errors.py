"""Errors raised by the domain model."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every domain rule violation."""

    message = "domain error"

    def __init__(self, detail: str | None = None, *, prefix: str | None = None) -> None:
        text = self.message if detail is None else f"{self.message}: {detail}"
        if prefix:
            text = f"{prefix}: {text}"
        super().__init__(text)
        self.detail = detail
        self.prefix = prefix


class InvalidIDError(DomainError):
    """An identifier is empty, too long or holds forbidden characters."""

    message = "invalid id"


class InvalidUsernameError(DomainError):
    """A user name failed validation."""

    message = "invalid username"


class InvalidTeamNameError(DomainError):
    """A team name failed validation."""

    message = "invalid team name"


class InvalidPRNameError(DomainError):
    """A pull request name failed validation."""

    message = "invalid pull request name"


class NoChangeError(DomainError):
    """A value was set to what it already was."""

    message = "no change detected"


class PRMergedError(DomainError):
    """A merged pull request cannot be changed."""

    message = "pull request already merged"


class AuthorCannotReviewError(DomainError):
    """The author of a pull request cannot review it."""

    message = "author cannot review their own PR"


class ReviewerAlreadyAssignedError(DomainError):
    """The reviewer is already assigned to the pull request."""

    message = "reviewer already assigned"


class ReviewerNotAssignedError(DomainError):
    """The reviewer is not assigned to the pull request."""

    message = "reviewer not assigned"


class TooManyReviewersError(DomainError):
    """The pull request already has the maximum number of reviewers."""

    message = "too many reviewers"