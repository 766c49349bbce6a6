"""Interfaces the application layer depends on: storage, logging, transactions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar

from prreviewer.pull_request import PullRequest
from prreviewer.team import Team
from prreviewer.user import User

T = TypeVar("T")


class NotFoundError(Exception):
    """The requested entity does not exist in storage."""

    def __init__(self, message: str = "entity not found") -> None:
        super().__init__(message)


class PullRequestRepository(Protocol):
    """Storage of pull requests."""

    def create(self, pr: PullRequest) -> None:
        """Store a new pull request."""

    def find_by_id(self, pr_id: str) -> PullRequest:
        """Return the pull request with this id or raise NotFoundError."""

    def find_by_id_for_update(self, pr_id: str) -> PullRequest:
        """Return the pull request with this id, locked for the current transaction."""

    def find_by_reviewer_id(self, reviewer_id: str) -> list[PullRequest]:
        """Return the pull requests this user reviews."""

    def find_by_author_id(self, author_id: str) -> list[PullRequest]:
        """Return the pull requests this user authored."""

    def update(self, pr: PullRequest) -> None:
        """Store the changed state of a pull request."""

    def replace_reviewer(self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str) -> None:
        """Swap one reviewer of a pull request for another."""

    def merge_pr(self, pr_id: str) -> None:
        """Mark a pull request merged."""

    def delete(self, pr_id: str) -> None:
        """Remove a pull request."""

    def exists(self, pr_id: str) -> bool:
        """Tell whether a pull request with this id exists."""

    def count_active_reviews_by_user_ids(self, user_ids: list[str]) -> dict[str, int]:
        """Count open pull requests each user reviews."""

    def get_stats(self) -> tuple[int, int, int]:
        """Return the total, open and merged counts of pull requests."""

    def count_reviews_by_user_ids(self, user_ids: list[str]) -> dict[str, int]:
        """Count all pull requests each user reviews."""


class TeamRepository(Protocol):
    """Storage of teams."""

    def create(self, team: Team) -> None:
        """Store a new team."""

    def find_by_name(self, name: str) -> Team:
        """Return the team with this name or raise NotFoundError."""

    def update(self, team: Team) -> None:
        """Store the changed state of a team."""

    def delete(self, name: str) -> None:
        """Remove a team."""

    def exists(self, name: str) -> bool:
        """Tell whether a team with this name exists."""


class UserRepository(Protocol):
    """Storage of users."""

    def create(self, user: User) -> None:
        """Store a new user."""

    def find_by_id(self, user_id: str) -> User:
        """Return the user with this id or raise NotFoundError."""

    def find_by_team_name(self, team_name: str) -> list[User]:
        """Return every member of a team."""

    def find_active_by_team_name(self, team_name: str) -> list[User]:
        """Return the active members of a team."""

    def update(self, user: User) -> None:
        """Store the changed state of a user."""

    def batch_deactivate_by_team_name(self, team_name: str) -> None:
        """Deactivate every member of a team."""

    def delete(self, user_id: str) -> None:
        """Remove a user."""

    def exists(self, user_id: str) -> bool:
        """Tell whether a user with this id exists."""


class Logger(Protocol):
    """Structured logger taking key-value fields."""

    def debug(self, msg: str, **kwargs: object) -> None:
        """Log at debug level."""

    def info(self, msg: str, **kwargs: object) -> None:
        """Log at info level."""

    def warning(self, msg: str, **kwargs: object) -> None:
        """Log at warning level."""

    def error(self, msg: str, **kwargs: object) -> None:
        """Log at error level."""

    def bind(self, **kwargs: object) -> Logger:
        """Return a logger that adds these fields to every record."""


class TransactionManager(Protocol):
    """Runs work inside one storage transaction."""

    def run(self, fn: Callable[[], T]) -> T:
        """Call fn in a transaction, committing on return and rolling back on error."""