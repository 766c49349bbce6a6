"""The pull request entity."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime, timezone

from prreviewer.errors import (
    AuthorCannotReviewError,
    InvalidIDError,
    PRMergedError,
    ReviewerAlreadyAssignedError,
    ReviewerNotAssignedError,
    TooManyReviewersError,
)
from prreviewer.validators import normalize_id, normalize_pr_name

MAX_REVIEWERS_COUNT = 2


class PRStatus(str, enum.Enum):
    """Lifecycle state of a pull request."""

    OPEN = "OPEN"
    MERGED = "MERGED"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_id_for(field: str, value: str) -> str:
    try:
        return normalize_id(value)
    except InvalidIDError as exc:
        raise InvalidIDError(exc.detail, prefix=f"invalid {field}") from exc


class PullRequest:
    """A pull request with its author and up to two reviewers.

    The constructor restores a stored pull request as is; use :meth:`create`
    for a new one.
    """

    def __init__(
        self,
        id: str,
        name: str,
        author_id: str,
        status: PRStatus | str,
        assigned_reviewers: Iterable[str],
        created_at: datetime,
        merged_at: datetime | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.author_id = author_id
        self.status = PRStatus(status)
        self._reviewers = list(assigned_reviewers)
        self.created_at = created_at
        self.merged_at = merged_at

    @classmethod
    def create(cls, pr_id: str, name: str, author_id: str) -> PullRequest:
        """Build a new, open pull request from validated, trimmed fields."""
        normalized_id = normalize_id(pr_id)
        normalized_name = normalize_pr_name(name)
        normalized_author = _normalize_id_for("author_id", author_id)
        return cls(
            id=normalized_id,
            name=normalized_name,
            author_id=normalized_author,
            status=PRStatus.OPEN,
            assigned_reviewers=[],
            created_at=_now(),
            merged_at=None,
        )

    @property
    def assigned_reviewers(self) -> list[str]:
        """A copy of the assigned reviewer ids, in assignment order."""
        return list(self._reviewers)

    @property
    def is_open(self) -> bool:
        """True while the pull request is open."""
        return self.status is PRStatus.OPEN

    @property
    def is_merged(self) -> bool:
        """True once the pull request has been merged."""
        return self.status is PRStatus.MERGED

    def _ensure_open(self) -> None:
        if self.is_merged:
            raise PRMergedError()

    def add_reviewer(self, reviewer_id: str) -> None:
        """Assign a reviewer to the pull request."""
        self._ensure_open()
        normalized = _normalize_id_for("reviewer_id", reviewer_id)
        if normalized == self.author_id:
            raise AuthorCannotReviewError()
        if normalized in self._reviewers:
            raise ReviewerAlreadyAssignedError()
        if len(self._reviewers) >= MAX_REVIEWERS_COUNT:
            raise TooManyReviewersError()
        self._reviewers.append(normalized)

    def remove_reviewer(self, reviewer_id: str) -> None:
        """Unassign a reviewer from the pull request."""
        self._ensure_open()
        normalized = _normalize_id_for("reviewer_id", reviewer_id)
        if normalized not in self._reviewers:
            raise ReviewerNotAssignedError()
        self._reviewers = [r for r in self._reviewers if r != normalized]

    def replace_reviewer(self, old_reviewer_id: str, new_reviewer_id: str) -> None:
        """Put a new reviewer in the place of an assigned one."""
        self._ensure_open()
        old_id = _normalize_id_for("old_reviewer_id", old_reviewer_id)
        new_id = _normalize_id_for("new_reviewer_id", new_reviewer_id)
        if new_id == self.author_id:
            raise AuthorCannotReviewError()
        if new_id in self._reviewers:
            raise ReviewerAlreadyAssignedError()
        try:
            position = self._reviewers.index(old_id)
        except ValueError:
            raise ReviewerNotAssignedError() from None
        self._reviewers[position] = new_id

    def merge(self) -> bool:
        """Mark the pull request merged; return False if it already was."""
        if self.is_merged:
            return False
        self.status = PRStatus.MERGED
        self.merged_at = _now()
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PullRequest):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return (
            f"PullRequest(id={self.id!r}, name={self.name!r}, "
            f"author_id={self.author_id!r}, status={self.status.value!r}, "
            f"assigned_reviewers={self._reviewers!r})"
        )