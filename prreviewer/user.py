"""The user entity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from prreviewer.errors import NoChangeError
from prreviewer.validators import normalize_id, normalize_team_name, normalize_username


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class User:
    """A team member who may author or review pull requests.

    The constructor restores a stored user as is; use :meth:`create` for a new one.
    """

    id: str
    username: str
    team_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, user_id: str, username: str, team_name: str) -> User:
        """Build a new, active user from validated, trimmed fields."""
        normalized_id = normalize_id(user_id)
        normalized_username = normalize_username(username)
        normalized_team = normalize_team_name(team_name)
        now = _now()
        return cls(
            id=normalized_id,
            username=normalized_username,
            team_name=normalized_team,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def deactivate(self) -> bool:
        """Mark the user inactive; return False if already inactive."""
        if not self.is_active:
            return False
        self.is_active = False
        self.updated_at = _now()
        return True

    def activate(self) -> bool:
        """Mark the user active; return False if already active."""
        if self.is_active:
            return False
        self.is_active = True
        self.updated_at = _now()
        return True

    def change_team(self, new_team_name: str) -> None:
        """Move the user to another team."""
        normalized = normalize_team_name(new_team_name)
        if normalized == self.team_name:
            raise NoChangeError()
        self.team_name = normalized
        self.updated_at = _now()

    def change_username(self, new_username: str) -> None:
        """Rename the user."""
        normalized = normalize_username(new_username)
        if normalized == self.username:
            raise NoChangeError()
        self.username = normalized
        self.updated_at = _now()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)