"""The team entity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from prreviewer.validators import normalize_team_name


@dataclass(eq=False)
class Team:
    """A team of developers, identified by its name.

    The constructor restores a stored team as is; use :meth:`create` for a new one.
    """

    name: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, name: str) -> Team:
        """Build a new team from a validated, trimmed name."""
        normalized = normalize_team_name(name)
        now = datetime.now(timezone.utc)
        return cls(name=normalized, created_at=now, updated_at=now)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Team):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)