import time
from datetime import datetime, timezone

import pytest

from prreviewer.errors import (
    InvalidIDError,
    InvalidTeamNameError,
    InvalidUsernameError,
    NoChangeError,
)
from prreviewer.user import User


@pytest.mark.parametrize(
    "user_id, username, team_name",
    [
        ("user-123", "John Doe", "backend-team"),
        ("user_456", "Jane_Smith", "frontend_team"),
        ("u1", "Иван Иванов", "payments"),
        ("  user-789  ", "  Bob Johnson  ", "  devops  "),
    ],
)
def test_create_valid(user_id, username, team_name):
    user = User.create(user_id, username, team_name)
    assert user.id == user_id.strip()
    assert user.username == username.strip()
    assert user.team_name == team_name.strip()
    assert user.is_active is True
    assert user.created_at.tzinfo is not None
    assert user.created_at == user.updated_at


@pytest.mark.parametrize(
    "user_id, username, team_name, error",
    [
        ("", "John", "team1", InvalidIDError),
        ("u1", "", "team1", InvalidUsernameError),
        ("u1", "John", "", InvalidTeamNameError),
        ("a" * 256, "John", "team1", InvalidIDError),
        ("u1", "a" * 101, "team1", InvalidUsernameError),
        ("user@123", "John", "team1", InvalidIDError),
        ("u1", "John", "team@name", InvalidTeamNameError),
    ],
)
def test_create_invalid(user_id, username, team_name, error):
    with pytest.raises(error):
        User.create(user_id, username, team_name)


def test_from_repository():
    created_at = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    updated_at = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)
    user = User("user-1", "John Doe", "backend", False, created_at, updated_at)
    assert user.id == "user-1"
    assert user.username == "John Doe"
    assert user.team_name == "backend"
    assert user.is_active is False
    assert user.created_at == created_at
    assert user.updated_at == updated_at


def test_deactivate():
    user = User.create("u1", "John", "team1")
    assert user.deactivate() is True
    assert user.is_active is False

    old_updated_at = user.updated_at
    time.sleep(0.01)
    assert user.deactivate() is False
    assert user.is_active is False
    assert user.updated_at == old_updated_at


def test_activate():
    user = User.create("u1", "John", "team1")
    user.deactivate()
    assert user.activate() is True
    assert user.is_active is True

    old_updated_at = user.updated_at
    time.sleep(0.01)
    assert user.activate() is False
    assert user.is_active is True
    assert user.updated_at == old_updated_at


def test_change_team():
    user = User.create("u1", "John", "team1")
    old_updated_at = user.updated_at
    time.sleep(0.01)

    user.change_team("team2")
    assert user.team_name == "team2"
    assert user.updated_at > old_updated_at

    with pytest.raises(NoChangeError):
        user.change_team("team2")
    with pytest.raises(InvalidTeamNameError):
        user.change_team("team@invalid")
    with pytest.raises(InvalidTeamNameError):
        user.change_team("")

    user.change_team("  team3  ")
    assert user.team_name == "team3"


def test_change_username():
    user = User.create("u1", "John", "team1")
    old_updated_at = user.updated_at
    time.sleep(0.01)

    user.change_username("Jane Doe")
    assert user.username == "Jane Doe"
    assert user.updated_at > old_updated_at

    with pytest.raises(NoChangeError):
        user.change_username("Jane Doe")
    with pytest.raises(InvalidUsernameError):
        user.change_username("")
    with pytest.raises(InvalidUsernameError):
        user.change_username("a" * 101)

    user.change_username("  Bob Smith  ")
    assert user.username == "Bob Smith"


def test_equality():
    user1 = User.create("u1", "John", "team1")
    user2 = User.create("u1", "Jane", "team2")
    user3 = User.create("u2", "John", "team1")
    assert user1 == user2
    assert not (user1 == user3)
    assert not (user1 == None)  # noqa: E711
    assert user1 == user1
    assert hash(user1) == hash(user2)


def test_fields():
    created_at = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    updated_at = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)
    user = User(
        id="user-123",
        username="John Doe",
        team_name="backend-team",
        is_active=True,
        created_at=created_at,
        updated_at=updated_at,
    )
    assert user.id == "user-123"
    assert user.username == "John Doe"
    assert user.team_name == "backend-team"
    assert user.is_active is True
    assert user.created_at == created_at
    assert user.updated_at == updated_at


def test_lifecycle():
    user = User.create("u1", "John Doe", "backend")
    assert user.is_active is True
    assert user.deactivate() is True
    user.change_team("frontend")
    user.change_username("Jane Doe")
    assert user.activate() is True

    assert user.id == "u1"
    assert user.username == "Jane Doe"
    assert user.team_name == "frontend"
    assert user.is_active is True