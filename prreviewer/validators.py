"""Validation and normalisation of identifiers and names."""

from __future__ import annotations

import re
import unicodedata

from prreviewer.errors import (
    InvalidIDError,
    InvalidPRNameError,
    InvalidTeamNameError,
    InvalidUsernameError,
)

MIN_ID_LENGTH = 1
MAX_ID_LENGTH = 255

MIN_USERNAME_LENGTH = 1
MAX_USERNAME_LENGTH = 100

MIN_TEAM_NAME_LENGTH = 1
MAX_TEAM_NAME_LENGTH = 100

MIN_PR_NAME_LENGTH = 1
MAX_PR_NAME_LENGTH = 200

_ID_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")

# Characters allowed in free-text names besides letters and digits.
_NAME_EXTRA_CHARS = frozenset("\t\n\f\r _-")

# Leading and trailing characters removed before validation.
_WHITESPACE = (
    "\t\n\v\f\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


def _byte_length(value: str) -> int:
    return len(value.encode("utf-8"))


def _is_name_text(value: str) -> bool:
    return bool(value) and all(
        char in _NAME_EXTRA_CHARS or unicodedata.category(char)[0] in "LN"
        for char in value
    )


def normalize_id(value: str) -> str:
    """Trim an identifier and check its length and characters."""
    value = value.strip(_WHITESPACE)
    if not MIN_ID_LENGTH <= _byte_length(value) <= MAX_ID_LENGTH:
        raise InvalidIDError(
            f"id length must be between {MIN_ID_LENGTH} and {MAX_ID_LENGTH} characters"
        )
    if not _ID_PATTERN.fullmatch(value):
        raise InvalidIDError("id must contain only letters, numbers, hyphens, and underscores")
    return value


def normalize_username(value: str) -> str:
    """Trim a user name and check its length and characters."""
    value = value.strip(_WHITESPACE)
    if not value:
        raise InvalidUsernameError("username cannot be empty")
    if not MIN_USERNAME_LENGTH <= _byte_length(value) <= MAX_USERNAME_LENGTH:
        raise InvalidUsernameError(
            f"username length must be between {MIN_USERNAME_LENGTH} "
            f"and {MAX_USERNAME_LENGTH} characters"
        )
    if not _is_name_text(value):
        raise InvalidUsernameError("username contains invalid characters")
    return value


def normalize_team_name(value: str) -> str:
    """Trim a team name and check its length and characters."""
    value = value.strip(_WHITESPACE)
    if not value:
        raise InvalidTeamNameError("team_name cannot be empty")
    if not MIN_TEAM_NAME_LENGTH <= _byte_length(value) <= MAX_TEAM_NAME_LENGTH:
        raise InvalidTeamNameError(
            f"team_name length must be between {MIN_TEAM_NAME_LENGTH} "
            f"and {MAX_TEAM_NAME_LENGTH} characters"
        )
    if not _ID_PATTERN.fullmatch(value):
        raise InvalidTeamNameError(
            "team_name must contain only letters, numbers, hyphens, and underscores"
        )
    return value


def normalize_pr_name(value: str) -> str:
    """Trim a pull request name and check its length and characters."""
    value = value.strip(_WHITESPACE)
    if not value:
        raise InvalidPRNameError("pull_request_name cannot be empty")
    if not MIN_PR_NAME_LENGTH <= _byte_length(value) <= MAX_PR_NAME_LENGTH:
        raise InvalidPRNameError(
            f"pull_request_name length must be between {MIN_PR_NAME_LENGTH} "
            f"and {MAX_PR_NAME_LENGTH} characters"
        )
    if not _is_name_text(value):
        raise InvalidPRNameError("pull_request_name contains invalid characters")
    return value