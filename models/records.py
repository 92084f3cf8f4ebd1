"""
Typed views of stored rows.

Stores hand these out instead of ORM instances so nothing outside a store
touches a live session, and a row missing a required field fails loudly.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from core.exceptions import RecordDecodeError
from models.users import Role


def _require(row: Any, *fields: str) -> dict:
    values = {}
    for field in fields:
        value = getattr(row, field, None)
        if value is None:
            raise RecordDecodeError(f"{type(row).__name__} is missing '{field}'")
        values[field] = value
    return values


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class CredentialRecord:
    id: str
    email: str
    hashed_password: str
    role: Role

    @classmethod
    def from_row(cls, row) -> "CredentialRecord":
        values = _require(row, "id", "email", "hashed_password", "role")
        try:
            values["role"] = Role(values["role"])
        except ValueError as exc:
            raise RecordDecodeError(f"Unknown role '{values['role']}'") from exc
        return cls(**values)


@dataclass(frozen=True)
class RefreshTokenRecord:
    user_id: str
    token_hash: str
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "RefreshTokenRecord":
        values = _require(row, "user_id", "token_hash", "created_at")
        values["created_at"] = as_utc(values["created_at"])
        return cls(**values)


@dataclass(frozen=True)
class RevocationRecord:
    token: str
    user_id: str
    expires_at: datetime

    @classmethod
    def from_row(cls, row) -> "RevocationRecord":
        values = _require(row, "token", "user_id", "expires_at")
        values["expires_at"] = as_utc(values["expires_at"])
        return cls(**values)
