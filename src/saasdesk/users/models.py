"""User account models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field

from saasdesk.core.pydantic import RecordModel


class UserRole(str, Enum):
    """Console roles."""

    ADMIN = "ADMIN"
    USER = "USER"


class User(RecordModel):
    """A console administrator or subscriber."""

    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    is_verified: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
