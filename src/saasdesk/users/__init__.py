"""User accounts."""

from saasdesk.users.models import User, UserRole

__all__ = ["User", "UserRole"]
