"""Domain-level exceptions shared across SaaSDesk modules."""


class SaaSDeskError(Exception):
    """Base exception for SaaSDesk."""


class RepositoryError(SaaSDeskError):
    """Base repository error."""


class EntityNotFoundError(RepositoryError):
    """Entity not found in repository."""


class DuplicateEntityError(RepositoryError):
    """Duplicate entity in repository."""
