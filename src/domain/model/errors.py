"""Domain-level exceptions.

Services and the vocabulary store raise these errors to express business rule
violations. Callers (CLI, UI collaborators) catch them and decide how to
surface the failure.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class VocabularyImportError(DomainError):
    """A whole import payload could not be parsed."""

    def __init__(self, message: str, format: str | None = None):
        self.format = format
        super().__init__(message)


class StorageError(DomainError):
    """Persisted study data could not be read or written."""
