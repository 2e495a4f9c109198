"""Domain exceptions raised by services and rendered by the API layer."""


class EstatesError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EstatesError):
    """Missing or malformed input. Raised before any record is written."""


class NotFoundError(EstatesError):
    """Referenced record does not exist or does not belong to the caller."""


class DependencyUnavailableError(EstatesError):
    """An outbound dependency (email transport, admin lookup) failed.

    Never surfaced to the caller of the triggering operation.
    """


class PersistenceError(EstatesError):
    """The data store rejected a write."""
