"""Custom exceptions for flowport."""


class PortabilityError(Exception):
    """Base class for export/import errors."""

    pass


class NotFoundError(PortabilityError):
    """Raised when a requested record is not found."""

    pass


class ArchiveFormatError(PortabilityError):
    """Raised when an archive file is not parseable JSON."""

    pass


class ArchiveValidationError(PortabilityError):
    """Raised when an archive fails structural validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors) or "INVALID_FORMAT")


class UnsafePathError(PortabilityError, ValueError):
    """Raised when a file path escapes the allowed directories."""

    pass


class ImportStateError(PortabilityError):
    """Raised when an import session is driven out of order."""

    pass


class PersistenceError(PortabilityError):
    """Raised when a store write fails during an import."""

    def __init__(self, collection: str, message: str) -> None:
        self.collection = collection
        super().__init__(f"{collection}: {message}")
