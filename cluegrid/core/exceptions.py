"""Custom exception hierarchy for the puzzle engine."""


class CluegridError(Exception):
    """Base exception for engine failures."""


class GeometryError(CluegridError):
    """Raised when an authored puzzle fails intersection or bounds checks."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid puzzle geometry")


class PuzzleLoadError(CluegridError):
    """Raised when a puzzle cannot be fetched or parsed."""


class PuzzleLockedError(CluegridError):
    """Raised when editing crossers of a published puzzle."""


class StorageError(CluegridError):
    """Raised when a storage backend cannot read or write a record."""


class StorageQuotaError(StorageError):
    """Raised when a write exceeds the backend's capacity."""


class WordListLoadError(CluegridError):
    """Raised when the guess word list cannot be loaded."""
