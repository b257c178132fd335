"""
Error taxonomy for the catalog core.

Every error carries a stable machine-readable ``kind`` and a descriptive
message so the request layer (REST API, CLI) can map it to a transport
response without interpreting it.
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""

    kind = "catalog_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"error": self.kind, "message": self.message}


class FetchError(CatalogError):
    """Feed source unreachable, timed out, or unparsable."""

    kind = "fetch_error"


class ValidationError(CatalogError):
    """Caller-supplied input violates a contract."""

    kind = "validation_error"


class NotFoundError(CatalogError):
    """Referenced feed or episode does not exist in storage."""

    kind = "not_found"


class ConflictError(CatalogError):
    """A feed with the same URL is already stored."""

    kind = "conflict"

    def __init__(self, message: str, existing: Optional[Any] = None) -> None:
        super().__init__(message)
        self.existing = existing


class StorageError(CatalogError):
    """Storage backend failed to read or write a record."""

    kind = "storage_error"


__all__ = [
    "CatalogError",
    "FetchError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
]
