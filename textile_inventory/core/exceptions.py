from typing import Optional


class InventoryError(Exception):
    """Base exception for raw material inventory failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """
    Raised when a record is missing a required field, carries a value outside
    its enumeration, or an operation would drive stock negative.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(InventoryError):
    """Raised when an operation targets an unknown material id."""


class PersistenceError(InventoryError):
    """Raised when the storage layer fails. Never retried automatically."""


class AssetError(InventoryError):
    """Raised when an image asset cannot be stored or removed."""
