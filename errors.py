"""Error types raised by the product store and mapped to HTTP responses in main.py."""

from typing import Iterable, List, Optional

from fastapi import status


class InventoryError(Exception):
    """Base class for every error surfaced to API clients."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(InventoryError):
    """The request is missing required data or is malformed."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Missing required fields", fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields: List[str] = list(fields)


class NotFound(InventoryError):
    """No product row matches the requested id."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, product_id: int):
        super().__init__("Product not found")
        self.product_id = product_id


class StoreError(InventoryError):
    """Any failure reported by the database driver."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code

    @classmethod
    def from_driver(cls, exc: Exception) -> "StoreError":
        # pymysql errors carry (errno, message) in args
        args = getattr(exc, "args", ())
        if len(args) >= 2 and isinstance(args[0], int):
            return cls(str(args[1]), code=args[0])
        return cls(str(exc) or exc.__class__.__name__)
