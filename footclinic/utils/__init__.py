"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    FootClinicError,
    RecordValidationError,
    RecordNotFoundError,
    PermissionDeniedError,
    StorageError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "FootClinicError",
    "RecordValidationError",
    "RecordNotFoundError",
    "PermissionDeniedError",
    "StorageError",
]
