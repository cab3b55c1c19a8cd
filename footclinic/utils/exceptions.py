"""
Custom Exception Hierarchy

Provides specific exception types for the clinic service with structured
error information that the API layer serialises as-is.
"""
from typing import Optional, Dict, Any


class FootClinicError(Exception):
    """Base exception for all clinic service errors."""
    
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class RecordValidationError(FootClinicError):
    """A clinical record failed a domain check (e.g. invalid RUT)."""
    
    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field


class RecordNotFoundError(FootClinicError):
    """A referenced patient, episode or referral does not exist."""
    
    def __init__(
        self,
        message: str,
        record_type: str = "unknown",
        record_id: str = "",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            details={"record_type": record_type, "record_id": record_id, **(details or {})}
        )
        self.record_type = record_type
        self.record_id = record_id


class PermissionDeniedError(FootClinicError):
    """The acting clinical role may not perform the operation."""
    
    def __init__(
        self,
        message: str,
        role: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            details={"role": role, **(details or {})}
        )
        self.role = role


class StorageError(FootClinicError):
    """Errors reading or writing the persisted clinic state."""
    
    def __init__(
        self,
        message: str,
        backend: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            details={"backend": backend, **(details or {})}
        )
        self.backend = backend
