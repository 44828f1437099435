from fastapi import HTTPException
from typing import Any, Dict, List, Optional

class ReleaseHubException(HTTPException):
    """Base exception for the ReleaseHub API"""
    def __init__(
        self,
        status_code: int,
        detail: Any,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class NotFoundException(ReleaseHubException):
    """Resource not found"""
    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            status_code=404,
            detail=f"{resource} with id {resource_id} not found"
        )

class DuplicateError(ReleaseHubException):
    """Resource already exists"""
    def __init__(self, field: str, value: str):
        super().__init__(
            status_code=409,
            detail=f"{field} '{value}' already exists"
        )

class UnauthorizedError(ReleaseHubException):
    """User is not authenticated"""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            status_code=401,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"}
        )

class AuthorizationError(ReleaseHubException):
    """User lacks the role or membership for the action"""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(status_code=403, detail=message)

class ValidationError(ReleaseHubException):
    """
    One or more business rules failed. Every failure is reported at once so the
    caller can fix them in a single round-trip. Nothing has been written.
    """
    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(
            status_code=422,
            detail={"message": message, "errors": errors}
        )

    @classmethod
    def single(cls, check_id: str, message: str) -> "ValidationError":
        return cls([{"id": check_id, "message": message}], message=message)

class StorageError(ReleaseHubException):
    """Persistence failed; the transaction was rolled back"""
    def __init__(self, action: str):
        super().__init__(
            status_code=500,
            detail=f"Failed to {action}"
        )

class StorageUnavailableError(ReleaseHubException):
    """Object storage is not configured"""
    def __init__(self):
        super().__init__(
            status_code=503,
            detail="Object storage is not enabled"
        )
