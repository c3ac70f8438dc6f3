"""
Domain exceptions raised by the service layer.
Routes translate them into HTTP responses.
"""

from typing import Dict, Optional

from fastapi import HTTPException


class DoseCareError(Exception):
    """Base class for every error raised by DoseCare services"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(DoseCareError):
    """
    Raised when a submitted form fails validation.
    `errors` maps a field name (or "general") to a human readable message.
    """
    status_code = 422

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class NotFoundError(DoseCareError):
    status_code = 404


class DuplicateRecordError(DoseCareError):
    status_code = 409


class AuthProviderError(DoseCareError):
    """Error reported by the hosted authentication/storage provider"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code or 502


class RemoteProcedureError(DoseCareError):
    """A named database procedure call failed"""
    status_code = 502


def to_http_exception(error: DoseCareError) -> HTTPException:
    """Map a domain error onto the HTTPException a route should raise"""
    if isinstance(error, FormValidationError):
        return HTTPException(status_code=error.status_code,
                             detail={"message": "Invalid form", "errors": error.errors})
    return HTTPException(status_code=error.status_code, detail=error.message)
