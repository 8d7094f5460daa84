"""
Custom Exception Classes for the TalentMatch API
"""
from typing import Dict, Any
from fastapi import HTTPException


class TalentMatchBaseException(Exception):
    """Base exception for the TalentMatch API"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/response"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(TalentMatchBaseException):
    """Raised when a request is missing required input"""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        if value is not None:
            details['invalid_value'] = str(value)
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)


class NotFoundError(TalentMatchBaseException):
    """Raised when a record does not exist in the record store"""

    def __init__(self, message: str, kind: str = None, record_id: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if kind:
            details['kind'] = kind
        if record_id is not None:
            details['id'] = record_id
        super().__init__(message, error_code="NOT_FOUND", details=details, **kwargs)


class DatabaseError(TalentMatchBaseException):
    """Raised when record store operations fail"""

    def __init__(self, message: str, operation: str = None, collection: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if operation:
            details['operation'] = operation
        if collection:
            details['collection'] = collection
        super().__init__(message, error_code="DATABASE_ERROR", details=details, **kwargs)


class UpstreamUnavailable(TalentMatchBaseException):
    """Raised when the embedding provider, vector index or language model fails"""

    def __init__(self, message: str, service_name: str = None, status_code: int = None, **kwargs):
        details = kwargs.pop('details', {})
        if service_name:
            details['service_name'] = service_name
        if status_code:
            details['status_code'] = status_code
        super().__init__(message, error_code="UPSTREAM_UNAVAILABLE", details=details, **kwargs)


class MalformedModelOutput(TalentMatchBaseException):
    """Raised when model text carries no parseable payload"""

    def __init__(self, message: str, raw_text: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if raw_text is not None:
            details['raw_preview'] = raw_text[:200]
        super().__init__(message, error_code="MALFORMED_MODEL_OUTPUT", details=details, **kwargs)


def map_to_http_exception(exc: TalentMatchBaseException) -> HTTPException:
    """Map custom exceptions to HTTP exceptions"""

    status_code_mapping = {
        ValidationError: 400,
        NotFoundError: 404,
        DatabaseError: 500,
        MalformedModelOutput: 502,
        UpstreamUnavailable: 502,
    }

    status_code = status_code_mapping.get(type(exc), 500)

    detail = {
        "error": exc.to_dict(),
        "message": exc.message
    }

    return HTTPException(status_code=status_code, detail=detail)
