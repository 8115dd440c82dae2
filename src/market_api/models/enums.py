"""
Enum definitions for the Market API
"""

from enum import Enum


class ErrorType(str, Enum):
    """
    Failure categories reported by the service layer.

    Routes translate each category to an HTTP status code:

    - VALIDATION_ERROR: malformed or missing input (400)
    - INSERT_FAILED: the store accepted the statement but wrote nothing (400)
    - UNAUTHORIZED: credential mismatch (401)
    - RESOURCE_NOT_FOUND: entity absent or empty collection (404)
    - CONFLICT: uniqueness violation (409)
    - NO_CHANGES: an update matched no rows after the existence check (500)
    - DATABASE_ERROR: any underlying store failure (500)
    """
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INSERT_FAILED = "INSERT_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    NO_CHANGES = "NO_CHANGES"
    DATABASE_ERROR = "DATABASE_ERROR"


ERROR_STATUS_CODES = {
    ErrorType.VALIDATION_ERROR: 400,
    ErrorType.INSERT_FAILED: 400,
    ErrorType.UNAUTHORIZED: 401,
    ErrorType.RESOURCE_NOT_FOUND: 404,
    ErrorType.CONFLICT: 409,
    ErrorType.NO_CHANGES: 500,
    ErrorType.DATABASE_ERROR: 500,
}
