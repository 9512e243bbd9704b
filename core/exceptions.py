"""Custom exception classes for the application.

Defines domain-specific exceptions that can be raised throughout the
application and handled consistently by exception handlers.
"""

from typing import Optional, Any, Dict


class AppException(Exception):
    """Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional additional error details.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize application exception.

        Args:
            message: Error message.
            status_code: HTTP status code (default: 500).
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        """Initialize not found error.

        Args:
            resource: Type of resource (e.g., 'Feedback', 'Survey').
            identifier: ID or identifier that was not found.
        """
        message = f"{resource} with id '{identifier}' not found"
        super().__init__(message, status_code=404, details={"resource": resource, "id": identifier})


class ValidationError(AppException):
    """Exception raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        """Initialize validation error.

        Args:
            message: Validation error message.
            field: Optional field name that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, status_code=400, details=details)


class MalformedRecordError(AppException):
    """Raised when stored data cannot be turned into a valid record.

    Covers missing required fields, ratings outside 1-5 and unparseable
    timestamps. Raised at the data-access boundary only.
    """

    def __init__(self, message: str, record_id: Optional[Any] = None, field: Optional[str] = None):
        details = {}
        if record_id is not None:
            details["record_id"] = record_id
        if field:
            details["field"] = field
        super().__init__(message, status_code=422, details=details)


class DatabaseError(AppException):
    """Exception raised when database operations fail."""

    def __init__(self, message: str, operation: Optional[str] = None):
        """Initialize database error.

        Args:
            message: Database error message.
            operation: Optional operation that failed (e.g., 'create', 'update').
        """
        details = {"operation": operation} if operation else {}
        super().__init__(message, status_code=500, details=details)


class StatsComputationError(AppException):
    """Exception raised when the statistics worker cannot produce a result."""

    def __init__(self, message: str, cause: Optional[str] = None):
        """Initialize stats computation error.

        Args:
            message: Error message.
            cause: Optional description of the underlying failure.
        """
        details = {"cause": cause} if cause else {}
        super().__init__(message, status_code=503, details=details)


class InsufficientDataError(AppException):
    """Exception raised when there is nothing to operate on, such as an empty export."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class ConfigurationError(AppException):
    """Exception raised when application configuration is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        """Initialize configuration error.

        Args:
            message: Configuration error message.
            config_key: Optional configuration key that is invalid.
        """
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, status_code=500, details=details)
