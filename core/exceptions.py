"""
Custom exceptions for the EVSE import pipeline with structured error context.

This module provides the exception hierarchy used by the importer. Each
exception carries context information for debugging and monitoring.

Exception Hierarchy:
    ImportException (base)
    ├── ExtractionError
    │   ├── FeedExtractionError
    │   └── LanguageLookupError
    ├── TransformationError
    │   ├── MalformedIdentifierError
    │   └── CatalogError
    ├── LoadError
    │   ├── DatabaseError
    │   └── UpsertError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime


class ImportException(Exception):
    """
    Base exception for all import-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (station id, table, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ImportException):
    """Base exception for failures talking to external collaborators."""
    pass


class FeedExtractionError(ExtractionError):
    """
    Exception raised when the EVSE feed document cannot be read.

    Context should include:
        - source: File path or URL of the feed
        - status_code: HTTP status code (if applicable)
    """
    pass


class LanguageLookupError(ExtractionError):
    """
    Exception raised when a country code cannot be resolved to a language.

    Context should include:
        - country_code: ISO 3166 alpha-3 code that was looked up
        - lookup_url: The service endpoint that failed
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ImportException):
    """Base exception for data transformation failures."""
    pass


class MalformedIdentifierError(TransformationError):
    """
    Exception raised when an EVSE id does not carry an operator id prefix.

    Context should include:
        - evse_id: The offending station identifier
        - operator_id: Nominal operator id of the station
    """
    pass


class CatalogError(TransformationError):
    """Exception raised when the enum catalog tables cannot be loaded."""
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ImportException):
    """Base exception for data loading failures."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when database operations fail.

    Context should include:
        - operation: Type of database operation (DELETE, UPSERT, COMMIT)
        - table_name: Name of the table
    """
    pass


class UpsertError(LoadError):
    """
    Exception raised when a bulk upsert statement fails.

    Context should include:
        - table_name: Target table
        - batch_index: Index of the failing batch
        - batch_size: Number of rows in the batch
    """
    pass


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(ImportException):
    """
    Mixin for errors that should trigger retry logic.

    Use this for transient errors like:
    - Network timeouts
    - Service unavailable (HTTP 5xx)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0
    ):
        super().__init__(message, context, original_exception)
        self.max_retries = max_retries
        self.retry_delay = retry_delay


class NonRetryableError(ImportException):
    """
    Mixin for errors that should NOT trigger retry logic.

    Use this for permanent errors like:
    - Unknown country codes (HTTP 404)
    - Invalid feed documents
    """
    pass


# ============================================================================
# Specific Errors
# ============================================================================

class NetworkError(RetryableError, LanguageLookupError):
    """Network-related lookup errors that were retried and still failed."""
    pass


class ResourceNotFoundError(NonRetryableError, LanguageLookupError):
    """Lookup target not found (HTTP 404); not retried."""
    pass


class InvalidFeedError(NonRetryableError, FeedExtractionError):
    """Feed document is not valid JSON or does not match the feed schema."""
    pass
