"""
Core utilities and configuration for the EVSE importer.

This package provides foundational components used throughout the import:

Modules:
    config: Application configuration and environment variable management
    database: Database connection and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import MalformedIdentifierError, DatabaseError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "setup_logging",
    # Exceptions
    "ImportException",
    "ExtractionError",
    "FeedExtractionError",
    "InvalidFeedError",
    "LanguageLookupError",
    "TransformationError",
    "MalformedIdentifierError",
    "CatalogError",
    "LoadError",
    "DatabaseError",
    "UpsertError",
    "RetryableError",
    "NonRetryableError",
    "NetworkError",
    "ResourceNotFoundError",
]
