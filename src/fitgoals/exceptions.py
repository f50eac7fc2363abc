# src/fitgoals/exceptions.py
"""
Custom exceptions for the fitgoals library.

This module defines a small hierarchy of exception classes so that callers
(typically a presentation layer) can decide how to surface a failure based
on its kind. Missing goals or records are never reported as exceptions;
lookups return ``None`` and deletes of unknown ids are no-ops.
"""

from typing import Optional


class FitGoalsError(Exception):
    """Base class for all fitgoals specific errors."""
    def __init__(self, message: str = "An unspecified error occurred in fitgoals."):
        super().__init__(message)


class ConfigError(FitGoalsError):
    """Raised for errors related to configuration loading or validation."""
    def __init__(self, message: str = "Configuration error."):
        super().__init__(message)


class StorageError(FitGoalsError):
    """
    Raised when the persistence boundary fails to read or write a collection.

    Attributes:
        operation: The store or backend operation that failed (e.g. ``save_goal``).
        key: The storage key involved, if known.
    """
    def __init__(
        self,
        message: str = "Storage error.",
        operation: Optional[str] = None,
        key: Optional[str] = None,
    ):
        self.operation = operation
        self.key = key
        super().__init__(message)


class GoalValidationError(FitGoalsError, ValueError):
    """Raised when a goal definition is internally inconsistent."""
    def __init__(self, message: str = "Invalid goal definition."):
        super().__init__(message)
