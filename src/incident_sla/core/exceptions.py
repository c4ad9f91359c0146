"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Per-cell problems (an unparsable
timestamp, a missing column) are never raised; they degrade to empty values.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class InvalidInputException(ValidationException):
    """
    Raised when the input cannot be treated as a record set at all.

    Only structurally invalid input (not a sequence of mappings, or records
    without a single column) ends up here.
    """

    def __init__(self, reason: str, details: Optional[dict] = None):
        self.reason = reason
        super().__init__(f"Invalid incident records: {reason}", details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class WorkbookException(ApplicationException):
    """Exception for workbook read/write failures."""

    def __init__(
        self,
        path: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.path = path
        super().__init__(f"{path}: {message}", details)
