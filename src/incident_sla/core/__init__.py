"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from incident_sla.core.exceptions import (
    ApplicationException,
    DomainException,
    ValidationException,
    InvalidInputException,
    ConfigurationException,
    WorkbookException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "ValidationException",
    "InvalidInputException",
    "ConfigurationException",
    "WorkbookException",
]
