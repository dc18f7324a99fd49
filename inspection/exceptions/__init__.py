"""
Custom exceptions for the Inspection Region Query system.

This module provides domain-specific exception classes for error handling
and debugging throughout the system.
"""

from .custom_exceptions import (
    RQBaseException,
    RQConfigurationError,
    RQValidationError,
    RQInputNotFoundError,
    RQMalformedQueryError,
    RQUnknownOperatorError,
    RQStoreUnavailableError,
    RQStoreError,
    RQProcessingError,
)

__all__ = [
    "RQBaseException",
    "RQConfigurationError",
    "RQValidationError",
    "RQInputNotFoundError",
    "RQMalformedQueryError",
    "RQUnknownOperatorError",
    "RQStoreUnavailableError",
    "RQStoreError",
    "RQProcessingError",
]
