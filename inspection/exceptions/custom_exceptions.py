"""
Custom exception classes for the Inspection Region Query system.

This module defines domain-specific exceptions to provide clear error handling
and stage-aware diagnostics throughout query parsing, evaluation and output.
"""

from typing import Optional, Dict, Any


class RQBaseException(Exception):
    """Base exception class for all region query exceptions."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def stage(self) -> Optional[str]:
        """Processing stage the error was raised in, if known."""
        return self.context.get("stage")

    def with_stage(self, stage: str) -> "RQBaseException":
        """Record the failing stage unless an inner stage is already set."""
        self.context.setdefault("stage", stage)
        return self

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class RQConfigurationError(RQBaseException):
    """
    Exception raised when configuration loading or validation fails.

    This exception is raised when:
    - Configuration files are missing or invalid
    - Environment configuration is malformed
    - Required configuration values are missing
    """
    pass


class RQValidationError(RQBaseException):
    """
    Exception raised when data validation fails.

    This exception is raised when:
    - Bulk-load files disagree on their number of records
    - Point records contain unparseable values
    - Required environment variables are missing
    """
    pass


class RQInputNotFoundError(RQBaseException):
    """Exception raised when a query file or data file does not exist."""
    pass


class RQMalformedQueryError(RQBaseException):
    """
    Exception raised when a query description cannot be turned into a predicate tree.

    This exception is raised when:
    - The query text is not valid JSON
    - Box bounds are missing, non-numeric or inverted
    - Operand lists are missing or empty
    """
    pass


class RQUnknownOperatorError(RQMalformedQueryError):
    """Exception raised when a query node carries no recognized operator."""
    pass


class RQStoreUnavailableError(RQBaseException):
    """
    Exception raised when the point store cannot be reached.

    This exception is raised when:
    - Network connection issues
    - Database unavailable
    - Connection timeouts
    """
    pass


class RQStoreError(RQBaseException):
    """Exception raised when the point store reports a query execution fault."""
    pass


class RQProcessingError(RQBaseException):
    """
    Exception raised when query processing fails outside the store.

    This exception is raised when:
    - The result file cannot be written
    - A processing stage fails unexpectedly
    """
    pass
