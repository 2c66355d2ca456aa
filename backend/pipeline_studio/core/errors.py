# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for the pipeline editor core.

All exceptions inherit from StudioError for consistent error handling.
None of them is fatal: every failure leaves the in-memory pipeline, graph,
selection and catalog in their last consistent state.
"""

from typing import Optional


class StudioError(Exception):
    """Base exception for all editor errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        """
        Initialize editor error.

        Args:
            message: Human-readable error message
            status_code: HTTP-style status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for display or logging."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details
        }


class NotFoundError(StudioError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str, details: Optional[dict] = None):
        """
        Initialize not found error.

        Args:
            resource: Type of resource (e.g., "Pipeline", "Node")
            identifier: Resource identifier
            details: Additional error details
        """
        message = f"{resource} not found: {identifier}"
        super().__init__(message, status_code=404, details=details)
        self.resource = resource
        self.identifier = identifier


class ValidationError(StudioError):
    """Validation failed."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize validation error.

        Args:
            message: Validation error message
            field: Field that failed validation
            details: Additional error details
        """
        super().__init__(message, status_code=400, details=details)
        self.field = field


class ConflictError(StudioError):
    """Operation conflicts with the current state."""

    def __init__(self, message: str, resource: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, status_code=409, details=details)
        self.resource = resource


class ServiceUnavailableError(StudioError):
    """Remote backend unreachable or answered with an error."""

    def __init__(self, message: str, service: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize service unavailable error.

        Args:
            message: Error message
            service: Service that is unavailable
            details: Additional error details
        """
        super().__init__(message, status_code=503, details=details)
        self.service = service


class SchemaUnavailableError(StudioError):
    """Configuration schema could not be resolved for a plugin type."""

    def __init__(self, plugin_type: str, message: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(
            message or f"Configuration schema unavailable for plugin type: {plugin_type}",
            status_code=404,
            details=details
        )
        self.plugin_type = plugin_type


class CatalogLoadError(StudioError):
    """Plugin catalog could not be loaded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, status_code=503, details=details)


class PersistenceError(StudioError):
    """Create/read/update/delete of a pipeline record failed."""

    def __init__(
        self,
        operation: str,
        message: str,
        pipeline_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        """
        Initialize persistence error.

        Args:
            operation: Failed operation (create, open, save, delete, list)
            message: Error message
            pipeline_id: Pipeline identifier, if known
            details: Additional error details
        """
        super().__init__(f"Failed to {operation} pipeline: {message}", status_code=502, details=details)
        self.operation = operation
        self.pipeline_id = pipeline_id


class NoPipelineOpenError(StudioError):
    """Operation requires an open pipeline."""

    def __init__(self, message: str = "No pipeline is open - create or open one first"):
        super().__init__(message, status_code=409)


class NoSelectionError(StudioError):
    """Operation requires a selected node."""

    def __init__(self, message: str = "No node is selected"):
        super().__init__(message, status_code=409)


# Error Message Utilities

def sanitize_error_for_user(error: Exception, include_type: bool = True) -> str:
    """
    Sanitize error messages for user display.
    Removes stack traces and overly long payloads.

    Args:
        error: The exception to sanitize
        include_type: Whether to include exception type

    Returns:
        User-friendly error message without stack trace
    """
    error_msg = str(error).strip()

    # Limit message length
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."

    if include_type:
        return f"{error.__class__.__name__}: {error_msg}"

    return error_msg
