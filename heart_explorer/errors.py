"""
Exception hierarchy for Heart-Explorer.

None of these are fatal: the page reports them and stays interactive.
An empty dataset is a normal state, not an error.
"""
from typing import Optional, Dict, Any


class HeartExplorerError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for display or logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class IngestionFailure(HeartExplorerError):
    """The data source is unreachable or cannot be parsed."""

    def __init__(
        self,
        message: str,
        source: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INGESTION_FAILURE",
            details={"source": source, **(details or {})}
        )
        self.source = source


class InvalidField(HeartExplorerError):
    """Unknown attribute name, or a value that cannot be coerced for it."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_FIELD",
            details={"field": field, **(details or {})}
        )
        self.field = field
