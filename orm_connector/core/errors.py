"""
Exception types raised by the connector.

Every error carries a human readable ``message`` plus a ``details`` dict
with the values that caused it (missing fields, model names, file paths).
"""
from typing import Any, Dict, Optional


class ConnectorError(Exception):
    """Base class for all connector errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dict for structured logging."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ConnectorError, ValueError):
    """Connection configuration is incomplete or invalid for its dialect."""

    def __init__(self, message: str, missing: Optional[list] = None, dialect: Optional[str] = None):
        details: Dict[str, Any] = {}
        if missing:
            details["missing"] = list(missing)
        if dialect:
            details["dialect"] = dialect
        super().__init__(message, details)


class ModelLoadError(ConnectorError):
    """A model definition file could not be loaded, defined or associated."""

    def __init__(self, message: str, path: Optional[str] = None, model: Optional[str] = None):
        details: Dict[str, Any] = {}
        if path:
            details["path"] = path
        if model:
            details["model"] = model
        super().__init__(message, details)


class ModelLookupError(ConnectorError, LookupError):
    """Requested model is missing or the registry is empty."""


class DatabaseConnectionError(ConnectorError):
    """Authenticating or closing the underlying connection failed."""

    def __init__(self, message: str, dialect: Optional[str] = None):
        super().__init__(message, {"dialect": dialect} if dialect else None)
