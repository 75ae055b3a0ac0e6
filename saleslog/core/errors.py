"""Error taxonomy.

Validation errors surface to the caller; persistence errors are contained by
the persistence bridge and never take the process down.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SalesLogError(Exception):
    """Base exception for the sales log."""

    default_message = "sales log error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.__class__.__name__, "message": self.message}
        if self.code:
            out["code"] = self.code
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(SalesLogError):
    """Input to an add operation failed a required-field or range check."""

    default_message = "validation error"


class PersistenceError(SalesLogError):
    """The key-value backend failed to read or write."""

    default_message = "persistence error"


class ConfigError(SalesLogError):
    default_message = "configuration error"
