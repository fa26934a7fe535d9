"""Exceptions raised by the note store.

A missing note is not an error: lookups return ``None`` and deletes return
``False``. Filesystem and database errors are logged and re-raised as-is.
"""
from __future__ import annotations
from typing import Any, Optional


class MemokaError(Exception):
    """Base class for errors raised by memoka itself."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NoteValidationError(MemokaError, ValueError):
    """Raised when a note payload is missing a required field or is malformed."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        super().__init__(message, details)
        self.field = field
        self.value = value


class TagLookupError(MemokaError):
    """Raised when a tag cannot be resolved while saving a note's tags."""

    def __init__(self, name: str):
        super().__init__(f"Tag '{name}' could not be resolved", {"name": name})
        self.name = name
