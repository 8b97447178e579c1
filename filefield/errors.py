"""Exception types raised by file fields and storage backends."""

from __future__ import annotations

from typing import Any


class FileFieldError(Exception):
    """Base exception for file field errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class UserInputError(FileFieldError):
    """The caller submitted input the field cannot accept."""


class ResolutionError(FileFieldError):
    """A storage backend failed to decode a reference or ingest an upload."""


class ConfigurationError(FileFieldError):
    """The host application is missing a storage backend or misdeclared a field."""


class FieldDefinitionError(ConfigurationError):
    pass
