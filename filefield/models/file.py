from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class FileMode(str, Enum):
    LOCAL = "local"
    S3 = "s3"


def parse_mode(value: object) -> FileMode | None:
    """Return the ``FileMode`` for a stored value, or ``None`` if it is not recognized."""
    try:
        return FileMode(value)
    except ValueError:
        return None


class FileFieldValue(BaseModel):
    """The three storage-independent columns persisted for a file field.

    Either every member is set or none is; a partial triple never leaves the
    input resolver.
    """

    model_config = ConfigDict(frozen=True)

    mode: FileMode | None = None
    filename: str | None = None
    filesize: int | None = None

    @model_validator(mode="after")
    def _all_or_nothing(self) -> FileFieldValue:
        present = [v is not None for v in (self.mode, self.filename, self.filesize)]
        if any(present) and not all(present):
            raise ValueError("mode, filename and filesize must be set together")
        return self

    @classmethod
    def empty(cls) -> FileFieldValue:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.mode is None


class FileData(BaseModel):
    mode: FileMode
    filename: str
    filesize: int
