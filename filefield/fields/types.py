"""Query-facing types of a file field.

``FileFieldInput`` is what mutations accept.  ``FileFieldOutput`` is the
capability set every storage mode exposes; each mode contributes one concrete
variant so a new backend adds a variant without changing what callers query.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from filefield.errors import ConfigurationError, UserInputError
from filefield.models.file import FileData, FileMode
from filefield.models.upload import PendingUpload
from filefield.storage.base import FileStorage
from filefield.storage.refs import format_file_ref

FILES_NOT_CONFIGURED = (
    "File storage is undefined, this most likely means that no storage backend "
    "was passed for this request. Configure one with FILEFIELD_STORAGE_BACKEND "
    "and pass the result of get_storage() to the field."
)

OUTPUT_FIELDS = ("filename", "filesize", "ref", "src")

_SDL_MEMBERS = (
    ("filename", "String!"),
    ("filesize", "Int!"),
    ("ref", "String!"),
    ("src", "String!"),
)


class FileFieldInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    upload: PendingUpload | None = None
    ref: str | None = None


class FileFieldOutput(FileData):
    @property
    def ref(self) -> str:
        return format_file_ref(self.mode, self.filename)

    def src(self, storage: FileStorage | None) -> str:
        if storage is None:
            raise ConfigurationError(FILES_NOT_CONFIGURED)
        return storage.get_src(self.mode, self.filename)

    def select(self, fields: Iterable[str] = OUTPUT_FIELDS, storage: FileStorage | None = None) -> dict[str, Any]:
        """Return only the requested members; ``src`` reaches the backend only when asked for."""
        result: dict[str, Any] = {}
        for name in fields:
            if name == "src":
                result[name] = self.src(storage)
            elif name in ("filename", "filesize", "ref"):
                result[name] = getattr(self, name)
            elif name == "__typename":
                result[name] = type(self).__name__
            else:
                raise UserInputError(f"Cannot query field {name!r} on type {type(self).__name__!r}")
        return result


class LocalFileFieldOutput(FileFieldOutput):
    mode: Literal[FileMode.LOCAL] = FileMode.LOCAL


class S3FileFieldOutput(FileFieldOutput):
    mode: Literal[FileMode.S3] = FileMode.S3


OUTPUT_VARIANTS: dict[FileMode, type[FileFieldOutput]] = {
    FileMode.LOCAL: LocalFileFieldOutput,
    FileMode.S3: S3FileFieldOutput,
}


def to_output(data: FileData) -> FileFieldOutput:
    variant = OUTPUT_VARIANTS[FileMode(data.mode)]
    return variant(filename=data.filename, filesize=data.filesize)


def resolve_type(data: FileData) -> str:
    return OUTPUT_VARIANTS[FileMode(data.mode)].__name__


def build_sdl() -> str:
    members = "\n".join(f"  {name}: {type_}" for name, type_ in _SDL_MEMBERS)
    parts = [
        "scalar Upload",
        "input FileFieldInput {\n  upload: Upload\n  ref: String\n}",
        f"interface FileFieldOutput {{\n{members}\n}}",
    ]
    for variant in OUTPUT_VARIANTS.values():
        parts.append(f"type {variant.__name__} implements FileFieldOutput {{\n{members}\n}}")
    return "\n\n".join(parts) + "\n"
