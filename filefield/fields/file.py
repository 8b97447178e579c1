from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import ValidationError
from sqlalchemy import Column, Integer, String

from filefield.errors import ConfigurationError, FieldDefinitionError, ResolutionError, UserInputError
from filefield.fields.types import FILES_NOT_CONFIGURED, OUTPUT_VARIANTS, FileFieldInput, FileFieldOutput
from filefield.models.file import FileFieldValue, parse_mode
from filefield.storage.base import FileStorage

logger = logging.getLogger(__name__)

Operation = Literal["create", "update"]


class FileField:
    """A file-valued field stored as three nullable columns on its owning record.

    Mutations go through ``validate_input`` and then ``resolve_input``; reads go
    through ``resolve_output``.  The storage backend is passed to each call
    rather than held by the field, so one field definition serves every request.
    """

    def __init__(self, name: str, *, is_indexed: bool | str | None = None, is_required: bool = False) -> None:
        if is_indexed == "unique":
            raise FieldDefinitionError(
                "isIndexed: 'unique' is not a supported option for field type file",
                details={"field": name},
            )
        self.name = name
        self.is_indexed = is_indexed
        self.is_required = is_required

    def __repr__(self) -> str:
        return f"FileField({self.name!r})"

    @property
    def column_names(self) -> dict[str, str]:
        return {
            "filename": f"{self.name}_filename",
            "filesize": f"{self.name}_filesize",
            "mode": f"{self.name}_mode",
        }

    def get_columns(self) -> list[Column]:
        names = self.column_names
        return [
            Column(names["filesize"], Integer, nullable=True),
            Column(names["mode"], String(20), nullable=True),
            Column(names["filename"], String(255), nullable=True, index=bool(self.is_indexed)),
        ]

    @staticmethod
    def coerce_input(data: FileFieldInput | Mapping[str, Any] | None) -> FileFieldInput | None:
        if data is None or isinstance(data, FileFieldInput):
            return data
        if not isinstance(data, Mapping):
            raise UserInputError(f"Expected FileFieldInput, got {type(data).__name__}")
        try:
            return FileFieldInput.model_validate(dict(data))
        except ValidationError as exc:
            raise UserInputError("Invalid FileFieldInput", details={"errors": exc.errors()}) from exc

    def validate_input(
        self,
        data: FileFieldInput | Mapping[str, Any] | None,
        operation: Operation = "create",
    ) -> FileFieldInput | None:
        data = self.coerce_input(data)
        if data is None:
            if self.is_required and operation == "create":
                raise UserInputError(f"{self.name} is required", details={"field": self.name})
            return None

        if data.ref:
            if data.upload is not None:
                raise UserInputError("Only one of ref and upload can be passed to FileFieldInput")
        elif data.upload is None:
            raise UserInputError("Either ref or upload must be passed to FileFieldInput")
        return data

    async def resolve_input(
        self,
        data: FileFieldInput | Mapping[str, Any] | None,
        storage: FileStorage | None,
    ) -> FileFieldValue:
        data = self.coerce_input(data)
        if data is None:
            return FileFieldValue.empty()
        if storage is None:
            if data.upload is not None and not data.upload.resolved:
                # The transport opened the stream; release it before failing.
                (await data.upload.resolve()).close()
            raise ConfigurationError(FILES_NOT_CONFIGURED)

        if data.ref:
            value = await storage.decode_reference(data.ref)
        else:
            upload = await data.upload.resolve()
            try:
                value = await storage.ingest_from_stream(upload.create_read_stream(), upload.filename)
            except OSError as exc:
                raise ResolutionError(f"Failed to store upload {upload.filename!r}: {exc}") from exc
            finally:
                upload.close()

        if value.is_empty:
            raise ResolutionError(f"Storage backend returned no file for {self.name}")
        logger.debug("Resolved %s to %s (%d bytes)", self.name, value.filename, value.filesize)
        return value

    def resolve_output(self, *, filename: str | None, filesize: int | None, mode: str | None) -> FileFieldOutput | None:
        if filesize is None or filename is None or mode is None:
            return None
        file_mode = parse_mode(mode)
        if file_mode is None:
            logger.warning("Ignoring %s=%s with unrecognized storage mode %r", self.name, filename, mode)
            return None
        return OUTPUT_VARIANTS[file_mode](filename=filename, filesize=filesize)

    def to_columns(self, value: FileFieldValue) -> dict[str, Any]:
        names = self.column_names
        return {
            names["filename"]: value.filename,
            names["filesize"]: value.filesize,
            names["mode"]: value.mode.value if value.mode is not None else None,
        }

    def output_from_row(self, row: Mapping[str, Any]) -> FileFieldOutput | None:
        names = self.column_names
        return self.resolve_output(
            filename=row.get(names["filename"]),
            filesize=row.get(names["filesize"]),
            mode=row.get(names["mode"]),
        )


def file_field(name: str, *, is_indexed: bool | str | None = None, is_required: bool = False) -> FileField:
    """Declare a file field; raises ``FieldDefinitionError`` for ``is_indexed="unique"``."""
    return FileField(name, is_indexed=is_indexed, is_required=is_required)
