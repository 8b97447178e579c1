"""Deferred upload handles.

A ``PendingUpload`` is what the transport hands to a file field: it wraps a
coroutine function producing a ``FileUpload`` (a readable stream plus the filename
the client advertised).  The input resolver awaits it exactly once.
"""

from __future__ import annotations

import io
import mimetypes
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from starlette.datastructures import UploadFile


@dataclass
class FileUpload:
    filename: str
    stream: BinaryIO
    mimetype: str = "application/octet-stream"
    encoding: str = ""

    def create_read_stream(self) -> BinaryIO:
        return self.stream

    def close(self) -> None:
        if not self.stream.closed:
            self.stream.close()


class PendingUpload:
    def __init__(self, opener: Callable[[], Awaitable[FileUpload]]) -> None:
        self._opener = opener
        self._resolved = False

    @property
    def resolved(self) -> bool:
        return self._resolved

    async def resolve(self) -> FileUpload:
        if self._resolved:
            raise RuntimeError("Upload has already been resolved")
        self._resolved = True
        return await self._opener()

    def __repr__(self) -> str:
        state = "resolved" if self._resolved else "pending"
        return f"<PendingUpload {state}>"

    @classmethod
    def from_upload(cls, upload: FileUpload) -> PendingUpload:
        async def _ready() -> FileUpload:
            return upload

        return cls(_ready)

    @classmethod
    def from_bytes(cls, data: bytes, filename: str, mimetype: str = "") -> PendingUpload:
        return cls.from_upload(
            FileUpload(
                filename=filename,
                mimetype=mimetype or _guess_mimetype(filename),
                stream=io.BytesIO(data),
            )
        )

    @classmethod
    def from_path(cls, path: str | Path) -> PendingUpload:
        path = Path(path)

        async def _open() -> FileUpload:
            return FileUpload(
                filename=path.name,
                mimetype=_guess_mimetype(path.name),
                stream=path.open("rb"),
            )

        return cls(_open)

    @classmethod
    def from_upload_file(cls, upload_file: UploadFile) -> PendingUpload:
        """Wrap a Starlette ``UploadFile`` taken from a multipart form."""

        async def _spooled() -> FileUpload:
            await upload_file.seek(0)
            filename = upload_file.filename or ""
            return FileUpload(
                filename=filename,
                mimetype=upload_file.content_type or _guess_mimetype(filename),
                stream=upload_file.file,
            )

        return cls(_spooled)


def _guess_mimetype(filename: str) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"
