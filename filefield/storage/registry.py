from __future__ import annotations

from collections.abc import Mapping
from typing import BinaryIO

from filefield.errors import ConfigurationError, ResolutionError
from filefield.models.file import FileFieldValue, FileMode
from filefield.storage.base import FileStorage
from filefield.storage.refs import parse_file_ref


class StorageRegistry(FileStorage):
    """Routes each operation to the backend registered for the file's mode.

    New uploads go to ``default_mode``; refs and stored rows are dispatched by
    the mode they carry.
    """

    def __init__(self, backends: Mapping[FileMode, FileStorage], default_mode: FileMode) -> None:
        if default_mode not in backends:
            raise ConfigurationError(f"No storage backend configured for default mode {default_mode.value!r}")
        self.backends = dict(backends)
        self.mode = default_mode

    def backend_for(self, mode: FileMode | str) -> FileStorage:
        value = mode.value if isinstance(mode, FileMode) else mode
        try:
            return self.backends[FileMode(value)]
        except (KeyError, ValueError) as exc:
            raise ConfigurationError(f"No storage backend configured for mode {value!r}") from exc

    async def decode_reference(self, ref: str) -> FileFieldValue:
        parsed = parse_file_ref(ref)
        if parsed is None:
            raise ResolutionError(f"Invalid file ref: {ref!r}", details={"ref": ref})
        mode, _ = parsed
        backend = self.backends.get(mode)
        if backend is None:
            raise ResolutionError(
                f"Cannot resolve ref {ref!r}: no storage backend for mode {mode.value!r}",
                details={"ref": ref, "mode": mode.value},
            )
        return await backend.decode_reference(ref)

    async def ingest_from_stream(self, stream: BinaryIO, filename: str) -> FileFieldValue:
        return await self.backend_for(self.mode).ingest_from_stream(stream, filename)

    def get_src(self, mode: FileMode, filename: str) -> str:
        return self.backend_for(mode).get_src(mode, filename)
