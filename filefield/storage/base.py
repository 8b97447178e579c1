from abc import ABC, abstractmethod
from typing import BinaryIO

from filefield.models.file import FileFieldValue, FileMode
from filefield.storage.refs import format_file_ref


class FileStorage(ABC):
    mode: FileMode

    @abstractmethod
    async def decode_reference(self, ref: str) -> FileFieldValue:
        """Map a file ref back to the stored metadata triple."""
        ...

    @abstractmethod
    async def ingest_from_stream(self, stream: BinaryIO, filename: str) -> FileFieldValue:
        """Consume the stream fully, store the bytes and return the metadata triple."""
        ...

    def format_reference(self, mode: FileMode, filename: str) -> str:
        return format_file_ref(mode, filename)

    @abstractmethod
    def get_src(self, mode: FileMode, filename: str) -> str:
        """Return a URL or path the file bytes can be fetched from."""
        ...
