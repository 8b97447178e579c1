import logging
import stat
from pathlib import Path
from typing import BinaryIO

import aiofiles
import aiofiles.os

from filefield.errors import ResolutionError
from filefield.models.file import FileFieldValue, FileMode
from filefield.storage.base import FileStorage
from filefield.storage.refs import generate_safe_filename, parse_file_ref

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LocalStorage(FileStorage):
    mode = FileMode.LOCAL

    def __init__(self, base_dir: str, base_url: str = "/files", chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")
        self.chunk_size = chunk_size

    async def decode_reference(self, ref: str) -> FileFieldValue:
        parsed = parse_file_ref(ref)
        if parsed is None or parsed[0] != self.mode:
            raise ResolutionError(f"Invalid file ref: {ref!r}", details={"ref": ref})
        _, filename = parsed
        path = self.base_dir / filename
        try:
            st = await aiofiles.os.stat(path)
        except FileNotFoundError as exc:
            raise ResolutionError(f"File not found for ref: {ref!r}", details={"ref": ref}) from exc
        # "." and ".." pass the ref pattern but stat as directories.
        if not stat.S_ISREG(st.st_mode):
            raise ResolutionError(f"Invalid file ref: {ref!r} is not a regular file", details={"ref": ref})
        logger.debug("Decoded ref %s (%d bytes)", ref, st.st_size)
        return FileFieldValue(mode=self.mode, filename=filename, filesize=st.st_size)

    async def ingest_from_stream(self, stream: BinaryIO, filename: str) -> FileFieldValue:
        stored_name = generate_safe_filename(filename)
        path = self.base_dir / stored_name
        size = 0
        try:
            async with aiofiles.open(path, "wb") as f:
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    await f.write(chunk)
                    size += len(chunk)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise ResolutionError(f"Failed to store upload {filename!r}: {exc}") from exc
        except BaseException:
            # Cancellation or a stream error: leave no orphaned partial file.
            path.unlink(missing_ok=True)
            raise
        logger.info("Stored upload %s as %s (%d bytes)", filename, stored_name, size)
        return FileFieldValue(mode=self.mode, filename=stored_name, filesize=size)

    def get_src(self, mode: FileMode, filename: str) -> str:
        return f"{self.base_url}/{filename}"
