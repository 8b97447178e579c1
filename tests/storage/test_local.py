import asyncio
import io
from unittest.mock import patch

import pytest

from filefield.errors import ResolutionError
from filefield.models.file import FileFieldValue, FileMode
from filefield.storage.local import LocalStorage


class _FailingStream(io.BytesIO):
    def read(self, size=-1):
        if self.tell() > 0:
            raise OSError("connection reset")
        return super().read(size)


class _CancelledStream(io.BytesIO):
    def read(self, size=-1):
        if self.tell() > 0:
            raise asyncio.CancelledError()
        return super().read(size)


class _BrokenStream(io.BytesIO):
    def read(self, size=-1):
        if self.tell() > 0:
            raise ValueError("I/O operation on closed file")
        return super().read(size)


class TestLocalStorage:
    def test_creates_base_dir(self, tmp_path):
        new_dir = tmp_path / "new_dir"
        LocalStorage(str(new_dir))
        assert new_dir.exists()

    @pytest.mark.asyncio
    async def test_ingest_writes_file(self, local_storage):
        stream = io.BytesIO(b"hello world")
        value = await local_storage.ingest_from_stream(stream, "f.txt")

        assert value.mode == FileMode.LOCAL
        assert value.filesize == 11
        assert value.filename.startswith("f-")
        assert value.filename.endswith(".txt")
        assert (local_storage.base_dir / value.filename).read_bytes() == b"hello world"
        assert stream.read() == b""

    @pytest.mark.asyncio
    async def test_ingest_in_chunks(self, tmp_path):
        storage = LocalStorage(str(tmp_path), chunk_size=4)
        data = bytes(range(256)) * 3
        value = await storage.ingest_from_stream(io.BytesIO(data), "blob.bin")
        assert value.filesize == len(data)
        assert (tmp_path / value.filename).read_bytes() == data

    @pytest.mark.asyncio
    async def test_ingest_empty_stream(self, local_storage):
        value = await local_storage.ingest_from_stream(io.BytesIO(b""), "empty.txt")
        assert value.filesize == 0
        assert (local_storage.base_dir / value.filename).exists()

    @pytest.mark.asyncio
    async def test_ingest_failure_removes_partial_file(self, tmp_path):
        storage = LocalStorage(str(tmp_path), chunk_size=2)
        with pytest.raises(ResolutionError, match="Failed to store upload"):
            await storage.ingest_from_stream(_FailingStream(b"abcdef"), "f.txt")
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_cancelled_ingest_removes_partial_file(self, tmp_path):
        storage = LocalStorage(str(tmp_path), chunk_size=2)
        with pytest.raises(asyncio.CancelledError):
            await storage.ingest_from_stream(_CancelledStream(b"abcdef"), "f.txt")
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_stream_error_removes_partial_file(self, tmp_path):
        storage = LocalStorage(str(tmp_path), chunk_size=2)
        with pytest.raises(ValueError, match="closed file"):
            await storage.ingest_from_stream(_BrokenStream(b"abcdef"), "f.txt")
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_decode_reference_directory(self, local_storage):
        (local_storage.base_dir / "nested").mkdir()
        with pytest.raises(ResolutionError, match="not a regular file"):
            await local_storage.decode_reference("local:file:nested")


    @pytest.mark.asyncio
    async def test_decode_reference(self, local_storage):
        (local_storage.base_dir / "a.png").write_bytes(b"x" * 100)
        value = await local_storage.decode_reference("local:file:a.png")
        assert value == FileFieldValue(mode=FileMode.LOCAL, filename="a.png", filesize=100)

    @pytest.mark.asyncio
    async def test_decode_reference_missing_file(self, local_storage):
        with pytest.raises(ResolutionError, match="File not found"):
            await local_storage.decode_reference("local:file:missing.png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ref", ["garbage", "local:file:../secret", "s3:file:a.png", "local:file:.", "local:file:.."])
    async def test_decode_reference_invalid(self, local_storage, ref):
        with pytest.raises(ResolutionError, match="Invalid file ref"):
            await local_storage.decode_reference(ref)

    @pytest.mark.asyncio
    async def test_ref_round_trip(self, local_storage):
        value = await local_storage.ingest_from_stream(io.BytesIO(b"12345"), "f.txt")
        ref = local_storage.format_reference(value.mode, value.filename)
        assert ref == f"local:file:{value.filename}"
        assert await local_storage.decode_reference(ref) == value

    def test_get_src(self, local_storage):
        assert local_storage.get_src(FileMode.LOCAL, "a.png") == "https://cdn.example.com/files/a.png"

    def test_get_src_default_base_url(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        assert storage.get_src(FileMode.LOCAL, "a.png") == "/files/a.png"

    @pytest.mark.asyncio
    async def test_ingest_logs(self, local_storage, caplog):
        with caplog.at_level("INFO", logger="filefield.storage.local"):
            await local_storage.ingest_from_stream(io.BytesIO(b"abc"), "f.txt")
        assert "Stored upload f.txt" in caplog.text

    @pytest.mark.asyncio
    async def test_write_error_wrapped(self, local_storage):
        with patch("filefield.storage.local.aiofiles.open", side_effect=PermissionError("read-only")):
            with pytest.raises(ResolutionError, match="read-only"):
                await local_storage.ingest_from_stream(io.BytesIO(b"abc"), "f.txt")
