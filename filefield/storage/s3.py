from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from filefield.errors import ResolutionError
from filefield.models.file import FileFieldValue, FileMode
from filefield.storage.base import FileStorage
from filefield.storage.refs import generate_safe_filename, parse_file_ref

logger = logging.getLogger(__name__)


class _CountingReader:
    """File-like wrapper that counts the bytes read through it."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self.stream.read(size)
        self.bytes_read += len(chunk)
        return chunk


class S3Storage(FileStorage):
    mode = FileMode.S3

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        endpoint_url: str = "",
        presigned_expiry: int = 604800,
        prefix: str = "",
    ) -> None:
        self.bucket = bucket
        self.presigned_expiry = presigned_expiry
        self.prefix = prefix.strip("/")

        client_kwargs: dict = {
            "service_name": "s3",
            "region_name": region,
            "aws_access_key_id": access_key_id,
            "aws_secret_access_key": secret_access_key,
        }
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url

        self.client = boto3.client(**client_kwargs)

    def _key(self, filename: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{filename}"
        return filename

    async def decode_reference(self, ref: str) -> FileFieldValue:
        parsed = parse_file_ref(ref)
        if parsed is None or parsed[0] != self.mode:
            raise ResolutionError(f"Invalid file ref: {ref!r}", details={"ref": ref})
        _, filename = parsed
        try:
            head = await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=self._key(filename))
        except (BotoCoreError, ClientError) as exc:
            raise ResolutionError(f"File not found for ref: {ref!r}", details={"ref": ref}) from exc
        return FileFieldValue(mode=self.mode, filename=filename, filesize=head["ContentLength"])

    async def ingest_from_stream(self, stream: BinaryIO, filename: str) -> FileFieldValue:
        stored_name = generate_safe_filename(filename)
        key = self._key(stored_name)
        reader = _CountingReader(stream)
        try:
            await asyncio.to_thread(self.client.upload_fileobj, reader, self.bucket, key)
        except (BotoCoreError, ClientError) as exc:
            raise ResolutionError(f"Failed to upload {filename!r} to s3://{self.bucket}/{key}") from exc
        logger.info("Uploaded %s to s3://%s/%s (%d bytes)", filename, self.bucket, key, reader.bytes_read)
        return FileFieldValue(mode=self.mode, filename=stored_name, filesize=reader.bytes_read)

    def get_src(self, mode: FileMode, filename: str) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": self._key(filename)},
            ExpiresIn=self.presigned_expiry,
        )
