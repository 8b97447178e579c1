import logging

from filefield.errors import ConfigurationError
from filefield.models.file import FileMode
from filefield.settings import settings
from filefield.storage.base import FileStorage
from filefield.storage.registry import StorageRegistry

logger = logging.getLogger(__name__)


def get_storage() -> StorageRegistry:
    """Build the storage backends described by settings.

    Local storage is always registered so existing ``local`` files stay
    readable; S3 is registered once a bucket is configured.
    """
    try:
        default_mode = FileMode(settings.storage_backend)
    except ValueError as exc:
        raise ConfigurationError(f"Unsupported storage backend: {settings.storage_backend}") from exc

    backends: dict[FileMode, FileStorage] = {}

    from filefield.storage.local import LocalStorage

    backends[FileMode.LOCAL] = LocalStorage(
        settings.storage_local_path,
        base_url=settings.storage_local_base_url,
        chunk_size=settings.upload_chunk_size,
    )

    if settings.s3_bucket:
        from filefield.storage.s3 import S3Storage

        logger.info("Registering s3 storage bucket=%s", settings.s3_bucket)
        backends[FileMode.S3] = S3Storage(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            endpoint_url=settings.s3_endpoint_url,
            presigned_expiry=settings.s3_presigned_expiry,
            prefix=settings.storage_prefix,
        )

    logger.info("Using storage backend: %s", default_mode.value)
    return StorageRegistry(backends, default_mode)
