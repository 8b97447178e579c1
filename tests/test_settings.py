import os

from filefield.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in list(os.environ):
            if key.startswith("FILEFIELD_"):
                monkeypatch.delenv(key, raising=False)
        s = Settings(_env_file=None)
        assert s.db_url == "sqlite:///filefield.db"
        assert s.storage_backend == "local"
        assert s.storage_local_base_url == "/files"
        assert s.s3_presigned_expiry == 604800
        assert s.upload_chunk_size == 64 * 1024
        assert s.log_json is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FILEFIELD_STORAGE_BACKEND", "s3")
        monkeypatch.setenv("FILEFIELD_S3_BUCKET", "uploads")
        monkeypatch.setenv("FILEFIELD_UPLOAD_CHUNK_SIZE", "1024")
        s = Settings(_env_file=None)
        assert s.storage_backend == "s3"
        assert s.s3_bucket == "uploads"
        assert s.upload_chunk_size == 1024
