from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="FILEFIELD_", extra="ignore")

    db_url: str = "sqlite:///filefield.db"

    storage_backend: str = "local"
    storage_local_path: str = "./files"
    storage_local_base_url: str = "/files"
    storage_prefix: str = "files"

    s3_bucket: str = ""
    s3_region: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_endpoint_url: str = ""
    s3_presigned_expiry: int = 604800  # 7 days in seconds

    upload_chunk_size: int = 64 * 1024

    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
