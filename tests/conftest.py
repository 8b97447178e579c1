"""Root conftest: in-memory SQLite schema, a fake storage backend and upload helpers."""

from __future__ import annotations

from typing import BinaryIO

import pytest
from sqlalchemy import Connection, create_engine, text
from sqlalchemy.engine import Engine

from filefield.errors import ResolutionError
from filefield.models.file import FileFieldValue, FileMode
from filefield.storage.base import FileStorage
from filefield.storage.local import LocalStorage
from filefield.storage.refs import parse_file_ref

# Matches Alembic head: 3f1c9a2b7d4e (create documents)
SCHEMA_DDL = """
CREATE TABLE documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    title TEXT NOT NULL,
    attachment_filesize INTEGER,
    attachment_mode VARCHAR(20),
    attachment_filename VARCHAR(255),
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);
"""


class InMemoryStorage(FileStorage):
    """Keeps ingested bytes in a dict; stored names are ``<n>-<advertised name>``."""

    mode = FileMode.LOCAL

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.ingest_calls = 0

    async def decode_reference(self, ref: str) -> FileFieldValue:
        parsed = parse_file_ref(ref)
        if parsed is None or parsed[1] not in self.files:
            raise ResolutionError(f"Unknown ref {ref!r}")
        mode, filename = parsed
        return FileFieldValue(mode=mode, filename=filename, filesize=len(self.files[filename]))

    async def ingest_from_stream(self, stream: BinaryIO, filename: str) -> FileFieldValue:
        self.ingest_calls += 1
        data = stream.read()
        stored_name = f"{self.ingest_calls}-{filename}"
        self.files[stored_name] = data
        return FileFieldValue(mode=self.mode, filename=stored_name, filesize=len(data))

    def get_src(self, mode: FileMode, filename: str) -> str:
        return f"memory://{mode.value}/{filename}"


@pytest.fixture()
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(str(tmp_path / "files"), base_url="https://cdn.example.com/files/")


@pytest.fixture()
def db_engine() -> Engine:
    return create_engine("sqlite:///:memory:")


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()
