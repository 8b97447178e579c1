from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from ulid import ULID

from filefield.models.document import ATTACHMENT_FIELD, Document
from filefield.models.file import FileFieldValue
from filefield.repositories.base import DocumentRepository


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SQLAlchemyDocumentRepository(DocumentRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_document(row: RowMapping) -> Document:
        return Document(
            id=row["id"],
            uuid=row["uuid"],
            title=row["title"],
            attachment_filename=row["attachment_filename"],
            attachment_filesize=row["attachment_filesize"],
            attachment_mode=row["attachment_mode"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def create(self, document: Document, attachment: FileFieldValue) -> Document:
        now = _now()
        result = self.conn.execute(
            text(
                "INSERT INTO documents (uuid, title, attachment_filename, attachment_filesize, attachment_mode, "
                "created_at, updated_at) "
                "VALUES (:uuid, :title, :attachment_filename, :attachment_filesize, :attachment_mode, "
                ":created_at, :updated_at)"
            ),
            {
                "uuid": str(ULID()),
                "title": document.title,
                **ATTACHMENT_FIELD.to_columns(attachment),
                "created_at": now,
                "updated_at": now,
            },
        )
        self.conn.commit()
        document_id = result.lastrowid
        created = self.get_by_id(document_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve document after create (id={document_id})")
        return created

    def get_by_id(self, document_id: int) -> Document | None:
        row = (
            self.conn.execute(text("SELECT * FROM documents WHERE id = :id"), {"id": document_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_document(row)

    def get_by_uuid(self, uuid: str) -> Document | None:
        row = (
            self.conn.execute(text("SELECT * FROM documents WHERE uuid = :uuid"), {"uuid": uuid})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_document(row)

    def list_all(self) -> list[Document]:
        rows = self.conn.execute(text("SELECT * FROM documents ORDER BY id DESC")).mappings().fetchall()
        return [self._row_to_document(row) for row in rows]

    def update_attachment(self, document_id: int, attachment: FileFieldValue) -> None:
        self.conn.execute(
            text(
                "UPDATE documents SET attachment_filename = :attachment_filename, "
                "attachment_filesize = :attachment_filesize, attachment_mode = :attachment_mode, "
                "updated_at = :updated_at WHERE id = :id"
            ),
            {**ATTACHMENT_FIELD.to_columns(attachment), "updated_at": _now(), "id": document_id},
        )
        self.conn.commit()

    def delete(self, document_id: int) -> None:
        self.conn.execute(text("DELETE FROM documents WHERE id = :id"), {"id": document_id})
        self.conn.commit()
