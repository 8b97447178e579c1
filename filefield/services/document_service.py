from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from filefield.fields.types import OUTPUT_FIELDS, FileFieldInput, FileFieldOutput
from filefield.models.document import ATTACHMENT_FIELD, Document
from filefield.repositories.base import DocumentRepository
from filefield.storage.base import FileStorage

logger = logging.getLogger(__name__)

AttachmentInput = FileFieldInput | Mapping[str, Any] | None


class DocumentService:
    def __init__(self, repo: DocumentRepository) -> None:
        self.repo = repo
        self.field = ATTACHMENT_FIELD

    async def create_document(self, title: str, attachment: AttachmentInput, storage: FileStorage | None) -> Document:
        """Validate and resolve the attachment, then insert the document."""
        if not title.strip():
            raise ValueError("Document title is required")
        data = self.field.validate_input(attachment, "create")
        value = await self.field.resolve_input(data, storage)
        document = self.repo.create(Document(title=title.strip()), value)
        logger.info("Document created: uuid=%s attachment=%s", document.uuid, value.filename)
        return document

    async def update_attachment(
        self, document: Document, attachment: AttachmentInput, storage: FileStorage | None
    ) -> Document:
        """Replace (or clear, with ``None``) the document's attachment."""
        if document.id is None:
            raise ValueError("Cannot update document without an id")
        data = self.field.validate_input(attachment, "update")
        value = await self.field.resolve_input(data, storage)
        self.repo.update_attachment(document.id, value)
        logger.info("Document attachment updated: uuid=%s attachment=%s", document.uuid, value.filename)
        updated = self.repo.get_by_id(document.id)
        if updated is None:
            raise RuntimeError(f"Document disappeared during update (id={document.id})")
        return updated

    def get_attachment(self, document: Document) -> FileFieldOutput | None:
        return self.field.output_from_row(document.model_dump())

    def describe_attachment(
        self,
        document: Document,
        fields: Iterable[str] = OUTPUT_FIELDS,
        storage: FileStorage | None = None,
    ) -> dict[str, Any] | None:
        output = self.get_attachment(document)
        if output is None:
            return None
        return output.select(fields, storage)

    def list_documents(self) -> list[Document]:
        return self.repo.list_all()

    def get_document(self, uuid: str) -> Document | None:
        return self.repo.get_by_uuid(uuid)

    def delete_document(self, document: Document) -> None:
        if document.id is None:
            raise ValueError("Cannot delete document without an id")
        self.repo.delete(document.id)
        logger.info("Document deleted: uuid=%s", document.uuid)
