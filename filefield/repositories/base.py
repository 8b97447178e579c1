from abc import ABC, abstractmethod

from filefield.models.document import Document
from filefield.models.file import FileFieldValue


class DocumentRepository(ABC):
    @abstractmethod
    def create(self, document: Document, attachment: FileFieldValue) -> Document: ...

    @abstractmethod
    def get_by_id(self, document_id: int) -> Document | None: ...

    @abstractmethod
    def get_by_uuid(self, uuid: str) -> Document | None: ...

    @abstractmethod
    def list_all(self) -> list[Document]: ...

    @abstractmethod
    def update_attachment(self, document_id: int, attachment: FileFieldValue) -> None: ...

    @abstractmethod
    def delete(self, document_id: int) -> None: ...
