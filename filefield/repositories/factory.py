from filefield.repositories.base import DocumentRepository


def get_document_repository() -> DocumentRepository:
    from filefield.db import get_connection
    from filefield.repositories.sqlalchemy import SQLAlchemyDocumentRepository

    return SQLAlchemyDocumentRepository(get_connection())
