from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from filefield.fields.file import file_field

ATTACHMENT_FIELD = file_field("attachment")


class Document(BaseModel):
    id: int | None = None
    uuid: str = ""
    title: str
    attachment_filename: str | None = None
    attachment_filesize: int | None = None
    attachment_mode: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
