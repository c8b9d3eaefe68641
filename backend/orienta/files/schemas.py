"""Pydantic schemas for uploaded files.

This module defines the data models for attachments sent with a chat turn:
- StagedFile: an upload whose bytes already sit in the staging directory
- FileKind: closed set of content kinds the extractor knows about

Staged files live for a single request; the staging scope deletes them when
the request finishes.
"""
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class FileKind(str, Enum):
    """Content kinds understood by the extractor.

    Files are categorized by declared media type into these groups:
    - TEXT: text/plain
    - PDF: application/pdf
    - WORD: legacy .doc and modern .docx
    - IMAGE: JPEG, PNG
    - UNSUPPORTED: anything else
    """
    TEXT = "text"
    PDF = "pdf"
    WORD = "word"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_media_type(cls, media_type: str) -> "FileKind":
        """Map a declared media type onto a FileKind.

        Parameters such as ``; charset=utf-8`` are ignored.
        """
        base = (media_type or "").split(";", 1)[0].strip().lower()
        return _MEDIA_TYPE_KINDS.get(base, cls.UNSUPPORTED)


_MEDIA_TYPE_KINDS = {
    "text/plain": FileKind.TEXT,
    "application/pdf": FileKind.PDF,
    "application/msword": FileKind.WORD,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": FileKind.WORD,
    "image/jpeg": FileKind.IMAGE,
    "image/jpg": FileKind.IMAGE,
    "image/png": FileKind.IMAGE,
}


class StagedFile(BaseModel):
    """An uploaded file whose bytes have been written to the staging directory.

    Attributes:
        original_name: Filename as sent by the client (used in prompts).
        media_type: Declared MIME type.
        size_bytes: Number of bytes staged.
        path: Location of the staged bytes.
        field_name: Multipart field the file arrived under.
    """
    model_config = ConfigDict(frozen=True)

    original_name: str = Field(..., description="Original filename")
    media_type: str = Field(..., description="Declared MIME type")
    size_bytes: int = Field(..., ge=0, description="File size in bytes")
    path: Path = Field(..., description="Staged location on disk")
    field_name: str = Field(default="file", description="Multipart field name")

    @property
    def kind(self) -> FileKind:
        return FileKind.from_media_type(self.media_type)
