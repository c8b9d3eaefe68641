"""File upload handling for chat turns.

Uploads are staged in a shared directory, validated against an allow-list
and per-request quotas, reduced to a text excerpt and deleted when the
request finishes.

Supported file types:
- Text: txt
- Documents: pdf, doc, docx
- Images: jpg, jpeg, png
- At most 5 files per request, 10MB each
"""
from .extractor import ContentExtractor, KindExtractor, PlaceholderExtractor, PlainTextExtractor
from .schemas import FileKind, StagedFile
from .staging import UploadStaging, get_upload_staging, set_upload_staging
from .validator import FileValidator

__all__ = [
    "ContentExtractor",
    "KindExtractor",
    "PlaceholderExtractor",
    "PlainTextExtractor",
    "FileKind",
    "StagedFile",
    "UploadStaging",
    "get_upload_staging",
    "set_upload_staging",
    "FileValidator",
]
