"""Metadata checks for uploaded files.

The validator never touches the filesystem: it only inspects the declared
media type, the staged size and the number of files in the request.
"""
import logging
from typing import Optional

from orienta.config import UploadSettings
from orienta.errors import FileTypeError, Quota, QuotaExceededError

from .schemas import StagedFile

logger = logging.getLogger(__name__)


def format_size(size_bytes: int) -> str:
    mib = size_bytes / (1024 * 1024)
    return f"{mib:g}MB"


class FileValidator:
    """Accepts or rejects uploads against the allow-list and quotas.

    Args:
        settings: Upload limits and allowed media types.
    """

    def __init__(self, settings: Optional[UploadSettings] = None) -> None:
        self.settings = settings or UploadSettings()
        self._allowed = {t.lower() for t in self.settings.allowed_media_types}

    @property
    def max_files(self) -> int:
        return self.settings.max_files

    @property
    def max_file_size_bytes(self) -> int:
        return self.settings.max_file_size_bytes

    def is_allowed_type(self, media_type: str) -> bool:
        base = (media_type or "").split(";", 1)[0].strip().lower()
        return base in self._allowed

    def check_count(self, count: int) -> None:
        """Reject a batch that carries more files than allowed.

        Raises:
            QuotaExceededError: With ``Quota.FILE_COUNT``.
        """
        if count > self.max_files:
            logger.info(f"Rejected upload batch: {count} files (max {self.max_files})")
            raise QuotaExceededError(Quota.FILE_COUNT, limit=str(self.max_files))

    def validate(self, file: StagedFile) -> None:
        """Validate one staged file.

        Size is checked before type so an oversized file aborts the batch
        even when its type is also invalid.

        Raises:
            QuotaExceededError: With ``Quota.FILE_SIZE`` if the file is too large.
            FileTypeError: If the declared media type is not allowed.
        """
        if file.size_bytes > self.max_file_size_bytes:
            logger.info(
                f"Rejected file {file.original_name}: {file.size_bytes} bytes "
                f"(max {self.max_file_size_bytes})"
            )
            raise QuotaExceededError(
                Quota.FILE_SIZE,
                limit=format_size(self.max_file_size_bytes),
                filename=file.original_name,
            )
        if not self.is_allowed_type(file.media_type):
            logger.info(f"Rejected file {file.original_name}: type {file.media_type} not allowed")
            raise FileTypeError(file.original_name, file.media_type)
