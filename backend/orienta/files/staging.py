"""Scoped staging of uploaded files.

Uploaded bytes are written into one process-wide staging directory:
    uploads/{field}-{epoch_ms}-{random}{ext}

``UploadStaging.stage()`` is an async context manager: every file staged
inside the block is deleted when the block exits, whether the request
succeeded, failed validation or hit a provider error. Deletion failures are
logged and never propagate.
"""
import asyncio
import logging
import random
import re
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional, Protocol, Sequence, Tuple

from orienta.errors import Quota, QuotaExceededError

from .schemas import StagedFile
from .validator import format_size

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_MAX_NAME_ATTEMPTS = 5
_CHUNK_SIZE = 1024 * 1024


class IncomingUpload(Protocol):
    """The subset of ``fastapi.UploadFile`` the stager relies on."""
    filename: Optional[str]
    content_type: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


def _write_new(path: Path, content: bytes) -> None:
    # "xb" refuses to clobber a file staged concurrently under the same name
    with path.open("xb") as fh:
        fh.write(content)


class UploadStaging:
    """Writes uploads to the staging directory and removes them afterwards.

    Args:
        upload_dir: Directory shared by all requests for staged bytes.
        max_file_size_bytes: Per-file cap enforced while reading; None disables it.
    """

    def __init__(
        self,
        upload_dir: str = "uploads",
        max_file_size_bytes: Optional[int] = None,
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_file_size_bytes = max_file_size_bytes

    def ensure_upload_dir(self) -> None:
        """Ensure the staging directory exists."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def unique_name(self, field_name: str, original_name: str) -> str:
        """Build a collision-resistant filename keeping the original extension."""
        field = _UNSAFE_CHARS.sub("", field_name or "") or "file"
        ext = Path(original_name or "").suffix.lower()
        if ext and _UNSAFE_CHARS.sub("", ext[1:]) != ext[1:]:
            ext = ""
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{field}-{suffix}{ext}"

    async def _read_limited(self, upload: IncomingUpload, original_name: str) -> bytes:
        """Read an upload in chunks, stopping as soon as it passes the size cap.

        Raises:
            QuotaExceededError: With ``Quota.FILE_SIZE``.
        """
        limit = self.max_file_size_bytes
        chunks: List[bytes] = []
        total = 0
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if limit is not None and total > limit:
                logger.info(f"Rejected file {original_name}: more than {limit} bytes")
                raise QuotaExceededError(
                    Quota.FILE_SIZE, limit=format_size(limit), filename=original_name
                )
            chunks.append(chunk)
        return b"".join(chunks)

    async def _stage_one(self, field_name: str, upload: IncomingUpload) -> StagedFile:
        original_name = upload.filename or "unnamed"
        content = await self._read_limited(upload, original_name)
        loop = asyncio.get_running_loop()

        for _ in range(_MAX_NAME_ATTEMPTS):
            path = self.upload_dir / self.unique_name(field_name, original_name)
            try:
                await loop.run_in_executor(None, _write_new, path, content)
                break
            except FileExistsError:
                continue
        else:
            raise FileExistsError(f"Could not allocate a staging name for {original_name}")

        logger.info(f"Staged file: {path} ({len(content)} bytes)")
        return StagedFile(
            original_name=original_name,
            media_type=upload.content_type or "application/octet-stream",
            size_bytes=len(content),
            path=path,
            field_name=field_name or "file",
        )

    @asynccontextmanager
    async def stage(
        self, uploads: Sequence[Tuple[str, IncomingUpload]]
    ) -> AsyncIterator[List[StagedFile]]:
        """Stage ``(field_name, upload)`` pairs for the duration of the block.

        Yields:
            List[StagedFile]: Staged files in upload order.
        """
        staged: List[StagedFile] = []
        try:
            self.ensure_upload_dir()
            for field_name, upload in uploads:
                staged.append(await self._stage_one(field_name, upload))
            yield staged
        finally:
            await self.release(staged)

    async def release(self, files: Sequence[StagedFile]) -> int:
        """Delete staged files, best-effort.

        Returns:
            Number of files actually deleted.
        """
        loop = asyncio.get_running_loop()
        deleted = 0
        for file in files:
            try:
                await loop.run_in_executor(None, file.path.unlink)
                deleted += 1
            except OSError as e:
                logger.error(f"Error deleting staged file {file.path}: {e}")
        return deleted

    def resolve(self, filename: str) -> Optional[Path]:
        """Find a staged file by bare filename.

        Names containing path components are refused so callers cannot read
        outside the staging directory.

        Returns:
            Path to the file, or None if it does not exist or the name is unsafe.
        """
        if not filename or Path(filename).name != filename or filename.startswith("."):
            return None
        path = self.upload_dir / filename
        if path.resolve().parent != self.upload_dir.resolve():
            return None
        if not path.is_file():
            return None
        return path


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_staging: Optional[UploadStaging] = None


def get_upload_staging() -> UploadStaging:
    """Return the global UploadStaging, creating it from config on first use."""
    global _staging
    if _staging is None:
        from orienta.config import get_config  # local import to avoid circular deps
        uploads = get_config().uploads
        _staging = UploadStaging(uploads.upload_dir, uploads.max_file_size_bytes)
    return _staging


def set_upload_staging(staging: Optional[UploadStaging]) -> None:
    """Set (or reset) the global UploadStaging instance."""
    global _staging
    _staging = staging
