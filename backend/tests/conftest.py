"""Shared test fixtures and configuration for backend tests."""
import threading
import time
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from orienta.ai_provider.base import AIProvider
from orienta.ai_provider.prompts import SYSTEM_PROMPT
from orienta.chat.manager import ConversationManager
from orienta.chat.service import ChatService, set_chat_service
from orienta.chat.store import SessionStore
from orienta.files.schemas import StagedFile
from orienta.files.staging import UploadStaging, set_upload_staging
from orienta.main import app


class FakeProvider(AIProvider):
    """In-process completion provider recording every transcript it receives.

    Args:
        reply: Text returned by every call (a counter suffix is appended).
        fail_with: Exception raised instead of replying.
        delay: Seconds to sleep inside ``complete`` (runs in a worker thread).
    """

    name = "fake"

    def __init__(
        self,
        reply: str = "respuesta",
        fail_with: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.reply = reply
        self.fail_with = fail_with
        self.delay = delay
        self.calls: List[dict] = []
        self._lock = threading.Lock()

    def health_check(self) -> bool:
        return True

    def complete(self, messages, max_tokens: int = 600) -> str:
        with self._lock:
            self.calls.append({"messages": [dict(m) for m in messages], "max_tokens": max_tokens})
            n = len(self.calls)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return f"{self.reply} {n}"


class FakeUpload:
    """Stands in for ``fastapi.UploadFile``; honours ``read(size)`` like the real one."""

    def __init__(self, filename, content_type, content: bytes) -> None:
        self.filename = filename
        self.content_type = content_type
        self._content = content
        self._offset = 0
        self.bytes_read = 0

    async def read(self, size: int = -1) -> bytes:
        end = len(self._content) if size < 0 else self._offset + size
        chunk = self._content[self._offset:end]
        self._offset += len(chunk)
        self.bytes_read += len(chunk)
        return chunk


def make_staged(
    directory: Path,
    name: str,
    media_type: str,
    content: bytes = b"",
    size_bytes: Optional[int] = None,
) -> StagedFile:
    """Write ``content`` under ``directory`` and describe it as a staged upload."""
    path = directory / f"staged-{name}"
    path.write_bytes(content)
    return StagedFile(
        original_name=name,
        media_type=media_type,
        size_bytes=len(content) if size_bytes is None else size_bytes,
        path=path,
    )


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def store():
    return SessionStore(system_prompt=SYSTEM_PROMPT)


@pytest.fixture
def manager(store, fake_provider):
    return ConversationManager(store=store, provider=fake_provider)


@pytest.fixture
def staging(tmp_path):
    staging = UploadStaging(str(tmp_path / "uploads"), max_file_size_bytes=10 * 1024 * 1024)
    staging.ensure_upload_dir()
    return staging


@pytest.fixture
def chat_service(manager, staging):
    return ChatService(manager=manager, staging=staging)


@pytest.fixture
def api_client(chat_service, staging):
    """Provide a TestClient for the main FastAPI app wired to test doubles.

    The lifespan is not run, so the globals are installed by hand and reset
    afterwards.
    """
    set_chat_service(chat_service)
    set_upload_staging(staging)
    yield TestClient(app)
    set_chat_service(None)
    set_upload_staging(None)
