"""ChatService: the operations exposed to the HTTP layer.

Two chat entry points share one ConversationManager:
    - ``chat``: multipart, accepts up to 5 attachments
    - ``chat_text``: text only, requires a message
plus ``clear`` to forget a session. A module-level singleton is initialised
in ``orienta/main.py`` from config.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from orienta.ai_provider.base import AIProvider
from orienta.ai_provider.prompts import FALLBACK_MESSAGE, SYSTEM_PROMPT
from orienta.config import OrientaConfig
from orienta.errors import ChatError, InvalidRequestError
from orienta.files.extractor import ContentExtractor
from orienta.files.staging import IncomingUpload, UploadStaging
from orienta.files.validator import FileValidator

from .manager import ConversationManager
from .schemas import ChatResult, Turn
from .store import SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_service: Optional["ChatService"] = None


def get_chat_service() -> Optional["ChatService"]:
    """Return the global ChatService, or None if not yet initialised."""
    return _service


def set_chat_service(service: Optional["ChatService"]) -> None:
    """Set (or replace) the global ChatService instance."""
    global _service
    _service = service


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ChatService:
    """Public chat operations over a ConversationManager.

    Args:
        manager: Turn orchestration.
        staging: Scoped staging for attachments.
        max_tokens: Response budget for text-only turns.
        max_tokens_with_files: Response budget for the multipart entry point.
    """

    def __init__(
        self,
        manager: ConversationManager,
        staging: UploadStaging,
        max_tokens: int = 600,
        max_tokens_with_files: int = 800,
    ) -> None:
        self.manager = manager
        self.staging = staging
        self.max_tokens = max_tokens
        self.max_tokens_with_files = max_tokens_with_files

    @property
    def store(self) -> SessionStore:
        return self.manager.store

    async def chat(
        self,
        session_id: str,
        message: Optional[str],
        uploads: Sequence[Tuple[str, IncomingUpload]] = (),
    ) -> ChatResult:
        """Handle a turn that may carry attachments.

        Staged bytes are deleted when this call returns or raises.

        Args:
            session_id: Caller-chosen session identifier.
            message: Optional user text.
            uploads: ``(field_name, upload)`` pairs from the multipart body.

        Raises:
            ChatError: Any error of the chat taxonomy.
        """
        if not message and not uploads:
            raise InvalidRequestError()
        # Count is metadata only; refuse oversized batches before writing anything
        self.manager.validator.check_count(len(uploads))

        async with self.staging.stage(uploads) as files:
            return await self.manager.handle_turn(
                session_id, message, files, max_tokens=self.max_tokens_with_files
            )

    async def chat_text(self, session_id: str, message: Optional[str]) -> ChatResult:
        """Handle a text-only turn.

        Raises:
            InvalidRequestError: If the message is empty.
            CompletionError: If the provider call fails.
        """
        if not message:
            raise InvalidRequestError("Message is required")
        return await self.manager.handle_turn(
            session_id, message, (), max_tokens=self.max_tokens
        )

    async def clear(self, session_id: Optional[str]) -> bool:
        """Forget a session. Always reports success."""
        if session_id:
            async with self.store.lock(session_id):
                self.store.clear(session_id)
        return True

    def history(self, session_id: str) -> List[Turn]:
        """Return a copy of a session's transcript without creating it."""
        if not self.store.exists(session_id):
            return []
        return self.store.get_or_create(session_id)

    @staticmethod
    def to_error_payload(exc: Exception) -> Tuple[int, Dict[str, str]]:
        """Map an exception to the ``(status, body)`` the front-end expects.

        Chat errors keep their own status and message; anything else is
        answered with the fallback apology so internals never leak.
        """
        if isinstance(exc, ChatError):
            return exc.status_code, {"error": exc.message}
        return 500, {"error": FALLBACK_MESSAGE}


def build_chat_service(
    config: OrientaConfig,
    provider: Optional[AIProvider],
    staging: Optional[UploadStaging] = None,
    extractor: Optional[ContentExtractor] = None,
) -> ChatService:
    """Assemble a ChatService from configuration.

    Args:
        config: Application configuration.
        provider: Resolved completion provider (None if none is usable).
        staging: Optional staging override; defaults to ``uploads.upload_dir``.
        extractor: Optional extractor with custom back-ends registered.
    """
    store = SessionStore(
        system_prompt=SYSTEM_PROMPT,
        max_length=config.history.max_length,
        keep_recent=config.history.keep_recent,
    )
    manager = ConversationManager(
        store=store,
        provider=provider,
        validator=FileValidator(config.uploads),
        extractor=extractor or ContentExtractor(),
        excerpt_chars=config.uploads.excerpt_chars,
        timeout_seconds=config.completion.timeout_seconds,
    )
    return ChatService(
        manager=manager,
        staging=staging or UploadStaging(
            config.uploads.upload_dir, config.uploads.max_file_size_bytes
        ),
        max_tokens=config.completion.max_tokens,
        max_tokens_with_files=config.completion.max_tokens_with_files,
    )
