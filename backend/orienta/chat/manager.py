"""Conversation orchestration for one chat turn.

The ConversationManager decides what context reaches the completion
provider: it validates attachments, folds their excerpts into the user turn,
sends the full session transcript, records the reply and trims old turns.

Turn flow:
    1. Reject requests with neither a message nor files.
    2. Check the batch against upload quotas; skip files of disallowed type.
    3. Under the session lock: create the session if needed, extract file
       text, append the user turn.
    4. Call the provider with the whole transcript (off the event loop,
       bounded by a timeout).
    5. On success append the assistant turn and truncate. On failure leave
       the user turn in place and raise CompletionError.

Staged file cleanup is not done here; the caller owns the staging scope.
"""
import asyncio
import functools
import logging
from typing import List, Optional, Sequence

from orienta.ai_provider.base import AIProvider
from orienta.ai_provider.prompts import compose_user_content, format_file_section
from orienta.errors import CompletionError, FileTypeError, InvalidRequestError
from orienta.files.extractor import ContentExtractor
from orienta.files.schemas import StagedFile
from orienta.files.validator import FileValidator

from .schemas import ChatResult, Role, Turn
from .store import SessionStore

logger = logging.getLogger(__name__)

# Default timeout for completion calls (in seconds)
DEFAULT_TIMEOUT_SECONDS = 60.0

# Maximum characters of extracted text folded into a user turn per file
DEFAULT_EXCERPT_CHARS = 2000


class ConversationManager:
    """Runs chat turns against a SessionStore and a completion provider.

    Args:
        store: Session transcripts.
        provider: Completion provider, or None when no provider is configured
            (every turn then fails with CompletionError).
        validator: Upload allow-list and quota checks.
        extractor: Text extraction for accepted files.
        excerpt_chars: Hard cut applied to each file's extracted text.
        timeout_seconds: Upper bound on one completion call; None disables it.
    """

    def __init__(
        self,
        store: SessionStore,
        provider: Optional[AIProvider],
        validator: Optional[FileValidator] = None,
        extractor: Optional[ContentExtractor] = None,
        excerpt_chars: int = DEFAULT_EXCERPT_CHARS,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store
        self.provider = provider
        self.validator = validator or FileValidator()
        self.extractor = extractor or ContentExtractor()
        self.excerpt_chars = excerpt_chars
        self.timeout_seconds = timeout_seconds

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def screen_files(self, files: Sequence[StagedFile]) -> List[StagedFile]:
        """Apply upload rules to a batch.

        Returns:
            List[StagedFile]: Files whose type is allowed, in upload order.

        Raises:
            QuotaExceededError: If the batch is too large or any file is oversized.
        """
        self.validator.check_count(len(files))
        accepted: List[StagedFile] = []
        for file in files:
            try:
                self.validator.validate(file)
            except FileTypeError:
                continue
            accepted.append(file)
        return accepted

    # -----------------------------------------------------------------------
    # Content
    # -----------------------------------------------------------------------

    async def build_user_content(self, message: str, files: Sequence[StagedFile]) -> str:
        """Compose the user turn from the raw message and file excerpts."""
        sections = []
        for file in files:
            text = await self.extractor.extract(file)
            sections.append(
                format_file_section(file.original_name, file.media_type, text[:self.excerpt_chars])
            )
        return compose_user_content(message, sections)

    # -----------------------------------------------------------------------
    # Completion
    # -----------------------------------------------------------------------

    async def _complete(self, transcript: List[Turn], max_tokens: int) -> str:
        if self.provider is None:
            raise RuntimeError("No completion provider configured")

        messages = [turn.to_message() for turn in transcript]
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(
            None, functools.partial(self.provider.complete, messages, max_tokens=max_tokens)
        )
        if self.timeout_seconds is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout_seconds)

    # -----------------------------------------------------------------------
    # Turn
    # -----------------------------------------------------------------------

    async def handle_turn(
        self,
        session_id: str,
        message: Optional[str],
        files: Sequence[StagedFile] = (),
        max_tokens: int = 600,
    ) -> ChatResult:
        """Run one user turn through the provider.

        Args:
            session_id: Caller-chosen session identifier.
            message: User text; may be empty when files are attached.
            files: Staged uploads for this turn.
            max_tokens: Response token budget for the provider.

        Returns:
            ChatResult with the reply and file counts.

        Raises:
            InvalidRequestError: If there is neither a message nor files.
            QuotaExceededError: If the batch breaks a count or size quota.
            FileTypeError: If only disallowed files were sent without a message.
            CompletionError: If the provider call fails or times out.
        """
        message = message or ""
        if not message and not files:
            raise InvalidRequestError()

        accepted = self.screen_files(files)
        rejected = len(files) - len(accepted)
        if rejected:
            logger.info(f"Session {session_id}: skipped {rejected} file(s) of disallowed type")
        if not message and not accepted:
            raise FileTypeError()

        async with self.store.lock(session_id):
            self.store.get_or_create(session_id)
            content = await self.build_user_content(message, accepted)
            self.store.append(session_id, Turn(role=Role.USER, content=content))
            transcript = self.store.get_or_create(session_id)

            provider_name = getattr(self.provider, "name", None)
            logger.info(
                f"Calling completion with provider: {provider_name}, "
                f"session: {session_id}, turns: {len(transcript)}"
            )
            try:
                reply = await self._complete(transcript, max_tokens)
            except asyncio.TimeoutError as e:
                logger.error(
                    f"Completion timed out after {self.timeout_seconds}s "
                    f"(provider={provider_name}, session={session_id})"
                )
                raise CompletionError(e)
            except Exception as e:
                logger.error(
                    f"Completion failed (provider={provider_name}, session={session_id}): {e}"
                )
                raise CompletionError(e)

            self.store.append(session_id, Turn(role=Role.ASSISTANT, content=reply))
            length = self.store.truncate(session_id)

        logger.info(f"Session {session_id}: reply recorded, transcript length {length}")
        return ChatResult(
            response=reply,
            files_processed=len(accepted),
            files_rejected=rejected,
        )
