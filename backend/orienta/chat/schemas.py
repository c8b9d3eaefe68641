"""Pydantic schemas for the chat endpoints and session transcripts.

Note:
    Request/response field names use camelCase (e.g., sessionId,
    filesProcessed) to match the JavaScript front-end.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Author of a transcript turn."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Turn(BaseModel):
    """One immutable message in a session transcript.

    Attributes:
        role: system, user or assistant.
        content: Message text sent to the completion provider.
    """
    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Author of the turn")
    content: str = Field(..., description="Turn text")

    def to_message(self) -> Dict[str, str]:
        """Convert to the ``{"role", "content"}`` dict providers expect."""
        return {"role": self.role.value, "content": self.content}


class ChatResult(BaseModel):
    """Outcome of one conversation turn.

    Attributes:
        response: Assistant reply text.
        files_processed: Files validated and folded into the user turn.
        files_rejected: Files skipped because their type is not allowed.
    """
    response: str
    files_processed: int = 0
    files_rejected: int = 0


def _session_id_as_str(value: Any) -> Any:
    # Browsers often send numeric IDs such as Date.now()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ChatTextRequest(BaseModel):
    """Request body for POST /api/chat-text.

    ``message`` defaults to empty so a missing message is answered with the
    service's own 400 rather than a schema error.
    """
    message: Optional[str] = Field(default="", description="User message")
    sessionId: str = Field(..., description="Caller-chosen session identifier")

    @field_validator("sessionId", mode="before")
    @classmethod
    def _coerce_session_id(cls, value: Any) -> Any:
        return _session_id_as_str(value)


class ChatTextResponse(BaseModel):
    """Response body for POST /api/chat-text."""
    response: str


class ChatResponse(BaseModel):
    """Response body for POST /api/chat."""
    response: str
    filesProcessed: int = Field(default=0, description="Files folded into the message")
    filesRejected: int = Field(default=0, description="Files skipped for disallowed type")


class ClearHistoryRequest(BaseModel):
    """Request body for POST /api/clear-history."""
    sessionId: Optional[str] = Field(default=None, description="Session to clear")

    @field_validator("sessionId", mode="before")
    @classmethod
    def _coerce_session_id(cls, value: Any) -> Any:
        return _session_id_as_str(value)


class ClearHistoryResponse(BaseModel):
    """Response body for POST /api/clear-history; always successful."""
    success: bool = True
