"""FastAPI router for the chat endpoints.

Endpoints (paths match the existing web front-end):
    - POST /api/chat           multipart, message + up to 5 files
    - POST /api/chat-text      JSON, text only
    - POST /api/clear-history  JSON, always ``{"success": true}``

Every failure is answered with a JSON ``{"error": "..."}`` body.
"""
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from orienta.errors import ChatError, InvalidRequestError

from .schemas import (
    ChatResponse,
    ChatTextRequest,
    ChatTextResponse,
    ClearHistoryRequest,
    ClearHistoryResponse,
)
from .service import ChatService, get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def _unavailable() -> JSONResponse:
    logger.warning("[chat] No chat service configured")
    return JSONResponse({"error": "Chat service not available"}, status_code=503)


def _error_response(exc: Exception) -> JSONResponse:
    status_code, body = ChatService.to_error_payload(exc)
    return JSONResponse(body, status_code=status_code)


def _form_text(value) -> Optional[str]:
    return value if isinstance(value, str) else None


async def _clear_target(request: Request) -> Optional[str]:
    try:
        data = await request.json()
        return ClearHistoryRequest.model_validate(data).sessionId
    except (ValueError, ValidationError) as e:
        logger.info(f"[chat] Ignoring unreadable clear-history body: {e}")
        return None


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    service: Optional[ChatService] = Depends(get_chat_service),
):
    """Chat with optional file attachments.

    Files are accepted under any multipart field name.

    Form fields:
        message: Optional user text.
        sessionId: Session identifier.

    Returns:
        ``{ response, filesProcessed, filesRejected }``
    """
    if service is None:
        return _unavailable()

    form = await request.form()
    message = _form_text(form.get("message"))
    session_id = _form_text(form.get("sessionId"))
    uploads: List[Tuple[str, UploadFile]] = [
        (field, value) for field, value in form.multi_items() if isinstance(value, UploadFile)
    ]

    try:
        if not session_id:
            raise InvalidRequestError("Se requiere sessionId")
        result = await service.chat(session_id, message, uploads)
    except ChatError as e:
        logger.error(f"Error in /api/chat: {e.message}")
        return _error_response(e)

    return ChatResponse(
        response=result.response,
        filesProcessed=result.files_processed,
        filesRejected=result.files_rejected,
    )


@router.post("/chat-text", response_model=ChatTextResponse)
async def chat_text(
    body: ChatTextRequest,
    service: Optional[ChatService] = Depends(get_chat_service),
):
    """Text-only chat, kept for older clients.

    Returns:
        ``{ response }``
    """
    if service is None:
        return _unavailable()

    try:
        result = await service.chat_text(body.sessionId, body.message)
    except ChatError as e:
        logger.error(f"Error in /api/chat-text: {e.message}")
        return _error_response(e)

    return ChatTextResponse(response=result.response)


@router.post("/clear-history", response_model=ClearHistoryResponse)
async def clear_history(
    request: Request,
    service: Optional[ChatService] = Depends(get_chat_service),
) -> ClearHistoryResponse:
    """Forget a session's history.

    Succeeds for unknown sessions and for bodies that are missing or malformed.
    """
    session_id = await _clear_target(request)
    if service is not None and session_id:
        await service.clear(session_id)
    return ClearHistoryResponse(success=True)
