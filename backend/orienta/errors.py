"""Error taxonomy for the chat pipeline.

Each error carries the caller-facing message and the HTTP status the routers
answer with. Messages are in Spanish because they are shown verbatim by the
front-end.
"""
from enum import Enum
from typing import Optional

from orienta.ai_provider.prompts import FALLBACK_MESSAGE


class Quota(str, Enum):
    """Upload quota that a request violated."""
    FILE_SIZE = "file_size"
    FILE_COUNT = "file_count"


class ChatError(Exception):
    """Base exception for request-level chat errors."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidRequestError(ChatError):
    """Raised when the request lacks the input the entry point requires."""
    def __init__(self, message: str = "Se requiere mensaje o cuanto menos un archivo"):
        super().__init__(message, status_code=400)


class FileTypeError(ChatError):
    """Raised when a file's declared media type is not on the allow-list."""
    def __init__(self, filename: str = "", media_type: str = ""):
        self.filename = filename
        self.media_type = media_type
        super().__init__("Tipo de archivo no permitido", status_code=400)


class QuotaExceededError(ChatError):
    """Raised when a file or the whole batch exceeds an upload quota."""

    MESSAGES = {
        Quota.FILE_SIZE: "El archivo es demasiado grande. Tamaño máximo: {limit} por archivo.",
        Quota.FILE_COUNT: "Demasiados archivos. Máximo: {limit} archivos por solicitud.",
    }

    def __init__(self, quota: Quota, limit: str, filename: Optional[str] = None):
        self.quota = quota
        self.limit = limit
        self.filename = filename
        super().__init__(self.MESSAGES[quota].format(limit=limit), status_code=400)


class CompletionError(ChatError):
    """Raised when the completion provider call fails for any reason.

    The caller always sees the same fallback message; the underlying cause is
    kept on ``cause`` for logging only.
    """
    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(FALLBACK_MESSAGE, status_code=500)
