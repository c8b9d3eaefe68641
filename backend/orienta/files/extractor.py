"""Text extraction from staged uploads.

Each FileKind has its own KindExtractor. Plain text is read verbatim; PDF,
Word and image files currently yield a placeholder naming the file, so a
real parser or OCR back-end can be registered later without touching the
conversation code:

    extractor = ContentExtractor()
    extractor.register(FileKind.PDF, MyPdfExtractor())

Extraction never raises. Any failure is logged and replaced with a
placeholder so the chat turn still goes ahead.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .schemas import FileKind, StagedFile

logger = logging.getLogger(__name__)


class KindExtractor(ABC):
    """Extracts text from one kind of staged file."""

    @abstractmethod
    async def extract(self, file: StagedFile) -> str:
        """Return the textual content of ``file``.

        May raise; ContentExtractor turns failures into placeholders.
        """
        pass


class PlainTextExtractor(KindExtractor):
    """Reads the staged bytes as UTF-8, replacing undecodable bytes."""

    async def extract(self, file: StagedFile) -> str:
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, file.path.read_bytes)
        return data.decode("utf-8", errors="replace")


class PlaceholderExtractor(KindExtractor):
    """Names the file instead of extracting it.

    Args:
        template: Format string with a ``{name}`` and optional ``{media_type}`` field.
    """

    def __init__(self, template: str) -> None:
        self.template = template

    async def extract(self, file: StagedFile) -> str:
        return self.template.format(name=file.original_name, media_type=file.media_type)


def default_extractors() -> Dict[FileKind, KindExtractor]:
    """Extractor table used when no real back-ends are registered."""
    return {
        FileKind.TEXT: PlainTextExtractor(),
        FileKind.PDF: PlaceholderExtractor("[Contenido de PDF extraído: {name}]"),
        FileKind.WORD: PlaceholderExtractor("[Contenido de documento Word extraído: {name}]"),
        FileKind.IMAGE: PlaceholderExtractor("[Imagen procesada: {name}]"),
        FileKind.UNSUPPORTED: PlaceholderExtractor("[Archivo de tipo: {media_type}]"),
    }


class ContentExtractor:
    """Dispatches staged files to the extractor registered for their kind.

    Args:
        extractors: Optional overrides merged over the default table.
    """

    ERROR_TEMPLATE = "[Error al procesar el archivo: {name}]"

    def __init__(self, extractors: Optional[Dict[FileKind, KindExtractor]] = None) -> None:
        self._extractors = default_extractors()
        if extractors:
            self._extractors.update(extractors)

    def register(self, kind: FileKind, extractor: KindExtractor) -> None:
        """Replace the extractor used for ``kind``."""
        self._extractors[kind] = extractor

    def extractor_for(self, kind: FileKind) -> KindExtractor:
        return self._extractors.get(kind, self._extractors[FileKind.UNSUPPORTED])

    async def extract(self, file: StagedFile) -> str:
        """Extract text from ``file``; never raises.

        Returns:
            str: The extracted text, a placeholder, or an error placeholder.
        """
        kind = file.kind
        try:
            return await self.extractor_for(kind).extract(file)
        except Exception as e:
            logger.error(f"Error extracting text from {file.path} ({kind.value}): {e}")
            return self.ERROR_TEMPLATE.format(name=file.original_name)
