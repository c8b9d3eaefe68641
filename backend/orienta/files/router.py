"""FastAPI router for retrieving staged uploads."""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from .staging import UploadStaging, get_upload_staging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["files"])


@router.get("/{filename}")
async def get_upload(
    filename: str,
    staging: UploadStaging = Depends(get_upload_staging),
):
    """Return the bytes of a file still present in the staging directory.

    Staged files are removed once their chat request finishes, so this mostly
    answers 404 outside of an in-flight request.

    Args:
        filename: Staged filename (no path components).

    Returns:
        The file content, or ``{"error": "Archivo no encontrado"}`` with 404.
    """
    path = staging.resolve(filename)
    if path is None:
        logger.info(f"Upload not found: {filename}")
        return JSONResponse({"error": "Archivo no encontrado"}, status_code=404)
    return FileResponse(path=path)
