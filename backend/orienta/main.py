"""Orienta Backend Application.

This is the main entry point for the Orienta backend service, a
conversational vocational-guidance assistant. The front-end sends a message
(optionally with documents) and a session ID; the backend keeps the
per-session history and talks to the completion provider.

Modules:
    - chat: session store, conversation manager and chat endpoints
    - files: upload staging, validation and text extraction
    - ai_provider: completion provider implementations and resolution
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orienta.ai_provider.prompts import FALLBACK_MESSAGE
from orienta.ai_provider.resolver import ProviderResolver
from orienta.chat.router import router as chat_router
from orienta.chat.service import build_chat_service, set_chat_service
from orienta.config import get_config
from orienta.files.router import router as files_router
from orienta.files.staging import UploadStaging, set_upload_staging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Silence verbose third-party loggers.
# httpx/httpcore log every TCP connection made by the provider SDKs.
for _noisy in (
    "httpx",
    "httpcore",
    "openai",
    "anthropic",
):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = get_config()

    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    staging = UploadStaging(config.uploads.upload_dir, config.uploads.max_file_size_bytes)
    staging.ensure_upload_dir()
    set_upload_staging(staging)
    logger.info(f"Upload directory: {staging.upload_dir.resolve()}")

    resolver = ProviderResolver(config)
    provider = resolver.resolve()
    if provider:
        logger.info(f"Completion provider active: {resolver.active_provider_type}")
    else:
        logger.warning("No completion provider available; chat turns will fail")

    set_chat_service(build_chat_service(config, provider, staging=staging))
    logger.info(f"Orienta backend ready on port {config.server.port}")

    yield  # Application runs here

    # Shutdown
    set_chat_service(None)
    logger.info("Application shutdown complete")


# Create FastAPI application with metadata
app = FastAPI(
    title="Orienta API",
    description="Backend service for Orienta.AI - vocational guidance chat assistant",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().server.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)
app.include_router(files_router)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer schema errors with the same {"error": ...} body as every other failure."""
    fields = {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
    message = "Se requiere sessionId" if "sessionId" in fields else "Solicitud inválida"
    logger.info(f"Invalid request on {request.url.path}: {exc.errors()}")
    return JSONResponse({"error": message}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    """Answer any unexpected fault with the fallback message instead of crashing."""
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse({"error": FALLBACK_MESSAGE}, status_code=500)


@app.get("/api/health")
async def health() -> dict:
    """Health check endpoint.

    Returns:
        dict: Static description of the service and its upload limits.
    """
    uploads = get_config().uploads
    return {
        "status": "OK",
        "service": "Orienta.AI Backend",
        "purpose": "Orientacion vocacional y profesional",
        "features": ["chat con texto", "procesamiento de archivos"],
        "maxFileSize": f"{uploads.max_file_size_bytes // (1024 * 1024)}MB",
        "maxFiles": uploads.max_files,
    }
