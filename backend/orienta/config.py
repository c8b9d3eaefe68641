"""Orienta application configuration.

Loads settings from two YAML files:
  * orienta.settings.yaml: non-secret configuration
  * orienta.secrets.yaml: provider credentials (never committed)

Environment variables take precedence over both files:
  * PORT: listening port
  * OPENAI_API_KEY: OpenAI credential
  * ANTHROPIC_API_KEY: Anthropic credential
  * ORIENTA_SETTINGS_FILE / ORIENTA_SECRETS_FILE: alternative file paths
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("orienta.settings.yaml")
SECRETS_FILE  = Path("orienta.secrets.yaml")

DEFAULT_ALLOWED_MEDIA_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "image/jpeg",
    "image/jpg",
    "image/png",
]


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class OpenAISecrets(BaseModel):
    api_key:      Optional[str] = None
    organization: Optional[str] = None


class AnthropicSecrets(BaseModel):
    api_key: Optional[str] = None


class Secrets(BaseModel):
    openai:    OpenAISecrets    = Field(default_factory=OpenAISecrets)
    anthropic: AnthropicSecrets = Field(default_factory=AnthropicSecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str       = "0.0.0.0"
    port:            int       = 3001
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    level: str = "info"


class CompletionSettings(BaseModel):
    """Parameters sent with every completion request."""
    provider:              Literal["openai", "anthropic"] = "openai"
    model:                 Optional[str] = None
    max_tokens:            int   = 600
    max_tokens_with_files: int   = 800
    temperature:           float = 0.7
    presence_penalty:      float = 0.1
    frequency_penalty:     float = 0.1
    timeout_seconds:       float = 60.0
    health_check_on_startup: bool = False


class UploadSettings(BaseModel):
    """Staging directory and per-request upload quotas."""
    upload_dir:          str       = "uploads"
    max_file_size_bytes: int       = 10 * 1024 * 1024
    max_files:           int       = 5
    excerpt_chars:       int       = 2000
    allowed_media_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MEDIA_TYPES)
    )

    @field_validator("max_file_size_bytes", "max_files", "excerpt_chars")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value


class HistorySettings(BaseModel):
    """Sliding-window truncation of session transcripts.

    Once a transcript grows past ``max_length`` entries it is cut back to the
    system turn plus the ``keep_recent`` most recent turns.
    """
    max_length:  int = 12
    keep_recent: int = 10


class OrientaConfig(BaseModel):
    server:     ServerSettings     = Field(default_factory=ServerSettings)
    logging:    LoggingSettings    = Field(default_factory=LoggingSettings)
    completion: CompletionSettings = Field(default_factory=CompletionSettings)
    uploads:    UploadSettings     = Field(default_factory=UploadSettings)
    history:    HistorySettings    = Field(default_factory=HistorySettings)
    secrets:    Secrets            = Field(default_factory=Secrets)


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay environment variables onto the raw settings dict."""
    port = os.environ.get("PORT")
    if port:
        data.setdefault("server", {})["port"] = int(port)

    secrets = data.setdefault("secrets", {})
    openai_key = os.environ.get("OPENAI_API_KEY")
    if openai_key:
        secrets.setdefault("openai", {})["api_key"] = openai_key
    anthropic_key = os.environ.get("ANTHROPIC_API_KEY")
    if anthropic_key:
        secrets.setdefault("anthropic", {})["api_key"] = anthropic_key
    return data


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> OrientaConfig:
    """Load and merge settings + secrets into a single *OrientaConfig* object."""
    settings_path = settings_path or Path(os.environ.get("ORIENTA_SETTINGS_FILE", SETTINGS_FILE))
    secrets_path  = secrets_path or Path(os.environ.get("ORIENTA_SECRETS_FILE", SECRETS_FILE))

    settings_data = _load_yaml(settings_path)
    secrets_data  = _load_yaml(secrets_path)

    # Merge: secrets live under the "secrets" key in OrientaConfig
    settings_data["secrets"] = secrets_data
    settings_data = _apply_env_overrides(settings_data)

    config = OrientaConfig(**settings_data)
    logger.info(
        "Settings loaded (server=%s:%s, provider=%s, upload_dir=%s)",
        config.server.host,
        config.server.port,
        config.completion.provider,
        config.uploads.upload_dir,
    )
    return config


_config: Optional[OrientaConfig] = None


def get_config() -> OrientaConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (for testing)."""
    global _config
    _config = None
