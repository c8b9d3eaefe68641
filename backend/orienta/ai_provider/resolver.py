"""Provider resolver for completion provider selection.

Reads API keys from configuration, creates a provider for every configured
back-end and picks the active one: the configured preference first, then any
other configured provider. Health checks are optional because each one costs
a real API call.

Usage:
    from orienta.ai_provider.resolver import ProviderResolver
    from orienta.config import get_config

    resolver = ProviderResolver(get_config())
    provider = resolver.resolve()
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from orienta.config import OrientaConfig

from .base import AIProvider, SamplingOptions
from .claude_direct import ClaudeDirectProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)


class ProviderType(str, Enum):
    """Supported completion provider types."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass
class ProviderStatus:
    """Status of a single provider."""
    name: str
    configured: bool  # Has API key configured
    healthy: bool  # Health check passed (or skipped)


@dataclass
class AIStatus:
    """Overall provider status."""
    active_provider: Optional[str]
    active_model: Optional[str]
    providers: List[ProviderStatus]


class ProviderResolver:
    """Resolves and manages completion providers based on configuration.

    Attributes:
        config: Full application configuration.
        active_provider_type: Provider type chosen by resolve().
    """

    def __init__(self, config: OrientaConfig) -> None:
        self.config = config
        self.completion_config = config.completion
        self.secrets = config.secrets

        self._providers: Dict[str, AIProvider] = {}
        self._provider_health: Dict[str, bool] = {}
        self._provider_configured: Dict[str, bool] = {}

        self.active_provider_type: Optional[str] = None

    def _ordered_types(self) -> List[ProviderType]:
        """Preferred provider first, remaining providers after it."""
        preferred = ProviderType(self.completion_config.provider)
        return [preferred] + [p for p in ProviderType if p != preferred]

    def _is_provider_configured(self, provider_type: ProviderType) -> bool:
        if provider_type == ProviderType.OPENAI:
            return bool(self.secrets.openai.api_key)
        elif provider_type == ProviderType.ANTHROPIC:
            return bool(self.secrets.anthropic.api_key)
        return False

    def _model_for(self, provider_type: ProviderType) -> Optional[str]:
        """The configured model applies only to the preferred provider."""
        if provider_type.value == self.completion_config.provider:
            return self.completion_config.model
        return None

    def _create_provider(self, provider_type: ProviderType) -> Optional[AIProvider]:
        """Create a provider instance for the given type."""
        sampling = SamplingOptions(
            temperature=self.completion_config.temperature,
            presence_penalty=self.completion_config.presence_penalty,
            frequency_penalty=self.completion_config.frequency_penalty,
        )
        try:
            if provider_type == ProviderType.OPENAI:
                return OpenAIProvider(
                    api_key=self.secrets.openai.api_key,
                    model=self._model_for(provider_type),
                    organization=self.secrets.openai.organization or None,
                    sampling=sampling,
                )
            elif provider_type == ProviderType.ANTHROPIC:
                return ClaudeDirectProvider(
                    api_key=self.secrets.anthropic.api_key,
                    model=self._model_for(provider_type),
                    sampling=sampling,
                )
            logger.warning(f"Unknown provider type: {provider_type}")
            return None
        except Exception as e:
            logger.error(f"Failed to create provider {provider_type}: {e}")
            return None

    def resolve(self) -> Optional[AIProvider]:
        """Create configured providers and pick the active one.

        Returns:
            The active AIProvider or None if no usable provider was found.
        """
        logger.info("Resolving completion providers...")

        for provider_type in self._ordered_types():
            configured = self._is_provider_configured(provider_type)
            self._provider_configured[provider_type.value] = configured
            if not configured:
                logger.info(f"Provider {provider_type.value} skipped (not configured)")
                self._provider_health[provider_type.value] = False
                continue

            provider = self._create_provider(provider_type)
            if provider is None:
                self._provider_health[provider_type.value] = False
                continue

            healthy = True
            if self.completion_config.health_check_on_startup:
                healthy = provider.health_check()
                if not healthy:
                    logger.warning(f"Provider {provider_type.value} health check failed")

            self._provider_health[provider_type.value] = healthy
            if healthy:
                self._providers[provider_type.value] = provider
                if self.active_provider_type is None:
                    self.active_provider_type = provider_type.value
                    logger.info(f"Active provider set to: {provider_type.value}")

        if self.active_provider_type is None:
            logger.warning("No usable completion provider found")
        return self.get_active_provider()

    def get_active_provider(self) -> Optional[AIProvider]:
        """Get the currently active provider, or None."""
        if self.active_provider_type:
            return self._providers.get(self.active_provider_type)
        return None

    def get_status(self) -> AIStatus:
        """Get the current provider status."""
        active = self.get_active_provider()
        return AIStatus(
            active_provider=self.active_provider_type,
            active_model=getattr(active, "model", None),
            providers=[
                ProviderStatus(
                    name=provider_type.value,
                    configured=self._provider_configured.get(provider_type.value, False),
                    healthy=self._provider_health.get(provider_type.value, False),
                )
                for provider_type in ProviderType
            ],
        )
