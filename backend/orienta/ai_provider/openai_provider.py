"""OpenAI API provider implementation.

This module provides an AIProvider implementation that connects to
OpenAI's chat completions API using the official SDK.

Usage:
    provider = OpenAIProvider(api_key="sk-...")
    if provider.health_check():
        reply = provider.complete(messages)
"""
import logging
from typing import List, Optional

from .base import AIProvider, CompletionMessage, SamplingOptions

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """AIProvider implementation using OpenAI's API.

    Attributes:
        api_key: OpenAI API key for authentication.
        model: OpenAI model to use (default: gpt-3.5-turbo).
        organization: Optional organization ID.
        sampling: Temperature and penalties sent with each request.
    """

    name = "openai"
    DEFAULT_MODEL = "gpt-3.5-turbo"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        organization: Optional[str] = None,
        sampling: Optional[SamplingOptions] = None,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            api_key: OpenAI API key for authentication.
            model: OpenAI model to use. Defaults to gpt-3.5-turbo.
            organization: Optional organization ID.
            sampling: Optional sampling parameters.
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.organization = organization
        self.sampling = sampling or SamplingOptions()
        self._client: Optional[object] = None

    def _get_client(self) -> object:
        """Get or create the OpenAI client.

        Returns:
            OpenAI client instance.

        Raises:
            ImportError: If openai package is not installed.
        """
        if self._client is None:
            try:
                import openai
                kwargs = {"api_key": self.api_key}
                if self.organization:
                    kwargs["organization"] = self.organization
                self._client = openai.OpenAI(**kwargs)
            except ImportError:
                raise ImportError(
                    "openai package is required for OpenAIProvider. "
                    "Install it with: pip install openai"
                )
        return self._client

    def health_check(self) -> bool:
        """Check if the OpenAI API is accessible.

        Returns:
            bool: True if the API is accessible, False otherwise.
        """
        try:
            client = self._get_client()
            client.chat.completions.create(
                model=self.model,
                max_tokens=1,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except Exception as e:
            logger.warning(f"OpenAI health check failed: {e}")
            return False

    def complete(self, messages: List[CompletionMessage], max_tokens: int = 600) -> str:
        """Send the transcript to the chat completions endpoint.

        Args:
            messages: Full transcript, system turn first.
            max_tokens: Maximum tokens in the response.

        Returns:
            str: The model's reply text.

        Raises:
            Exception: If the API call fails or returns no content.
        """
        client = self._get_client()

        response = client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=self.sampling.temperature,
            presence_penalty=self.sampling.presence_penalty,
            frequency_penalty=self.sampling.frequency_penalty,
        )

        content = response.choices[0].message.content
        if content is None:
            raise ValueError("OpenAI returned an empty completion")
        return content
