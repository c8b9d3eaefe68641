"""Claude Direct API provider implementation.

This module provides an AIProvider implementation that connects directly
to Anthropic's Claude API using the official SDK. The Messages API takes the
system prompt as a separate parameter, so the leading system turn of the
transcript is lifted out before the call.

Usage:
    provider = ClaudeDirectProvider(api_key="sk-ant-...")
    if provider.health_check():
        reply = provider.complete(messages)
"""
import logging
from typing import List, Optional, Tuple

from .base import AIProvider, CompletionMessage, SamplingOptions

logger = logging.getLogger(__name__)


def split_system(messages: List[CompletionMessage]) -> Tuple[Optional[str], List[CompletionMessage]]:
    """Separate system turns from the conversational turns.

    Returns:
        Tuple of (joined system text or None, remaining user/assistant turns).
    """
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    turns = [
        {"role": m["role"], "content": m["content"]}
        for m in messages
        if m["role"] != "system"
    ]
    system = "\n\n".join(system_parts) if system_parts else None
    return system, turns


class ClaudeDirectProvider(AIProvider):
    """AIProvider implementation using Anthropic's Claude API directly.

    Attributes:
        api_key: Anthropic API key for authentication.
        model: Claude model to use.
        base_url: Anthropic API base URL.
        sampling: Sampling parameters; Anthropic only honours temperature.
    """

    name = "anthropic"
    DEFAULT_MODEL = "claude-3-5-haiku-20241022"
    DEFAULT_BASE_URL = "https://api.anthropic.com"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        sampling: Optional[SamplingOptions] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.sampling = sampling or SamplingOptions()
        self._client: Optional[object] = None

    def _get_client(self) -> object:
        """Get or create the Anthropic client.

        Raises:
            ImportError: If anthropic package is not installed.
        """
        if self._client is None:
            try:
                import anthropic
                self._client = anthropic.Anthropic(
                    api_key=self.api_key,
                    base_url=self.base_url,
                )
            except ImportError:
                raise ImportError(
                    "anthropic package is required for ClaudeDirectProvider. "
                    "Install it with: pip install anthropic"
                )
        return self._client

    def health_check(self) -> bool:
        """Check if the Claude Direct API is accessible."""
        try:
            client = self._get_client()
            client.messages.create(
                model=self.model,
                max_tokens=1,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except Exception as e:
            logger.warning(f"Claude Direct health check failed: {e}")
            return False

    def complete(self, messages: List[CompletionMessage], max_tokens: int = 600) -> str:
        """Send the transcript to the Messages API.

        Args:
            messages: Full transcript, system turn first.
            max_tokens: Maximum tokens in the response.

        Returns:
            str: Concatenated text blocks of the reply.
        """
        client = self._get_client()
        system, turns = split_system(messages)

        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": self.sampling.temperature,
            "messages": turns,
        }
        if system:
            kwargs["system"] = system

        response = client.messages.create(**kwargs)

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", "text") == "text"
        )
        if not text:
            raise ValueError("Anthropic returned an empty completion")
        return text
