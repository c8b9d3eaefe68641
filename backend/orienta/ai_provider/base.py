"""AIProvider abstract interface for chat completion back-ends.

Every provider turns a full conversation transcript into the next assistant
message. Transcripts are passed as plain ``{"role", "content"}`` dicts in
chronological order, with the system turn first.

Usage:
    from orienta.ai_provider import OpenAIProvider

    provider = OpenAIProvider(api_key="sk-...")
    text = provider.complete(
        [{"role": "system", "content": "..."}, {"role": "user", "content": "Hola"}],
        max_tokens=600,
    )
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List

CompletionMessage = Dict[str, str]


@dataclass
class SamplingOptions:
    """Sampling parameters forwarded to the completion API.

    Attributes:
        temperature: Sampling temperature.
        presence_penalty: Penalty for returning to unrelated topics.
        frequency_penalty: Penalty for repeated wording.
    """
    temperature: float = 0.7
    presence_penalty: float = 0.1
    frequency_penalty: float = 0.1


class AIProvider(ABC):
    """Abstract base class for completion provider implementations.

    Methods:
        health_check: Verify the provider is operational.
        complete: Produce the next assistant message for a transcript.
    """

    name: str = "unknown"

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the provider is healthy and operational.

        Returns:
            bool: True if the provider is operational, False otherwise.
        """
        pass

    @abstractmethod
    def complete(self, messages: List[CompletionMessage], max_tokens: int = 600) -> str:
        """Generate the assistant reply for a conversation.

        Args:
            messages: Full transcript, system turn first.
            max_tokens: Maximum tokens in the response.

        Returns:
            str: The assistant's reply text.

        Raises:
            Exception: If the API call fails.
        """
        pass
