"""AI Provider module for chat completion back-ends.

This module provides a unified interface for completion providers with two
implementations: OpenAIProvider and ClaudeDirectProvider.

Usage:
    from orienta.ai_provider import OpenAIProvider, SYSTEM_PROMPT

    provider = OpenAIProvider(api_key="sk-...")
    reply = provider.complete([
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Me gusta la biología"},
    ])
"""
from .base import AIProvider, CompletionMessage, SamplingOptions
from .claude_direct import ClaudeDirectProvider
from .openai_provider import OpenAIProvider
from .prompts import FALLBACK_MESSAGE, SYSTEM_PROMPT, compose_user_content, format_file_section
from .resolver import AIStatus, ProviderResolver, ProviderStatus, ProviderType

__all__ = [
    "AIProvider",
    "CompletionMessage",
    "SamplingOptions",
    "ClaudeDirectProvider",
    "OpenAIProvider",
    "FALLBACK_MESSAGE",
    "SYSTEM_PROMPT",
    "compose_user_content",
    "format_file_section",
    "AIStatus",
    "ProviderResolver",
    "ProviderStatus",
    "ProviderType",
]
