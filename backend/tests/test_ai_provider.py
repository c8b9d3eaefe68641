"""Tests for AIProvider interface, implementations and resolution."""
from unittest.mock import MagicMock, patch

import pytest

from orienta.ai_provider import (
    AIProvider,
    ClaudeDirectProvider,
    OpenAIProvider,
    ProviderResolver,
    SamplingOptions,
)
from orienta.ai_provider.claude_direct import split_system
from orienta.ai_provider.prompts import compose_user_content, format_file_section
from orienta.config import OrientaConfig

TRANSCRIPT = [
    {"role": "system", "content": "Eres Joaquín"},
    {"role": "user", "content": "Me gusta la biología"},
]


def _openai_module(content="¡Excelente interés!"):
    mock_openai = MagicMock()
    mock_client = MagicMock()
    mock_openai.OpenAI.return_value = mock_client
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content=content))]
    mock_client.chat.completions.create.return_value = mock_response
    return mock_openai, mock_client


def _anthropic_module(*texts):
    mock_anthropic = MagicMock()
    mock_client = MagicMock()
    mock_anthropic.Anthropic.return_value = mock_client
    mock_response = MagicMock()
    mock_response.content = [MagicMock(type="text", text=t) for t in texts]
    mock_client.messages.create.return_value = mock_response
    return mock_anthropic, mock_client


class TestAIProviderInterface:
    def test_cannot_instantiate_abstract_class(self):
        with pytest.raises(TypeError):
            AIProvider()

    def test_interface_has_required_methods(self):
        assert hasattr(AIProvider, "health_check")
        assert hasattr(AIProvider, "complete")


class TestOpenAIProvider:
    def test_defaults(self):
        provider = OpenAIProvider(api_key="test-key")
        assert provider.model == OpenAIProvider.DEFAULT_MODEL
        assert provider.sampling == SamplingOptions()
        assert isinstance(provider, AIProvider)

    def test_complete_sends_transcript_and_sampling(self):
        mock_openai, mock_client = _openai_module()
        with patch.dict("sys.modules", {"openai": mock_openai}):
            provider = OpenAIProvider(api_key="test-key")
            result = provider.complete(TRANSCRIPT, max_tokens=800)

        assert result == "¡Excelente interés!"
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == TRANSCRIPT
        assert kwargs["max_tokens"] == 800
        assert kwargs["temperature"] == 0.7
        assert kwargs["presence_penalty"] == 0.1
        assert kwargs["frequency_penalty"] == 0.1

    def test_complete_empty_content_raises(self):
        mock_openai, _ = _openai_module(content=None)
        with patch.dict("sys.modules", {"openai": mock_openai}):
            provider = OpenAIProvider(api_key="test-key")
            with pytest.raises(ValueError):
                provider.complete(TRANSCRIPT)

    def test_complete_propagates_api_errors(self):
        mock_openai, mock_client = _openai_module()
        mock_client.chat.completions.create.side_effect = Exception("rate limited")
        with patch.dict("sys.modules", {"openai": mock_openai}):
            provider = OpenAIProvider(api_key="test-key")
            with pytest.raises(Exception, match="rate limited"):
                provider.complete(TRANSCRIPT)

    def test_organization_passed_to_client(self):
        mock_openai, _ = _openai_module()
        with patch.dict("sys.modules", {"openai": mock_openai}):
            OpenAIProvider(api_key="k", organization="org-1")._get_client()
        mock_openai.OpenAI.assert_called_once_with(api_key="k", organization="org-1")

    def test_health_check_failure(self):
        mock_openai, mock_client = _openai_module()
        mock_client.chat.completions.create.side_effect = Exception("API Error")
        with patch.dict("sys.modules", {"openai": mock_openai}):
            assert OpenAIProvider(api_key="test-key").health_check() is False

    def test_get_client_raises_import_error(self):
        provider = OpenAIProvider(api_key="test-key")
        with patch.dict("sys.modules", {"openai": None}):
            with pytest.raises(ImportError, match="openai package is required"):
                provider._get_client()


class TestClaudeDirectProvider:
    def test_split_system(self):
        system, turns = split_system(TRANSCRIPT + [{"role": "assistant", "content": "¡Genial!"}])
        assert system == "Eres Joaquín"
        assert [t["role"] for t in turns] == ["user", "assistant"]

    def test_split_without_system(self):
        system, turns = split_system(TRANSCRIPT[1:])
        assert system is None
        assert len(turns) == 1

    def test_complete_lifts_system_prompt(self):
        mock_anthropic, mock_client = _anthropic_module("Hola, ", "estudiante")
        with patch.dict("sys.modules", {"anthropic": mock_anthropic}):
            provider = ClaudeDirectProvider(api_key="test-key")
            result = provider.complete(TRANSCRIPT, max_tokens=600)

        assert result == "Hola, estudiante"
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "Eres Joaquín"
        assert kwargs["messages"] == [{"role": "user", "content": "Me gusta la biología"}]
        assert kwargs["max_tokens"] == 600

    def test_complete_empty_reply_raises(self):
        mock_anthropic, _ = _anthropic_module()
        with patch.dict("sys.modules", {"anthropic": mock_anthropic}):
            provider = ClaudeDirectProvider(api_key="test-key")
            with pytest.raises(ValueError):
                provider.complete(TRANSCRIPT)

    def test_health_check_success(self):
        mock_anthropic, mock_client = _anthropic_module("ok")
        with patch.dict("sys.modules", {"anthropic": mock_anthropic}):
            assert ClaudeDirectProvider(api_key="test-key").health_check() is True
        mock_client.messages.create.assert_called_once()


class TestPrompts:
    def test_message_without_files_unchanged(self):
        assert compose_user_content("hola", []) == "hola"

    def test_file_sections_appended(self):
        section = format_file_section("cv.txt", "text/plain", "texto")
        content = compose_user_content("Revisa", [section])
        assert content == (
            "Revisa\n\n[Archivos adjuntos:]\n"
            "\n--- cv.txt (text/plain) ---\ntexto\n--- Fin del archivo ---\n"
        )


class TestProviderResolver:
    def _config(self, **secrets):
        return OrientaConfig(secrets=secrets)

    def test_no_keys_no_provider(self):
        resolver = ProviderResolver(self._config())
        assert resolver.resolve() is None
        status = resolver.get_status()
        assert status.active_provider is None
        assert all(not p.configured for p in status.providers)

    def test_openai_preferred_by_default(self):
        config = self._config(openai={"api_key": "sk"}, anthropic={"api_key": "ant"})
        resolver = ProviderResolver(config)
        assert isinstance(resolver.resolve(), OpenAIProvider)
        assert resolver.active_provider_type == "openai"

    def test_falls_back_to_other_configured_provider(self):
        resolver = ProviderResolver(self._config(anthropic={"api_key": "ant"}))
        assert isinstance(resolver.resolve(), ClaudeDirectProvider)

    def test_configured_model_and_sampling(self):
        config = OrientaConfig(
            completion={"provider": "anthropic", "model": "claude-x", "temperature": 0.2},
            secrets={"anthropic": {"api_key": "ant"}},
        )
        provider = ProviderResolver(config).resolve()
        assert provider.model == "claude-x"
        assert provider.sampling.temperature == 0.2

    def test_unhealthy_provider_skipped(self):
        config = OrientaConfig(
            completion={"health_check_on_startup": True},
            secrets={"openai": {"api_key": "sk"}, "anthropic": {"api_key": "ant"}},
        )
        with patch.object(OpenAIProvider, "health_check", return_value=False), \
                patch.object(ClaudeDirectProvider, "health_check", return_value=True):
            resolver = ProviderResolver(config)
            provider = resolver.resolve()

        assert isinstance(provider, ClaudeDirectProvider)
        healthy = {p.name: p.healthy for p in resolver.get_status().providers}
        assert healthy == {"openai": False, "anthropic": True}
