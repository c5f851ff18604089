"""
Unit tests for services that do not need the HTTP layer.
"""

import io
import json
from types import SimpleNamespace

import httpx
import pytest
from fastapi import UploadFile
from google import genai
from google.genai import types as genai_types

from thesisflow.core.config import Settings
from thesisflow.models import CitationStyle
from thesisflow.services.ai_provider import (
    AIProviderConfig,
    AIProviderError,
    AIProviderNotConfigured,
    GeminiProvider,
    OpenAICompatibleProvider,
    UnconfiguredProvider,
    create_provider,
)
from thesisflow.services.citations import format_citation, export_citations
from thesisflow.services.documents import (
    DocumentExtractionError,
    DocumentTooLarge,
    UnsupportedDocumentType,
    extract_text,
    read_upload,
)
from thesisflow.services.generation import FlashcardParseError, build_document_context, parse_flashcards


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestParseFlashcards:
    def test_bare_array(self):
        raw = json.dumps([{"question": " Why? ", "answer": " Because. "}])
        assert parse_flashcards(raw) == [{"front": "Why?", "back": "Because."}]

    def test_code_fence_and_wrapper_keys(self):
        for key in ("flashcards", "cards", "questions"):
            raw = "```json\n" + json.dumps({key: [{"front": "F", "back": "B"}]}) + "\n```"
            assert parse_flashcards(raw) == [{"front": "F", "back": "B"}]

    def test_incomplete_items_are_skipped(self):
        raw = json.dumps([{"question": "Q"}, "text", {"question": "Q2", "answer": "A2"}])
        assert parse_flashcards(raw) == [{"front": "Q2", "back": "A2"}]

    @pytest.mark.parametrize("raw", ["not json", "{}", '{"flashcards": "none"}', "[]", '[{"question": ""}]', '"text"'])
    def test_unusable_replies(self, raw):
        with pytest.raises(FlashcardParseError):
            parse_flashcards(raw)

    def test_parse_error_is_a_provider_error(self):
        assert issubclass(FlashcardParseError, AIProviderError)


class TestCitations:
    def test_apa(self):
        ref = SimpleNamespace(title="Title", authors=["Doe, J.", "Roe, R."], year=2024, source="Journal")
        assert format_citation(ref, CitationStyle.APA) == "Doe, J., Roe, R. (2024). Title. Journal"

    def test_fallbacks(self):
        ref = SimpleNamespace(title="", authors=None, year=None, source=None)
        assert format_citation(ref, "chicago") == 'Unknown Author. "Untitled."  (n.d.).'
        assert format_citation(ref, "mla") == 'Unknown Author. "Untitled." , n.d..'

    def test_export_joins_with_blank_line(self):
        refs = [
            SimpleNamespace(title="A", authors=["X"], year=2001, source="S"),
            SimpleNamespace(title="B", authors=["Y"], year=2002, source="S"),
        ]
        assert export_citations(refs) == "X (2001). A. S\n\nY (2002). B. S"
        assert export_citations([]) == ""


class TestSettings:
    def test_database_url_normalization(self):
        assert _settings(database_url="postgresql://u:p@db/x").sqlalchemy_database_url == "postgresql+asyncpg://u:p@db/x"
        assert _settings(database_url="sqlite:///tmp/x.db").sqlalchemy_database_url == "sqlite+aiosqlite:///tmp/x.db"
        assert _settings(database_url="sqlite:data.db").sqlalchemy_database_url == "sqlite+aiosqlite:///data.db"

    def test_desktop_mode_uses_embedded_file(self):
        settings = _settings(desktop_mode=True, desktop_db_path="/tmp/thesis.db", database_url="postgresql://db/x")
        assert settings.sqlalchemy_database_url == "sqlite+aiosqlite:////tmp/thesis.db"

    def test_cors_origins(self):
        assert _settings(allowed_origins="http://a.test, http://b.test").cors_origins == ["http://a.test", "http://b.test"]
        desktop = _settings(allowed_origins=[], desktop_mode=True, port=5050)
        assert desktop.cors_origins == ["http://localhost:5050", "http://127.0.0.1:5050"]

    def test_unknown_ai_provider(self):
        with pytest.raises(ValueError):
            _settings(ai_provider="claude")

    def test_provider_config_picks_matching_key(self):
        settings = _settings(ai_provider="OpenAI", openai_api_key="sk-test", gemini_api_key="g-test")
        config = AIProviderConfig.from_settings(settings)
        assert (config.provider, config.api_key) == ("openai", "sk-test")

        config = AIProviderConfig.from_settings(_settings(ai_provider="local", openai_api_key="sk-test"))
        assert config.api_key is None


class TestCreateProvider:
    def test_missing_key_gives_unconfigured_provider(self):
        provider = create_provider(AIProviderConfig(provider="gemini", model_name="gemini-pro-latest"))
        assert isinstance(provider, UnconfiguredProvider)
        assert provider.configured is False

    def test_backends(self):
        gemini = create_provider(AIProviderConfig(provider="gemini", model_name="m", api_key="k"))
        openai = create_provider(AIProviderConfig(provider="openai", model_name="m", api_key="k"))
        local = create_provider(AIProviderConfig(provider="local", model_name="llama3"))

        assert isinstance(gemini, GeminiProvider)
        assert isinstance(openai, OpenAICompatibleProvider)
        assert isinstance(local, OpenAICompatibleProvider)
        assert str(local.client.base_url).startswith("http://localhost:11434/v1")
        assert local.configured is True

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_provider(AIProviderConfig(provider="other", model_name="m", api_key="k"))

    async def test_unconfigured_provider_refuses_to_generate(self):
        provider = UnconfiguredProvider(AIProviderConfig(provider="openai", model_name="gpt-4o"))
        with pytest.raises(AIProviderNotConfigured):
            await provider.generate("hello")


class TestGeminiProvider:
    def _provider(self, reply=None, error=None):
        provider = GeminiProvider(
            AIProviderConfig(provider="gemini", model_name="gemini-pro-latest", api_key="g-key")
        )
        calls = []

        async def generate_content(**kwargs):
            calls.append(kwargs)
            if error:
                raise error
            return reply

        provider.client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
        return provider, calls

    async def test_generate(self):
        reply = genai_types.GenerateContentResponse(
            candidates=[
                genai_types.Candidate(
                    content=genai_types.Content(parts=[genai_types.Part(text="Hel"), genai_types.Part(text="lo")])
                )
            ]
        )
        provider, calls = self._provider(reply=reply)

        assert await provider.generate("prompt", "system") == "Hello"
        assert calls[0]["model"] == "gemini-pro-latest"
        assert calls[0]["contents"] == "prompt"
        assert calls[0]["config"].system_instruction == "system"

    async def test_no_system_prompt(self):
        reply = genai_types.GenerateContentResponse(
            candidates=[genai_types.Candidate(content=genai_types.Content(parts=[genai_types.Part(text="ok")]))]
        )
        provider, calls = self._provider(reply=reply)

        assert await provider.generate("prompt") == "ok"
        assert calls[0]["config"] is None

    async def test_transport_error(self):
        provider, _ = self._provider(error=httpx.ConnectError("connection refused"))
        with pytest.raises(AIProviderError):
            await provider.generate("prompt")

    async def test_missing_candidates(self):
        provider, _ = self._provider(reply=genai_types.GenerateContentResponse())
        with pytest.raises(AIProviderError):
            await provider.generate("prompt")

    def test_client_accepts_timeout_and_base_url(self):
        provider = GeminiProvider(
            AIProviderConfig(
                provider="gemini", model_name="m", api_key="k", base_url="http://gemini.test", timeout=2.5
            )
        )
        assert isinstance(provider.client, genai.Client)


class TestDocuments:
    def test_plain_text(self):
        assert extract_text(b"a\x00b", "text/plain; charset=utf-8") == "ab"

    def test_unsupported(self):
        with pytest.raises(UnsupportedDocumentType):
            extract_text(b"x", "image/png")

    def test_corrupt_pdf(self):
        with pytest.raises(DocumentExtractionError):
            extract_text(b"%PDF-1.4 garbage", "application/pdf")

    async def test_read_upload_within_limit(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 20000), filename="big.txt")
        assert len(await read_upload(upload, max_size=20000)) == 20000

    async def test_read_upload_over_limit(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 20001), filename="big.txt")
        with pytest.raises(DocumentTooLarge):
            await read_upload(upload, max_size=20000)


def test_document_context_truncates_and_numbers():
    docs = [
        SimpleNamespace(title="One", filename="one.txt", content="abcdefghij"),
        SimpleNamespace(title="Two", filename="two.pdf", content="xyz"),
    ]

    context = build_document_context(docs, limit=4)

    assert "[1] One (Filename: one.txt):\nabcd..." in context
    assert "[2] Two (Filename: two.pdf):\nxyz..." in context
    assert "cite" in context.lower()
    assert build_document_context([]) == ""
