"""
Text-generation backends.

One provider is built at startup from an explicit ``AIProviderConfig`` and
kept for the lifetime of the process. Every backend exposes the same narrow
call: ``generate(prompt, system_prompt) -> str``.
"""

import logging
from dataclasses import dataclass
import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import AsyncOpenAI, OpenAIError
from thesisflow.core.config import Settings

logger = logging.getLogger(__name__)

OPENAI_API_BASE = "https://api.openai.com/v1"
LOCAL_API_BASE = "http://localhost:11434/v1"


class AIProviderError(Exception):
    """The provider call failed; the detail is for logs, not for clients."""


class AIProviderNotConfigured(AIProviderError):
    pass


@dataclass(frozen=True)
class AIProviderConfig:
    provider: str
    model_name: str
    api_key: str | None = None
    base_url: str | None = None
    timeout: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AIProviderConfig":
        if settings.ai_provider == "gemini":
            api_key = settings.gemini_api_key
        elif settings.ai_provider == "openai":
            api_key = settings.openai_api_key
        else:
            api_key = None
        return cls(
            provider=settings.ai_provider,
            model_name=settings.ai_model_name,
            api_key=api_key or None,
            base_url=settings.ai_base_url or None,
            timeout=settings.ai_timeout_seconds,
        )


class AIProvider:
    configured = True

    def __init__(self, config: AIProviderConfig):
        self.name = config.provider
        self.model = config.model_name

    async def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class UnconfiguredProvider(AIProvider):
    """Stands in when the selected backend has no credential."""

    configured = False

    async def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        raise AIProviderNotConfigured(
            f"AI provider '{self.name}' is not configured. Set the API key for this provider."
        )


class GeminiProvider(AIProvider):
    """Hosted Gemini models through Google's client library."""

    def __init__(self, config: AIProviderConfig):
        super().__init__(config)
        http_options = {}
        if config.base_url:
            http_options["base_url"] = config.base_url
        if config.timeout is not None:
            # The client counts in milliseconds
            http_options["timeout"] = int(config.timeout * 1000)
        self.client = genai.Client(
            api_key=config.api_key,
            http_options=genai_types.HttpOptions(**http_options),
        )

    async def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        generation_config = None
        if system_prompt:
            generation_config = genai_types.GenerateContentConfig(system_instruction=system_prompt)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=generation_config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error("Gemini request failed: %s", e, exc_info=True)
            raise AIProviderError(f"gemini request failed: {e}") from e

        text = response.text
        if text is None:
            logger.error("Gemini returned no text: %s", str(response)[:500])
            raise AIProviderError("gemini returned no candidates")
        return text


class OpenAICompatibleProvider(AIProvider):
    """Hosted OpenAI or any local server speaking the same chat-completions API."""

    def __init__(self, config: AIProviderConfig):
        super().__init__(config)
        default_base = OPENAI_API_BASE if config.provider == "openai" else LOCAL_API_BASE
        base_url = (config.base_url or default_base).rstrip("/")
        client_kwargs = {
            # Local servers accept any key but the SDK insists on one
            "api_key": config.api_key or "not-needed",
            "base_url": base_url,
        }
        if config.timeout is not None:
            client_kwargs["timeout"] = config.timeout
        self.client = AsyncOpenAI(**client_kwargs)

    async def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=False,
            )
        except OpenAIError as e:
            logger.error("%s request failed: %s", self.name, e, exc_info=True)
            raise AIProviderError(f"{self.name} request failed: {e}") from e

        if not completion.choices:
            raise AIProviderError(f"{self.name} returned no choices")
        return completion.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()


def create_provider(config: AIProviderConfig) -> AIProvider:
    if config.provider == "local":
        provider: AIProvider = OpenAICompatibleProvider(config)
    elif not config.api_key:
        logger.warning("AI provider '%s' has no API key; generation is disabled", config.provider)
        provider = UnconfiguredProvider(config)
    elif config.provider == "openai":
        provider = OpenAICompatibleProvider(config)
    elif config.provider == "gemini":
        provider = GeminiProvider(config)
    else:
        raise ValueError(f"Unsupported AI provider: {config.provider}")

    logger.info("AI provider: %s (model=%s, configured=%s)", provider.name, provider.model, provider.configured)
    return provider
