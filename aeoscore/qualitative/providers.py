"""Language-model providers for the qualitative stage."""

import asyncio
import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
import structlog

from aeoscore.config import Settings
from aeoscore.qualitative.models import (
    DIMENSIONS,
    CompletionRequest,
    CompletionResponse,
    ProviderError,
    ProviderType,
    UsageStats,
)

logger = structlog.get_logger(__name__)


@dataclass
class ProviderConfig:
    """Configuration for a provider."""

    api_key: str = ""
    base_url: str = ""
    timeout_seconds: float = 30.0
    app_url: str = ""  # Sent as HTTP-Referer to OpenRouter when set
    app_title: str = "aeoscore content analyzer"


class QualitativeProvider(ABC):
    """Abstract base class for model providers."""

    provider_type: ProviderType

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a single completion. Failures come back as a response with an error."""
        ...


class ChatCompletionsProvider(QualitativeProvider):
    """Provider speaking the OpenAI-compatible /chat/completions API."""

    default_base_url = ""

    def __init__(self, config: ProviderConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(config)
        if not config.base_url:
            config.base_url = self.default_base_url
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _model_name(self, model: str) -> str:
        return model

    def _failure(self, model: str, start: float, error_type: str, message: str, retryable: bool) -> CompletionResponse:
        return CompletionResponse(
            provider=self.provider_type,
            model=model,
            content="",
            success=False,
            latency_ms=(time.perf_counter() - start) * 1000,
            error=ProviderError(
                provider=self.provider_type,
                error_type=error_type,
                message=message,
                retryable=retryable,
            ),
        )

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        start_time = time.perf_counter()
        model = self._model_name(request.model)

        payload = {
            "model": model,
            "messages": request.to_messages(),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "response_format": {"type": "json_object"},
        }

        # Cancellation of the caller propagates through the await and closes the client
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds, transport=self.transport) as client:
                response = await client.post(
                    f"{self.config.base_url}/chat/completions",
                    headers=self._headers(),
                    json=payload,
                )
        except httpx.TimeoutException:
            return self._failure(
                model, start_time, "timeout", f"Request timed out after {self.config.timeout_seconds}s", True
            )
        except httpx.HTTPError as e:
            return self._failure(model, start_time, "transport", str(e) or type(e).__name__, True)
        except Exception as e:
            return self._failure(model, start_time, "exception", str(e) or type(e).__name__, True)

        latency_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code != 200:
            return self._failure(
                model,
                start_time,
                "api_error",
                f"HTTP {response.status_code}: {response.text[:500]}",
                response.status_code >= 500 or response.status_code == 429,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            return self._failure(model, start_time, "malformed_response", f"Unexpected response body: {e}", False)

        usage_data = data.get("usage") or {}
        usage = UsageStats(
            prompt_tokens=usage_data.get("prompt_tokens", 0),
            completion_tokens=usage_data.get("completion_tokens", 0),
            total_tokens=usage_data.get("total_tokens", 0),
        )

        return CompletionResponse(
            provider=self.provider_type,
            model=model,
            content=content,
            usage=usage,
            latency_ms=latency_ms,
            success=True,
        )


class OpenRouterProvider(ChatCompletionsProvider):
    """OpenRouter aggregator provider - primary provider."""

    provider_type = ProviderType.OPENROUTER
    default_base_url = "https://openrouter.ai/api/v1"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self.config.app_url:
            headers["HTTP-Referer"] = self.config.app_url
        headers["X-Title"] = self.config.app_title
        return headers


class OpenAIProvider(ChatCompletionsProvider):
    """Direct OpenAI provider - fallback."""

    provider_type = ProviderType.OPENAI
    default_base_url = "https://api.openai.com/v1"

    def _model_name(self, model: str) -> str:
        # Map OpenRouter model names to OpenAI
        return model.removeprefix("openai/")


class MockProvider(QualitativeProvider):
    """Deterministic provider for testing."""

    provider_type = ProviderType.MOCK

    def __init__(self, config: ProviderConfig | None = None, content: str | None = None, delay_seconds: float = 0.0):
        super().__init__(config or ProviderConfig())
        self.content = content
        self.delay_seconds = delay_seconds
        self.should_fail: bool = False
        self.fail_count: int = 0
        self.calls: list[CompletionRequest] = []
        self.cancelled: bool = False

    def set_failure_mode(self, should_fail: bool, fail_count: int = 1) -> None:
        """Configure failure behavior."""
        self.should_fail = should_fail
        self.fail_count = fail_count

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.calls.append(request)

        if self.delay_seconds:
            try:
                await asyncio.sleep(self.delay_seconds)
            except asyncio.CancelledError:
                self.cancelled = True
                raise

        if self.should_fail and self.fail_count > 0:
            self.fail_count -= 1
            return CompletionResponse(
                provider=self.provider_type,
                model=request.model,
                content="",
                success=False,
                latency_ms=50.0,
                error=ProviderError(
                    provider=self.provider_type,
                    error_type="mock_failure",
                    message="Simulated failure",
                ),
            )

        content = self.content if self.content is not None else self._generate_mock_response()
        return CompletionResponse(
            provider=self.provider_type,
            model=request.model,
            content=content,
            usage=UsageStats(
                prompt_tokens=len(request.content_digest) // 4,
                completion_tokens=len(content) // 4,
                total_tokens=(len(request.content_digest) + len(content)) // 4,
            ),
            latency_ms=50.0,
            success=True,
        )

    def _generate_mock_response(self) -> str:
        """A fixed, valid assessment."""
        dimension = {
            "score": 70,
            "observations": ["Content is organized into clear sections."],
            "recommendations": ["Add a concise summary near the top of the page."],
        }
        payload = {name: dimension for name in DIMENSIONS}
        payload["suggestions"] = [
            {
                "title": "Add a summary paragraph",
                "description": "Open the page with a two-sentence answer to the main question.",
                "priority": "medium",
            }
        ]
        return json.dumps(payload)


def get_provider(
    provider_type: ProviderType,
    config: ProviderConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> QualitativeProvider:
    """Factory function to get a provider."""
    if config is None:
        config = ProviderConfig()

    if provider_type == ProviderType.OPENROUTER:
        return OpenRouterProvider(config, transport=transport)
    if provider_type == ProviderType.OPENAI:
        return OpenAIProvider(config, transport=transport)
    if provider_type == ProviderType.MOCK:
        return MockProvider(config)
    raise ValueError(f"Unknown provider type: {provider_type}")


def provider_from_settings(settings: Settings) -> QualitativeProvider | None:
    """OpenRouter when a key is configured, else OpenAI, else no provider."""
    if not settings.qualitative_available:
        return None
    if settings.openrouter_api_key:
        return get_provider(
            ProviderType.OPENROUTER,
            ProviderConfig(api_key=settings.openrouter_api_key, timeout_seconds=settings.qualitative_timeout_seconds),
        )
    return get_provider(
        ProviderType.OPENAI,
        ProviderConfig(api_key=settings.openai_api_key or "", timeout_seconds=settings.qualitative_timeout_seconds),
    )
