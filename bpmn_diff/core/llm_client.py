"""
LLM Provider Abstraction Layer

Async chat client used by the summarization stage.

Providers:
- ``gemini``: Google's OpenAI-compatible endpoint (default)
- ``openai_compatible``: any ``/chat/completions`` API (OpenAI, LiteLLM, vLLM, ...)
- ``ollama``: a local Ollama server (``/api/chat``), no key required

Each provider client only knows its endpoint, request body and response
shape; session handling, status checks and error logging live in
:class:`BaseLLMClient`.
"""

import asyncio
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp
from loguru import logger
from pydantic import BaseModel, Field, field_validator


class LLMProviderType(str, Enum):
    """Chat APIs the summarizer can talk to."""
    GEMINI = "gemini"
    OPENAI_COMPATIBLE = "openai_compatible"
    OLLAMA = "ollama"


DEFAULT_BASE_URLS: Dict[LLMProviderType, str] = {
    LLMProviderType.GEMINI: "https://generativelanguage.googleapis.com/v1beta/openai",
    LLMProviderType.OPENAI_COMPATIBLE: "https://api.openai.com/v1",
    LLMProviderType.OLLAMA: "http://localhost:11434",
}

DEFAULT_MODELS: Dict[LLMProviderType, str] = {
    LLMProviderType.GEMINI: "gemini-2.5-flash",
    LLMProviderType.OPENAI_COMPATIBLE: "gpt-4o-mini",
    LLMProviderType.OLLAMA: "mistral",
}

CHAT_ROLES = frozenset({"system", "user", "assistant"})


class LLMMessage(BaseModel):
    """One chat turn."""
    role: str = Field(..., description="'system', 'user' or 'assistant'")
    content: str = Field(..., description="Turn text, stripped")

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str) -> str:
        if v not in CHAT_ROLES:
            raise ValueError(f"Unknown chat role '{v}', expected one of {sorted(CHAT_ROLES)}")
        return v

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty")
        return v.strip()


class LLMConfig(BaseModel):
    """Provider selection and request settings.

    ``base_url`` and ``model`` may be left unset to use the provider's
    defaults (see ``resolved_base_url`` / ``resolved_model``).
    """

    provider: LLMProviderType = LLMProviderType.GEMINI
    base_url: Optional[str] = Field(None, description="API root, without trailing slash")
    api_key: Optional[str] = Field(None, description="Bearer token; unused by Ollama")
    model: Optional[str] = None
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, gt=0)
    timeout: float = Field(60.0, gt=0, description="Total request timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else None

    @property
    def resolved_base_url(self) -> str:
        return self.base_url or DEFAULT_BASE_URLS[self.provider]

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]

    @property
    def requires_api_key(self) -> bool:
        return self.provider != LLMProviderType.OLLAMA

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Build from LLM_* variables; ``API_KEY`` is a fallback for ``LLM_API_KEY``."""
        env = os.environ
        return cls(
            provider=env.get("LLM_PROVIDER", LLMProviderType.GEMINI.value).lower(),
            base_url=env.get("LLM_BASE_URL") or None,
            api_key=env.get("LLM_API_KEY") or env.get("API_KEY") or None,
            model=env.get("LLM_MODEL") or None,
            temperature=float(env.get("LLM_TEMPERATURE", "0.3")),
            max_tokens=int(env.get("LLM_MAX_TOKENS", "0")) or None,
            timeout=float(env.get("LLM_TIMEOUT", "60")),
        )


class LLMResponse(BaseModel):
    """Completion text plus token accounting."""
    content: str
    model: str
    usage: Dict[str, int] = Field(default_factory=dict)
    finish_reason: Optional[str] = None


class BaseLLMClient(ABC):
    """Shared request path for chat providers."""

    endpoint: str = ""

    def __init__(self, config: LLMConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        logger.debug(f"{type(self).__name__} using {config.provider.value}/{config.resolved_model}")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
        return self.session

    async def close_session(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()

    @staticmethod
    def _validate_messages(messages: List[LLMMessage]) -> None:
        if not messages:
            raise ValueError("Messages list cannot be empty")
        for message in messages:
            if not isinstance(message, LLMMessage):
                raise ValueError(f"Expected LLMMessage, got {type(message).__name__}")

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    @abstractmethod
    def _build_payload(
        self, messages: List[LLMMessage], temperature: float, max_tokens: Optional[int]
    ) -> Dict[str, Any]:
        """Provider-specific request body."""

    @abstractmethod
    def _parse_response(self, data: Dict[str, Any]) -> LLMResponse:
        """Provider-specific response body -> LLMResponse."""

    async def call(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Send one chat request.

        Raises:
            ValueError: Invalid messages, missing configuration, or a
                200 response without a completion
            RuntimeError: Non-200 response
            aiohttp.ClientError: Transport failure
            asyncio.TimeoutError: No response within ``config.timeout``
        """
        self._validate_messages(messages)
        payload = self._build_payload(
            messages,
            self.config.temperature if temperature is None else temperature,
            max_tokens or self.config.max_tokens,
        )
        url = f"{self.config.resolved_base_url}{self.endpoint}"
        provider = self.config.provider.value

        session = await self._get_session()
        try:
            async with session.post(url, json=payload, headers=self._headers()) as response:
                if response.status != 200:
                    body = await response.text()
                    logger.error(f"{provider} returned HTTP {response.status}: {body[:500]}")
                    raise RuntimeError(f"{provider} API error: {response.status}")
                data = await response.json()
        except asyncio.TimeoutError:
            logger.error(f"{provider} request timed out after {self.config.timeout}s")
            raise
        except aiohttp.ClientError as e:
            logger.error(f"{provider} request failed: {e}")
            raise

        # blocked or empty answers come back as 200 without a completion
        try:
            return self._parse_response(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"{provider} returned an unexpected body: {str(data)[:500]}")
            raise ValueError(f"{provider} response has no completion") from e


class OllamaClient(BaseLLMClient):
    """Local Ollama server."""

    endpoint = "/api/chat"

    def _build_payload(
        self, messages: List[LLMMessage], temperature: float, max_tokens: Optional[int]
    ) -> Dict[str, Any]:
        options: Dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens
        return {
            "model": self.config.resolved_model,
            "messages": [m.model_dump() for m in messages],
            "options": options,
            "stream": False,
        }

    def _parse_response(self, data: Dict[str, Any]) -> LLMResponse:
        prompt = data.get("prompt_eval_count", 0)
        completion = data.get("eval_count", 0)
        return LLMResponse(
            content=(data.get("message") or {}).get("content", ""),
            model=data.get("model", self.config.resolved_model),
            usage={
                "prompt_tokens": prompt,
                "completion_tokens": completion,
                "total_tokens": prompt + completion,
            },
            finish_reason=data.get("done_reason", "stop"),
        )


class OpenAICompatibleClient(BaseLLMClient):
    """``/chat/completions`` APIs, including Gemini's OpenAI-compatible endpoint."""

    endpoint = "/chat/completions"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _build_payload(
        self, messages: List[LLMMessage], temperature: float, max_tokens: Optional[int]
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.resolved_model,
            "messages": [m.model_dump() for m in messages],
            "temperature": temperature,
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens
        return payload

    def _parse_response(self, data: Dict[str, Any]) -> LLMResponse:
        choice = data["choices"][0]
        usage = data.get("usage") or {}
        return LLMResponse(
            content=choice["message"].get("content") or "",
            model=data.get("model", self.config.resolved_model),
            usage={
                key: usage.get(key, 0)
                for key in ("prompt_tokens", "completion_tokens", "total_tokens")
            },
            finish_reason=choice.get("finish_reason"),
        )

    async def call(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> LLMResponse:
        if not self.config.api_key:
            raise ValueError("API key is not configured.")
        return await super().call(messages, temperature, max_tokens, **kwargs)


class LLMClientFactory:
    """Maps a provider to its client class."""

    _clients: Dict[LLMProviderType, type] = {
        LLMProviderType.GEMINI: OpenAICompatibleClient,
        LLMProviderType.OPENAI_COMPATIBLE: OpenAICompatibleClient,
        LLMProviderType.OLLAMA: OllamaClient,
    }

    @classmethod
    def create(cls, config: LLMConfig) -> BaseLLMClient:
        client_class = cls._clients.get(config.provider)
        if client_class is None:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
        return client_class(config)


__all__ = [
    "BaseLLMClient",
    "LLMClientFactory",
    "LLMConfig",
    "LLMMessage",
    "LLMProviderType",
    "LLMResponse",
    "OllamaClient",
    "OpenAICompatibleClient",
]
