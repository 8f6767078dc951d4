"""
Core infrastructure module for BPMN diff.

Provides the error taxonomy, logging/observability, and the LLM abstraction
used by the summarization stage.
"""

from .errors import (
    ComparisonError,
    ParseError,
    SchemaError,
    SummarizationError,
)
from .llm_client import (
    BaseLLMClient,
    LLMClientFactory,
    LLMConfig,
    LLMMessage,
    LLMProviderType,
    LLMResponse,
    OllamaClient,
    OpenAICompatibleClient,
)
from .observability import (
    LogLevel,
    ObservabilityConfig,
    ObservabilityManager,
    Timer,
    log_execution,
    record_metric,
    span,
)

__all__ = [
    # Errors
    "ComparisonError",
    "ParseError",
    "SchemaError",
    "SummarizationError",
    # LLM
    "BaseLLMClient",
    "LLMClientFactory",
    "LLMConfig",
    "LLMMessage",
    "LLMProviderType",
    "LLMResponse",
    "OllamaClient",
    "OpenAICompatibleClient",
    # Observability
    "LogLevel",
    "ObservabilityConfig",
    "ObservabilityManager",
    "Timer",
    "log_execution",
    "record_metric",
    "span",
]
