"""
Observability Infrastructure

Logging, tracing and metrics for BPMN diff.

loguru carries the log output (human-readable or one JSON object per line,
always on stderr so stdout stays free for command output). OpenTelemetry
provides spans around the pipeline stages and a small set of comparison
instruments read through an in-memory reader.
"""

import asyncio
import contextlib
import functools
import json
import os
import sys
import time
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, Union

from loguru import logger
from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider

F = TypeVar("F", bound=Callable[..., Any])

HUMAN_LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> "
    "<cyan>{name}:{line}</cyan> {message}"
)


class LogLevel(str, Enum):
    """Log levels accepted by loguru."""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _level_name(level: Union[str, LogLevel]) -> str:
    return level.value if isinstance(level, LogLevel) else str(level).upper()


@dataclass
class ObservabilityConfig:
    """Process-wide logging and telemetry settings."""

    service_name: str = "bpmn-diff"
    log_level: Union[str, LogLevel] = LogLevel.INFO
    json_logs: bool = False
    enable_tracing: bool = True
    enable_metrics: bool = True

    def __post_init__(self) -> None:
        self.log_level = _level_name(self.log_level)

    @classmethod
    def from_env(cls, service_name: str = "bpmn-diff") -> "ObservabilityConfig":
        """Read BPMN_DIFF_LOG_LEVEL and BPMN_DIFF_JSON_LOGS."""
        return cls(
            service_name=service_name,
            log_level=os.getenv("BPMN_DIFF_LOG_LEVEL", LogLevel.INFO.value),
            json_logs=os.getenv("BPMN_DIFF_JSON_LOGS", "").strip().lower() in ("1", "true", "yes"),
        )


class JSONFormatter:
    """Serializes a loguru record dict into one JSON line."""

    def __call__(self, record: Dict[str, Any]) -> str:
        payload: Dict[str, Any] = {
            "ts": record["time"].isoformat(),
            "level": record["level"].name,
            "module": record["name"],
            "func": record["function"],
            "line": record["line"],
            "msg": record["message"],
        }
        if record["extra"]:
            payload["extra"] = {key: str(value) for key, value in record["extra"].items()}

        error = record["exception"]
        if error:
            payload["error"] = {
                "type": error.type.__name__,
                "message": str(error.value),
                "traceback": "".join(
                    traceback.format_exception(error.type, error.value, error.traceback)
                ),
            }
        return json.dumps(payload)


class ObservabilityManager:
    """Owns the loguru sinks and the OpenTelemetry providers for the process.

    Created once through :meth:`initialize`. Library code never requires it:
    spans fall back to the global (no-op) tracer and metrics are dropped while
    no manager exists.
    """

    _instance: Optional["ObservabilityManager"] = None

    def __init__(self, config: ObservabilityConfig):
        self.config = config
        self.tracer: Optional[trace.Tracer] = None
        self.metric_reader: Optional[InMemoryMetricReader] = None
        self._instruments: Dict[str, Any] = {}
        self._resource = Resource(attributes={SERVICE_NAME: config.service_name})

        self._configure_loguru()
        if config.enable_tracing:
            self._install_tracer()
        if config.enable_metrics:
            self._install_meter()

        logger.debug(
            f"Observability ready for {config.service_name} "
            f"(level={config.log_level}, json={config.json_logs})"
        )

    def _configure_loguru(self) -> None:
        logger.remove()
        if self.config.json_logs:
            formatter = JSONFormatter()
            logger.add(
                lambda message: sys.stderr.write(formatter(message.record) + "\n"),
                level=self.config.log_level,
                colorize=False,
            )
            return
        logger.add(
            sys.stderr,
            level=self.config.log_level,
            format=HUMAN_LOG_FORMAT,
            colorize=True,
            diagnose=False,
        )

    def _install_tracer(self) -> None:
        trace.set_tracer_provider(TracerProvider(resource=self._resource))
        self.tracer = trace.get_tracer("bpmn_diff")

    def _install_meter(self) -> None:
        self.metric_reader = InMemoryMetricReader()
        metrics.set_meter_provider(
            MeterProvider(resource=self._resource, metric_readers=[self.metric_reader])
        )
        meter = metrics.get_meter("bpmn_diff")
        self._instruments = {
            "elements": meter.create_counter(
                "bpmn_diff_elements_total",
                description="Elements reported per diff outcome",
                unit="1",
            ),
            "duration": meter.create_histogram(
                "bpmn_diff_stage_duration_ms",
                description="Wall time of extraction, diff and summary steps",
                unit="ms",
            ),
        }

    def record(self, metric_name: str, value: Union[int, float], attributes: Dict[str, str]) -> None:
        """Route a named measurement to the matching instrument."""
        if not self._instruments:
            return
        if metric_name.endswith("_duration"):
            self._instruments["duration"].record(value, attributes=attributes)
        else:
            self._instruments["elements"].add(value, attributes=attributes)

    @classmethod
    def initialize(cls, config: Optional[ObservabilityConfig] = None) -> "ObservabilityManager":
        """Create the process-wide manager on first call; later calls return it."""
        if cls._instance is None:
            cls._instance = cls(config or ObservabilityConfig.from_env())
        return cls._instance

    @classmethod
    def get_instance(cls) -> Optional["ObservabilityManager"]:
        """The manager, or None when observability was never initialized."""
        return cls._instance


@contextlib.contextmanager
def span(name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[trace.Span]:
    """Open a span named ``name`` carrying ``attributes``."""
    manager = ObservabilityManager.get_instance()
    tracer = manager.tracer if manager and manager.tracer else trace.get_tracer("bpmn_diff")
    with tracer.start_as_current_span(name, attributes=attributes or {}) as current:
        yield current


def record_metric(
    metric_name: str,
    value: Union[int, float],
    attributes: Optional[Dict[str, str]] = None,
) -> None:
    """
    Record a measurement.

    Names ending in ``_duration`` (milliseconds) go to the stage duration
    histogram; anything else is counted on the element counter under a
    ``metric`` attribute. A no-op until ObservabilityManager is initialized.

    Args:
        metric_name: Measurement name, e.g. ``elements_added_total``
        value: Count or duration in milliseconds
        attributes: Extra attributes
    """
    tags = {"metric": metric_name, **(attributes or {})}
    manager = ObservabilityManager.get_instance()
    if manager is not None:
        manager.record(metric_name, value, tags)
    logger.trace(f"{metric_name}={value}")


def log_execution(
    level: Union[str, LogLevel] = LogLevel.DEBUG,
    include_duration: bool = True,
) -> Callable[[F], F]:
    """
    Log completion (and failure) of the decorated sync or async callable.

    Arguments are never logged: they are usually whole XML documents.

    Args:
        level: Level of the completion message
        include_duration: Attach the elapsed time and record it as a metric
    """
    level_name = _level_name(level)

    def decorator(func: F) -> F:
        qualified = f"{func.__module__}.{func.__qualname__}"

        def report(started: float, error: Optional[BaseException] = None) -> None:
            if error is not None:
                logger.bind(error=str(error)).debug(f"{qualified} raised {type(error).__name__}")
                return
            if not include_duration:
                logger.log(level_name, f"{qualified} done")
                return
            elapsed_ms = (time.perf_counter() - started) * 1000
            record_metric(f"{func.__name__}_duration", elapsed_ms)
            logger.bind(duration_ms=round(elapsed_ms, 3)).log(level_name, f"{qualified} done")

        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    report(started, e)
                    raise
                report(started)
                return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                report(started, e)
                raise
            report(started)
            return result

        return wrapper  # type: ignore

    return decorator


class Timer:
    """Measures a block; ``elapsed`` is in seconds once the block exits."""

    def __init__(self, name: str, log: bool = True):
        self.name = name
        self.log = log
        self.elapsed: float = 0.0
        self._started: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.elapsed = time.perf_counter() - self._started
        if self.log:
            logger.debug(f"{self.name} took {self.elapsed_ms:.1f} ms")
            record_metric(f"{self.name}_duration", self.elapsed_ms)


__all__ = [
    "JSONFormatter",
    "LogLevel",
    "ObservabilityConfig",
    "ObservabilityManager",
    "Timer",
    "log_execution",
    "record_metric",
    "span",
]
