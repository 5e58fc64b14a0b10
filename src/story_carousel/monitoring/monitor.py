"""Error classification, metrics and health reporting."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Callable

from ..constants import (
    ERROR_HISTORY_SIZE,
    HEALTH_CACHE_CRITICAL,
    HEALTH_MAX_ERROR_RATE,
    HEALTH_RENDER_CRITICAL,
    HEALTH_WINDOW_SECONDS,
    ErrorType,
)

_logger = logging.getLogger("carousel.monitor")


@dataclass(frozen=True)
class ErrorRecord:
    """One recorded error."""

    type: ErrorType
    message: str
    timestamp: float

    def to_dict(self) -> dict:
        return {"type": self.type.value, "message": self.message, "timestamp": self.timestamp}


@dataclass
class ErrorMetrics:
    """Per-type error counters since the last reset."""

    render_errors: int = 0
    cache_errors: int = 0
    publish_api_errors: int = 0
    unknown_errors: int = 0
    total_errors: int = 0
    last_error_time: float | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class HealthStatus:
    """Health verdict derived from recent errors."""

    healthy: bool
    error_rate: float
    critical_errors: bool
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


_COUNTER_FIELDS = {
    ErrorType.RENDER: "render_errors",
    ErrorType.CACHE: "cache_errors",
    ErrorType.PUBLISH_API: "publish_api_errors",
    ErrorType.UNKNOWN: "unknown_errors",
}


def classify_error(error: BaseException) -> ErrorType:
    """Error type from the exception's `kind` tag, unknown when untagged."""
    kind = getattr(error, "kind", None)
    if isinstance(kind, ErrorType):
        return kind
    return ErrorType.UNKNOWN


class ErrorMonitor:
    """Thread-safe error counters, history ring and health status.

    Usage:
        monitor = ErrorMonitor()
        monitor.record_error(RenderError("timeout"), context={"story": "abc"})
        monitor.get_health_status().healthy
    """

    def __init__(
        self,
        history_size: int = ERROR_HISTORY_SIZE,
        window_seconds: int = HEALTH_WINDOW_SECONDS,
        max_error_rate: float = HEALTH_MAX_ERROR_RATE,
        render_critical: int = HEALTH_RENDER_CRITICAL,
        cache_critical: int = HEALTH_CACHE_CRITICAL,
        clock: Callable[[], float] = time.time,
    ):
        self.window_seconds = window_seconds
        self.max_error_rate = max_error_rate
        self.render_critical = render_critical
        self.cache_critical = cache_critical
        self._clock = clock
        self._lock = threading.Lock()
        self._metrics = ErrorMetrics()
        # Most recent first
        self._history: deque[ErrorRecord] = deque(maxlen=history_size)

    def record_error(
        self,
        error: BaseException,
        error_type: ErrorType | None = None,
        context: dict | None = None,
    ) -> ErrorRecord:
        """Record an error.

        Args:
            error: The exception to record.
            error_type: Explicit type, overrides the exception's own tag.
            context: Extra key/value pairs for the log line.

        Returns:
            The stored history record.
        """
        kind = error_type or classify_error(error)
        record = ErrorRecord(type=kind, message=str(error) or type(error).__name__, timestamp=self._clock())

        with self._lock:
            field_name = _COUNTER_FIELDS[kind]
            setattr(self._metrics, field_name, getattr(self._metrics, field_name) + 1)
            self._metrics.total_errors += 1
            self._metrics.last_error_time = record.timestamp
            self._history.appendleft(record)

        ctx = " | ".join(f"{k}:{v}" for k, v in (context or {}).items())
        _logger.error(
            f"ERROR | type:{kind.value} | {type(error).__name__}: {record.message}"
            + (f" | {ctx}" if ctx else "")
        )
        return record

    def get_metrics(self) -> ErrorMetrics:
        """Snapshot of the counters."""
        with self._lock:
            return ErrorMetrics(**asdict(self._metrics))

    def get_error_history(self, limit: int = 10) -> list[ErrorRecord]:
        """Most recent errors first."""
        with self._lock:
            return list(self._history)[:max(0, limit)]

    def reset_metrics(self) -> None:
        """Clear counters and history."""
        with self._lock:
            self._metrics = ErrorMetrics()
            self._history.clear()
        _logger.info("RESET | metrics and history cleared")

    def get_health_status(self) -> HealthStatus:
        """Compute health from the recent error rate and critical counters.

        Two counters are critical: render errors past `render_critical`
        and cache errors past `cache_critical`. Slide image generation
        is all counted as render errors, so the second threshold watches
        the render cache that backs it. The message names whichever
        counter tripped.
        """
        now = self._clock()
        with self._lock:
            recent = sum(1 for r in self._history if now - r.timestamp <= self.window_seconds)
            render_errors = self._metrics.render_errors
            cache_errors = self._metrics.cache_errors

        error_rate = recent / (self.window_seconds / 60)
        tripped = []
        if render_errors > self.render_critical:
            tripped.append(f"render errors {render_errors} > {self.render_critical}")
        if cache_errors > self.cache_critical:
            tripped.append(f"cache errors {cache_errors} > {self.cache_critical}")
        critical = bool(tripped)
        healthy = error_rate < self.max_error_rate and not critical

        if healthy:
            message = "Service operating normally"
        elif critical:
            message = f"Critical errors detected: {', '.join(tripped)}"
        else:
            message = f"High error rate detected: {error_rate:.1f} errors/min"

        return HealthStatus(
            healthy=healthy,
            error_rate=error_rate,
            critical_errors=critical,
            message=message,
        )
