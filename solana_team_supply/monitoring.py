"""API call accounting for Solana Team Supply."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple


@dataclass
class PerformanceMetrics:
    """Request metrics for one API method called from one context."""

    api: str
    method: str
    main_context: str
    sub_context: Optional[str] = None
    latency_ms: float = 0.0
    request_count: int = 0
    error_count: int = 0
    last_update: str = field(default_factory=lambda: datetime.now().isoformat())

    def record_request(self, success: bool, latency_ms: float):
        """Record a request.

        Args:
            success: Whether the request was successful
            latency_ms: Request latency in milliseconds
        """
        self.request_count += 1
        if not success:
            self.error_count += 1
        self.latency_ms = (self.latency_ms * (self.request_count - 1) + latency_ms) / self.request_count
        self.last_update = datetime.now().isoformat()

    @property
    def success_rate(self) -> float:
        """Percentage of successful requests."""
        if not self.request_count:
            return 100.0
        return (self.request_count - self.error_count) / self.request_count * 100.0


MetricsKey = Tuple[str, str, str, Optional[str]]


class ApiCallCounter:
    """Counts outbound API calls per api, method and calling context.

    The main context names the top-level operation (for example a chat command
    or a CLI invocation) and the sub context names the step inside it, so a
    single analysis run can be broken down by the checks that issued requests.
    """

    def __init__(self):
        self._metrics: Dict[MetricsKey, PerformanceMetrics] = {}

    def record(
        self,
        api: str,
        method: str,
        main_context: str = "default",
        sub_context: Optional[str] = None,
        success: bool = True,
        latency_ms: float = 0.0
    ) -> None:
        """Record one call."""
        key = (api, method, main_context, sub_context)
        metrics = self._metrics.get(key)
        if metrics is None:
            metrics = PerformanceMetrics(api, method, main_context, sub_context)
            self._metrics[key] = metrics
        metrics.record_request(success, latency_ms)

    def total_calls(self, main_context: Optional[str] = None) -> int:
        """Total number of calls, optionally restricted to one main context."""
        return sum(
            m.request_count for m in self._metrics.values()
            if main_context is None or m.main_context == main_context
        )

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Return a plain-dict view keyed by ``api.method[main/sub]``."""
        result = {}
        for (api, method, main_context, sub_context), m in sorted(
            self._metrics.items(), key=lambda item: tuple(str(part) for part in item[0])
        ):
            label = f"{api}.{method}[{main_context}/{sub_context or '-'}]"
            result[label] = {
                "requests": m.request_count,
                "errors": m.error_count,
                "avg_latency_ms": round(m.latency_ms, 2),
                "success_rate": round(m.success_rate, 2),
            }
        return result

    def reset(self) -> None:
        """Forget all recorded calls."""
        self._metrics.clear()


api_call_counter = ApiCallCounter()
