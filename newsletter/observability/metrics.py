from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass
class _LatencyAgg:
    count: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, elapsed_ms: float) -> None:
        self.count += 1
        self.sum_ms += float(elapsed_ms)
        if elapsed_ms > self.max_ms:
            self.max_ms = float(elapsed_ms)


class InMemoryMetrics:
    """Thread-safe, process-local metrics (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.http_requests_total: int = 0
        self.subscribers_created_total: int = 0
        self.subscriber_writes_rejected_total: int = 0
        self.subscriber_reads_total: int = 0
        self.subscriber_cache_hits_total: int = 0
        self.http_request_ms = _LatencyAgg()
        self.store_io_ms = _LatencyAgg()

    def observe_http_request(self, elapsed_ms: float) -> None:
        with self._lock:
            self.http_requests_total += 1
            self.http_request_ms.observe(elapsed_ms)

    def observe_write(self, created: bool, elapsed_ms: float) -> None:
        with self._lock:
            if created:
                self.subscribers_created_total += 1
            else:
                self.subscriber_writes_rejected_total += 1
            self.store_io_ms.observe(elapsed_ms)

    def observe_read(self, cache_hit: bool, elapsed_ms: float | None = None) -> None:
        with self._lock:
            self.subscriber_reads_total += 1
            if cache_hit:
                self.subscriber_cache_hits_total += 1
            if elapsed_ms is not None:
                self.store_io_ms.observe(elapsed_ms)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {
                    "http_requests_total": self.http_requests_total,
                    "subscribers_created_total": self.subscribers_created_total,
                    "subscriber_writes_rejected_total": self.subscriber_writes_rejected_total,
                    "subscriber_reads_total": self.subscriber_reads_total,
                    "subscriber_cache_hits_total": self.subscriber_cache_hits_total,
                },
                "latency_ms": {
                    "http_request_ms": asdict(self.http_request_ms),
                    "store_io_ms": asdict(self.store_io_ms),
                },
            }

    def reset(self) -> None:
        with self._lock:
            self.http_requests_total = 0
            self.subscribers_created_total = 0
            self.subscriber_writes_rejected_total = 0
            self.subscriber_reads_total = 0
            self.subscriber_cache_hits_total = 0
            self.http_request_ms = _LatencyAgg()
            self.store_io_ms = _LatencyAgg()


_METRICS: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = InMemoryMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Reset metrics counters/aggregates (used by tests)."""

    get_metrics().reset()
