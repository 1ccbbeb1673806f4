from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


def _label_key(labels: Dict[str, Any]) -> Tuple:
    return tuple(sorted(labels.items()))


@dataclass
class Counter:
    name: str
    help: str
    values: Dict[Tuple, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def inc(self, value: float = 1.0, **labels: Any) -> None:
        key = _label_key(labels)
        with self._lock:
            self.values[key] = self.values.get(key, 0.0) + value

    def get(self, **labels: Any) -> float:
        with self._lock:
            return self.values.get(_label_key(labels), 0.0)

    def reset(self) -> None:
        with self._lock:
            self.values.clear()


@dataclass
class Histogram:
    name: str
    help: str
    buckets: List[float]
    counts: Dict[Tuple, List[int]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def observe(self, val: float, **labels: Any) -> None:
        key = _label_key(labels)
        with self._lock:
            if key not in self.counts:
                # trailing slot counts observations above the largest bucket
                self.counts[key] = [0 for _ in range(len(self.buckets) + 1)]
            for i, b in enumerate(self.buckets):
                if val <= b:
                    self.counts[key][i] += 1
                    break
            else:
                self.counts[key][-1] += 1

    def total(self, **labels: Any) -> int:
        with self._lock:
            return sum(self.counts.get(_label_key(labels), []))

    def reset(self) -> None:
        with self._lock:
            self.counts.clear()


# Predefined metrics
ttlstore_requests_total = Counter("ttlstore_requests_total", "Cache requests by operation and result")
ttlstore_backend_errors_total = Counter("ttlstore_backend_errors_total", "Remote backend failures by operation")
ttlstore_sweep_removed_total = Counter("ttlstore_sweep_removed_total", "Entries removed by the expiry sweep")
ttlstore_request_latency_seconds = Histogram(
    "ttlstore_request_latency_seconds",
    "Backend call latency seen by the HTTP layer",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

ALL_METRICS: List[Any] = [
    ttlstore_requests_total,
    ttlstore_backend_errors_total,
    ttlstore_sweep_removed_total,
    ttlstore_request_latency_seconds,
]


def reset_all() -> None:
    for metric in ALL_METRICS:
        metric.reset()
