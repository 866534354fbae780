"""
Runtime Metrics
===============
In-process counters injected into strategies.

Strategies never touch process-wide state: each one receives a recorder at
construction and reports through it.
"""

import threading
from collections import defaultdict
from typing import Dict, Protocol, Tuple

ORDERS_SUBMITTED = "orders_submitted"


class MetricsRecorder(Protocol):
    """Anything that can count labelled events"""

    def increment(self, name: str, label: str, amount: int = 1) -> None:
        ...


class InMemoryMetrics:
    """Thread-safe labelled counters"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Dict[Tuple[str, str], int] = defaultdict(int)

    def increment(self, name: str, label: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[(name, label)] += amount

    def count(self, name: str, label: str) -> int:
        with self._lock:
            return self._counters.get((name, label), 0)

    def total(self, name: str) -> int:
        with self._lock:
            return sum(v for (n, _), v in self._counters.items() if n == name)

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        """Return counters grouped by name"""
        with self._lock:
            grouped: Dict[str, Dict[str, int]] = defaultdict(dict)
            for (name, label), value in self._counters.items():
                grouped[name][label] = value
        return dict(grouped)
