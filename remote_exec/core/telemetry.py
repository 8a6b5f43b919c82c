"""
Telemetry and metrics collection
"""
import threading
import time
from collections import deque
from typing import Deque, Dict, Any, Optional
from dataclasses import dataclass, field

# Oldest records are dropped past this many per kind
DEFAULT_MAX_RECORDS = 1000


@dataclass
class Metric:
    """Single metric value"""
    name: str
    value: float
    timestamp: float = field(default_factory=time.time)
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class Event:
    """Event record"""
    name: str
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)


class Telemetry:
    """In-memory collector shared by concurrent session callers, bounded per kind"""

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS):
        self._metrics: Deque[Metric] = deque(maxlen=max_records)
        self._events: Deque[Event] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def record_metric(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a metric"""
        with self._lock:
            self._metrics.append(Metric(name=name, value=value, tags=tags or {}))

    def record_event(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Record an event"""
        with self._lock:
            self._events.append(Event(name=name, metadata=metadata or {}))

    def get_metrics(self) -> list[Metric]:
        """Get all recorded metrics"""
        with self._lock:
            return list(self._metrics)

    def get_events(self, name: Optional[str] = None) -> list[Event]:
        """Get recorded events, optionally filtered by name"""
        with self._lock:
            if name is None:
                return list(self._events)
            return [event for event in self._events if event.name == name]

    def clear(self) -> None:
        """Clear all metrics and events"""
        with self._lock:
            self._metrics.clear()
            self._events.clear()


# Global telemetry instance
_telemetry = Telemetry()


def get_telemetry() -> Telemetry:
    """Get global telemetry instance"""
    return _telemetry
