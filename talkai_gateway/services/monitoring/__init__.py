"""
Monitoring Package

Process-wide observability stores updated by every chat completion call:

- statistics_collector: request counters and running mean latency
- live_request_log: bounded log of the most recent request outcomes

Both are plain in-memory objects owned by the application instance; they
reset when the process restarts.
"""

from .statistics_collector import StatisticsCollector
from .live_request_log import LiveRequestLog, LiveRequestRecord

__all__ = [
    "StatisticsCollector",
    "LiveRequestLog",
    "LiveRequestRecord",
]
