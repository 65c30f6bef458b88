"""
Bounded log of recent request outcomes for the dashboard.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any, Dict, List


LIVE_REQUEST_CAPACITY = 100


@dataclass(frozen=True)
class LiveRequestRecord:
    method: str
    path: str
    status: int
    duration: int  # milliseconds
    user_agent: str
    id: str = field(default_factory=lambda: str(time.time_ns()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class LiveRequestLog:
    """
    Fixed-capacity FIFO of LiveRequestRecord.

    Appending to a full log evicts the oldest record. Readers only ever get
    copies, never the backing deque.
    """

    def __init__(self, capacity: int = LIVE_REQUEST_CAPACITY):
        self._lock = threading.Lock()
        self._records = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._records.maxlen

    def append(self, record: LiveRequestRecord):
        with self._lock:
            self._records.append(record)

    def snapshot(self) -> List[LiveRequestRecord]:
        with self._lock:
            return list(self._records)

    def to_json(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
