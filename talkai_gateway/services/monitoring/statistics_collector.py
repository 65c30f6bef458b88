"""
Statistics Collector Module

This module provides the StatisticsCollector class, the process-wide
aggregate of chat completion outcomes shown on the dashboard.

The collector tracks:
- Total, successful (2xx) and failed request counters
- Time of the last recorded request
- Average response time as an incremental running mean

Every update and every read happens under one lock, so a snapshot always
satisfies ``total_requests == successful_requests + failed_requests``.
"""

import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional


class StatisticsCollector:
    """
    Running request statistics shared by all request handlers.

    Attributes:
        total_requests (int): Number of recorded requests
        successful_requests (int): Requests that finished with a 2xx status
        failed_requests (int): Requests that finished with any other status
        last_request_time (datetime): When the last request was recorded (UTC)
        average_response_time (float): Mean request duration in seconds
    """

    def __init__(self):
        """
        Initialize an empty collector.

        All counters start at zero and no request time is known yet.
        """
        self._lock = threading.Lock()
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.last_request_time: Optional[datetime] = None
        self.average_response_time = 0.0

    def record(self, duration: float, status_code: int):
        """
        Record the outcome of one request.

        Args:
            duration (float): Time from request start to completion, in seconds.
            status_code (int): Final HTTP status code sent to the client.
        """
        with self._lock:
            self.total_requests += 1
            self.last_request_time = datetime.now(timezone.utc)

            if 200 <= status_code < 300:
                self.successful_requests += 1
            else:
                self.failed_requests += 1

            if self.total_requests == 1:
                self.average_response_time = duration
            else:
                total_duration = self.average_response_time * (self.total_requests - 1) + duration
                self.average_response_time = total_duration / self.total_requests

    def get_statistics(self) -> Dict[str, Any]:
        """
        Return a consistent snapshot of the statistics.

        Returns:
            Dict[str, Any]: Dictionary with:
                - total_requests (int)
                - successful_requests (int)
                - failed_requests (int)
                - last_request_time (str | None): ISO-8601 timestamp
                - average_response_time (float): seconds
        """
        with self._lock:
            last_request_time = self.last_request_time
            return {
                "total_requests": self.total_requests,
                "successful_requests": self.successful_requests,
                "failed_requests": self.failed_requests,
                "last_request_time": last_request_time.isoformat() if last_request_time else None,
                "average_response_time": self.average_response_time,
            }
