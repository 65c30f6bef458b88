"""
Read side of the monitoring stores for the dashboard endpoints.
"""

from importlib import resources
from typing import Any, Dict, List

from .monitoring import StatisticsCollector, LiveRequestLog


class DashboardService:
    def __init__(self, statistics: StatisticsCollector, live_requests: LiveRequestLog):
        self.statistics = statistics
        self.live_requests = live_requests

    def get_stats(self) -> Dict[str, Any]:
        return self.statistics.get_statistics()

    def get_requests(self) -> List[Dict[str, Any]]:
        return self.live_requests.to_json()

    @staticmethod
    def render_page() -> str:
        return resources.files("talkai_gateway").joinpath("static/dashboard.html").read_text(encoding="utf-8")
