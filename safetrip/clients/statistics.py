from typing import Any, Dict, Optional

from safetrip.clients.base import BackendClient


class StatisticsClient(BackendClient):
    """Per-user counters shown on the profile (trips planned, days tracked)."""

    def get_statistics(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._request("GET", f"/user-statistics/{user_id}")

    def increment_statistic(self, user_id: str, field: str, amount: int = 1) -> None:
        self._request(
            "POST",
            f"/user-statistics/{user_id}/increment",
            json={"field": field, "amount": amount},
        )

    def update_user_statistics(self, user_id: str, updates: Dict[str, Any]) -> None:
        self._request("PATCH", f"/user-statistics/{user_id}", json=updates)
