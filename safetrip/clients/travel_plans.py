from typing import Any, Dict, List

from safetrip.clients.base import BackendClient


class TravelPlansClient(BackendClient):
    """Remote persistence for a traveler's destinations (travel_plans)."""

    def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", "/travel-plans", params={"user_id": user_id}) or []

    def create(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/travel-plans", json={"user_id": user_id, **fields})

    def update(self, plan_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/travel-plans/{plan_id}", json=fields)

    def delete(self, plan_id: str) -> None:
        self._request("DELETE", f"/travel-plans/{plan_id}")

    def auto_activate(self, user_id: str) -> None:
        """Promote started plans to active and complete the ones that ended."""
        self._request("POST", "/travel-plans/auto-activate", json={"user_id": user_id})

    def set_active(self, user_id: str, plan_id: str) -> Dict[str, Any]:
        """Demote every other active plan and activate this one in one transaction."""
        return self._request(
            "POST", f"/travel-plans/{plan_id}/activate", json={"user_id": user_id}
        )
