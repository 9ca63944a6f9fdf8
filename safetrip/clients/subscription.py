from typing import Any, Dict, Optional

from safetrip.clients.base import BackendClient


class SubscriptionClient(BackendClient):

    def get_status(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Billing entitlement: product_id, expires_date, will_renew, period_type."""
        return self._request("GET", f"/subscriptions/{user_id}")
