import requests
from typing import Any, Optional

from safetrip.core.config import settings


class BackendClient:
    """
    Thin JSON client for a REST collaborator.

    Transport and HTTP failures surface as `requests.RequestException`;
    the services decide what they mean.
    """

    def __init__(
            self,
            base_url: Optional[str] = None,
            api_key: Optional[str] = None,
            timeout: Optional[float] = None,
            session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        api_key = api_key if api_key is not None else settings.BACKEND_API_KEY
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> Any:
        """Raise for HTTP errors and decode the JSON body, if any."""
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise requests.RequestException(f"Invalid JSON response from {response.url}") from e
