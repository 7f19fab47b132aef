"""Low-level HTTP client for the Jamf Pro API.

Handles client-credentials authentication, token expiry and HTTP errors.
"""
from __future__ import annotations
from typing import Optional, Dict, Any
from datetime import datetime, timedelta

import requests

from .exceptions import JamfAPIError

REQUEST_TIMEOUT = 15

# Refresh this long before the server-declared expiry
TOKEN_EXPIRY_MARGIN = timedelta(seconds=10)


class JamfClient:
    """HTTP client for the Jamf Pro API with automatic token management.

    Usage:
        client = JamfClient("https://example.jamfcloud.com")
        client.authenticate("client-id", "client-secret")
        response = client.get("/JSSResource/computers/match/C02XYZ")
    """

    def __init__(self, base_url: str):
        """Initialize Jamf client.

        Args:
            base_url: Jamf Pro base URL
        """
        self.base_url = base_url.rstrip("/")
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._auth_params: Dict[str, Any] = {}

    def authenticate(self, client_id: str, client_secret: str) -> str:
        """Obtain an API client token and store credentials for auto-refresh.

        Args:
            client_id: API client ID
            client_secret: API client secret

        Returns:
            Access token
        """
        self._auth_params = {"client_id": client_id, "client_secret": client_secret}
        self._token, self._token_expires_at = self._get_client_token(client_id, client_secret)
        return self._token

    def _ensure_authenticated(self) -> None:
        """Ensure we have a valid token, refreshing if necessary."""
        if not self._token or not self._token_expires_at:
            raise JamfAPIError(401, "Not authenticated - call authenticate first", "")

        if datetime.now() >= self._token_expires_at - TOKEN_EXPIRY_MARGIN:
            self._token, self._token_expires_at = self._get_client_token(
                self._auth_params["client_id"],
                self._auth_params["client_secret"],
            )

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with automatic authentication.

        Args:
            path: API endpoint path (e.g., "/JSSResource/computers/match/C02XYZ")
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            JamfAPIError: On HTTP or transport error
        """
        self._ensure_authenticated()
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._token}"
        headers.setdefault("Accept", "application/json")

        try:
            resp = requests.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise JamfAPIError(0, str(e), url) from e
        self._handle_error(resp)
        return resp

    def _get_client_token(self, client_id: str, client_secret: str) -> tuple[str, datetime]:
        """Fetch a token using the client credentials flow."""
        url = f"{self.base_url}/api/oauth/token"
        data = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        }
        try:
            resp = requests.post(url, data=data, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise JamfAPIError(0, str(e), url) from e
        if resp.status_code != 200:
            raise JamfAPIError(resp.status_code, resp.text, url)
        try:
            payload = resp.json()
            token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 60))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise JamfAPIError(resp.status_code, f"Unexpected token response: {e!r}", url) from e
        return token, datetime.now() + timedelta(seconds=expires_in)

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            JamfAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise JamfAPIError(resp.status_code, resp.text, resp.url)
