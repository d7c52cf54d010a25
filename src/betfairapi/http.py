"""
HTTP layer for the Betfair Exchange API: login and JSON-RPC POSTs
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from .config import Endpoints
from .errors import AuthError, NetworkError
from .types import Session

logger = logging.getLogger(__name__)

BODY_EXCERPT = 200


def _excerpt(response: requests.Response) -> str:
    return (response.text or "")[:BODY_EXCERPT]


class HTTPClient:
    """Synchronous HTTP client; one POST per call, no retries"""

    def __init__(self, endpoints: Optional[Endpoints] = None, timeout: float = 30):
        self.endpoints = endpoints or Endpoints()
        self.timeout = timeout
        self.session = requests.Session()

    def login(self, username: str, password: str, app_key: str) -> Session:
        """
        Exchange credentials for a session token.

        Raises:
            AuthError: Network failure, non-2xx status, malformed body,
                or a login status other than SUCCESS
        """
        headers = {
            "X-Application": app_key,
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        try:
            response = self.session.post(
                self.endpoints.login_url,
                headers=headers,
                data={"username": username, "password": password},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Login request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning("Login rejected with HTTP %s", response.status_code)
            raise AuthError(
                f"Login failed: HTTP {response.status_code}",
                status_code=response.status_code,
                body=_excerpt(response),
            )

        try:
            body = response.json()
        except ValueError as e:
            raise AuthError(
                "Login failed: response is not JSON",
                status_code=response.status_code,
                body=_excerpt(response),
            ) from e
        if not isinstance(body, dict):
            raise AuthError(
                "Login failed: unexpected response shape",
                status_code=response.status_code,
                body=_excerpt(response),
            )

        status = body.get("status") or body.get("loginStatus")
        token = body.get("token") or body.get("sessionToken")
        if status != "SUCCESS" or not token:
            error = body.get("error") or status or "no token returned"
            logger.warning("Login rejected: %s", error)
            raise AuthError(
                f"Login failed: {error}",
                status_code=response.status_code,
                body=_excerpt(response),
            )

        logger.info("Logged in to %s", body.get("product") or "Betfair")
        return Session(
            token=token,
            app_key=app_key,
            created_at=datetime.now(timezone.utc),
            product=body.get("product"),
            status=status,
            raw_response=body,
        )

    def post(self, envelope: Dict[str, Any], session: Session) -> Dict[str, Any]:
        """
        POST a JSON-RPC envelope and return the decoded body.

        Non-2xx responses are passed through when their body carries an
        API error object, so the caller can surface it as ApiError.

        Raises:
            NetworkError: Connection failure, or a response that is not an
                API envelope
        """
        headers = {
            "X-Application": session.app_key,
            "X-Authentication": session.token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        method = envelope.get("method")
        try:
            response = self.session.post(
                self.endpoints.api_url,
                headers=headers,
                json=envelope,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{method}: request failed: {e}") from e

        logger.debug("%s -> HTTP %s", method, response.status_code)
        return self._handle_response(response, method)

    def _handle_response(self, response: requests.Response, method: Optional[str]) -> Dict[str, Any]:
        """Decode the body, raising NetworkError for anything that is not an envelope"""
        try:
            body = response.json()
        except ValueError:
            body = None

        ok = 200 <= response.status_code < 300
        if ok and isinstance(body, dict):
            return body
        if not ok and isinstance(body, dict) and isinstance(body.get("error"), dict):
            return body
        if ok:
            raise NetworkError(
                f"{method}: response is not a JSON object", status_code=response.status_code
            )
        raise NetworkError(
            f"{method}: HTTP {response.status_code}", status_code=response.status_code
        )
