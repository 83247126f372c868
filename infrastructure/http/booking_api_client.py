import logging
from typing import Any, Optional

import requests

from infrastructure.storage.credential_store import CredentialStore

log = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "요청에 실패했습니다."
NETWORK_ERROR_MESSAGE = "네트워크 오류가 발생했습니다. 잠시 후 다시 시도해주세요."


class ApiError(Exception):
    """Non-success backend response or transport failure.

    `status_code` is None when the request never got an HTTP response
    (timeout, connection refused). `error_code` carries the backend's
    discriminated error code when the envelope has one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None and self.error_code is None


class BookingApiClient:
    """
    REST client for the booking backend.

    The bearer token is read from the injected credential store on every
    request, so a user client and an admin client never share credentials.
    """

    def __init__(
        self,
        base_url: str,
        credential_store: Optional[CredentialStore] = None,
        timeout: float = 10.0,
        access_token: Optional[str] = None,
        principal: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.credential_store = credential_store
        self.timeout = timeout
        self._access_token = access_token
        self.principal = principal or (credential_store.principal if credential_store else "anonymous")

    def pinned(self) -> "BookingApiClient":
        """
        Copy bound to the token visible right now.

        Worker threads have no Streamlit script context, so browser storage
        (and with it the credential store) reads as empty there. Take the
        copy on the script thread and hand it to the workers.
        """
        token = self._current_token()
        return BookingApiClient(self.base_url, timeout=self.timeout, access_token=token, principal=self.principal)

    def _current_token(self) -> Optional[str]:
        if self._access_token is not None:
            return self._access_token
        if self.credential_store is not None:
            return self.credential_store.get_access()
        return None

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        token = self._current_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, params: Optional[dict] = None, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        principal = self.principal
        try:
            resp = requests.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"❌ Network error on {method} {path} ({principal}): {e}")
            raise ApiError(NETWORK_ERROR_MESSAGE) from e

        body = self._parse_body(resp)

        if resp.status_code >= 400:
            message = None
            error_code = None
            if isinstance(body, dict):
                message = body.get("message")
                raw_code = body.get("errorCode") or body.get("code")
                # Envelope "code" mirrors the HTTP status on most endpoints; only
                # non-numeric values are discriminated error codes.
                if isinstance(raw_code, str) and not raw_code.isdigit():
                    error_code = raw_code
            message = message or f"{DEFAULT_ERROR_MESSAGE} ({resp.status_code})"
            log.warning(f"⚠️ {method} {path} ({principal}) failed: HTTP {resp.status_code} {message}")
            raise ApiError(message, status_code=resp.status_code, error_code=error_code)

        log.info(f"✅ {method} {path} ({principal}) -> HTTP {resp.status_code}")
        return self._unwrap(body)

    @staticmethod
    def _parse_body(resp) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    @staticmethod
    def _unwrap(body: Any) -> Any:
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)
