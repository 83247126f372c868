"""Authentication flow orchestration (application layer)."""

import logging
from dataclasses import dataclass, replace
from typing import Literal, Optional
from urllib.parse import quote

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from infrastructure.storage.credential_store import CredentialStore
from services import auth_service
from use_cases.domain_models import AuthorizeUrl, TokenPair
from use_cases.error_policy import user_message
from use_cases.session_models import SessionState

log = logging.getLogger(__name__)

AuthFlowStatus = Literal["CONTINUE", "STOP"]

DEFAULT_RETURN_TARGET = "/"
MISSING_TOKEN_MESSAGE = "로그인 응답에 토큰이 없습니다."
MISSING_TOKEN_CODE = "MISSING_TOKEN"
EMPTY_CREDENTIALS_MESSAGE = "이메일과 비밀번호를 입력해주세요."


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    redirect_to: Optional[str] = None


def resolve_return_target(raw: Optional[str]) -> str:
    """Only same-app paths are honoured as a post-login destination."""
    if not raw or not raw.startswith("/") or raw.startswith("//"):
        return DEFAULT_RETURN_TARGET
    return raw


def login_redirect_for(destination: str) -> str:
    return f"/login?from={quote(destination, safe='')}"


class SessionContext:
    """
    Authentication state of the user principal for one browser tab.

    State is derived from the user credential store and only changes through
    the operations below, never through a network check at startup.
    """

    def __init__(self, client: BookingApiClient, store: CredentialStore, provider: str = "kakao"):
        self.client = client
        self.store = store
        self.provider = provider
        self.state = SessionState()

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    def initialize(self) -> SessionState:
        self.state = SessionState(is_authenticated=self.store.is_authenticated(), is_loading=False)
        return self.state

    def _store_tokens(self, tokens: Optional[TokenPair]) -> None:
        if tokens is None:
            raise ApiError(MISSING_TOKEN_MESSAGE, error_code=MISSING_TOKEN_CODE)
        self.store.set_access(tokens.access_token)
        if tokens.refresh_token:
            self.store.set_refresh(tokens.refresh_token)
        self.state = replace(self.state, is_authenticated=True)

    def login(self, email: str, password: str) -> None:
        tokens = auth_service.login(self.client, email, password)
        self._store_tokens(tokens)
        log.info("✅ User logged in")

    def oauth_login(self, code: str, state: Optional[str] = None) -> None:
        tokens = auth_service.oauth_login(self.client, self.provider, code, state)
        self._store_tokens(tokens)
        log.info(f"✅ User logged in with {self.provider}")

    def logout(self) -> None:
        try:
            auth_service.logout(self.client)
        except ApiError as e:
            log.warning(f"⚠️ Logout request failed, clearing local session anyway: {e.message}")
        finally:
            self.store.clear()
            self.state = replace(self.state, is_authenticated=False)

    def link_external_identity(self, code: str, state: str) -> None:
        auth_service.oauth_link(self.client, self.provider, code, state)
        log.info(f"✅ Linked {self.provider} identity to current account")

    def authorize_url(self) -> AuthorizeUrl:
        return auth_service.get_authorize_url(self.client, self.provider)

    def reissue(self) -> bool:
        access = self.store.get_access()
        refresh = self.store.get_refresh()
        if not access or not refresh:
            return False
        try:
            tokens = auth_service.reissue(self.client, access, refresh)
        except ApiError as e:
            log.warning(f"⚠️ Token reissue failed: {e.message}")
            return False
        if tokens is None:
            return False
        self.store.set_access(tokens.access_token)
        if tokens.refresh_token:
            self.store.set_refresh(tokens.refresh_token)
        return True


def require_authenticated(session: SessionContext, destination: str) -> AuthFlowResult:
    """Gate a page on the user session, pointing back to `destination` after login."""
    if session.is_loading:
        session.initialize()
    if session.is_authenticated:
        return AuthFlowResult(status="CONTINUE", reason="authenticated")
    return AuthFlowResult(status="STOP", reason="auth_required", redirect_to=login_redirect_for(destination))


class LoginFlow:
    """Email/password form state. Inputs survive a failed attempt."""

    def __init__(self, session: SessionContext):
        self.session = session
        self.email = ""
        self.password = ""
        self.is_loading = False
        self.error: Optional[str] = None

    def submit(self, email: str, password: str, return_to: Optional[str] = None) -> Optional[str]:
        """Returns the post-login destination, or None when the attempt failed."""
        if self.is_loading:
            return None
        self.email = email
        self.password = password
        if not email.strip() or not password:
            self.error = EMPTY_CREDENTIALS_MESSAGE
            return None

        self.is_loading = True
        self.error = None
        try:
            self.session.login(email.strip(), password)
        except ApiError as e:
            self.error = user_message("login", e)
            return None
        finally:
            self.is_loading = False
        return resolve_return_target(return_to)
