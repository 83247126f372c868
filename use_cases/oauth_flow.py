"""
External identity provider round trip.

Leaving for the provider either logs the user in or links the provider
identity to the account that is already signed in. The choice is parked in
session-area browser storage before the redirect and consumed exactly once
when the provider sends the browser back.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional
from urllib.parse import urlencode

from infrastructure.http.booking_api_client import ApiError
from infrastructure.storage.credential_store import StorageProvider
from use_cases.auth_flow import SessionContext, resolve_return_target
from use_cases.error_policy import ErrorKind, USER_MESSAGES, user_message
from use_cases.terminal_guard import TerminalGuard

log = logging.getLogger(__name__)

LINK_INTENT_KEY = "oauthLinkIntent"
INVALID_CALLBACK = "invalid_callback"
MY_PAGE = "/my-page"
LOGIN_PAGE = "/login"
LINK_SUCCESS_MESSAGE = "카카오 계정이 성공적으로 연동되었습니다."
LINK_REQUIRES_LOGIN_MESSAGE = "로그인 후 계정 연동을 진행할 수 있습니다."


class Intent(str, Enum):
    LOGIN = "login"
    LINK = "link"


class PendingIntentStore:
    """Link intent flag. Absence means LOGIN."""

    def __init__(self, storage_provider: StorageProvider, key: str = LINK_INTENT_KEY):
        self._storage_provider = storage_provider
        self._key = key

    def set(self, intent: Intent) -> None:
        storage = self._storage_provider()
        if storage is None:
            return
        if intent == Intent.LINK:
            storage[self._key] = "true"
        elif self._key in storage:
            storage.pop(self._key)

    def peek(self) -> Intent:
        storage = self._storage_provider()
        if storage is not None and storage.get(self._key):
            return Intent.LINK
        return Intent.LOGIN

    def take_and_clear(self) -> Intent:
        storage = self._storage_provider()
        if storage is None:
            return Intent.LOGIN
        value = storage.get(self._key)
        if self._key in storage:
            storage.pop(self._key)
        return Intent.LINK if value else Intent.LOGIN


@dataclass(frozen=True)
class CallbackRoute:
    intent: Intent
    target: str


def _with_query(path: str, **params: str) -> str:
    return f"{path}?{urlencode(params)}"


class OAuthEntry:
    """Starts the round trip: fetch the authorize URL and park the intent."""

    def __init__(self, session: SessionContext, intents: PendingIntentStore):
        self.session = session
        self.intents = intents
        self.error: Optional[str] = None

    def begin(self, intent: Intent) -> Optional[str]:
        """Returns the provider URL to navigate to, or None with `error` set."""
        if intent == Intent.LINK and not self.session.is_authenticated:
            self.error = LINK_REQUIRES_LOGIN_MESSAGE
            return None
        try:
            authorize = self.session.authorize_url()
        except ApiError as e:
            self.error = user_message("oauth_login", e)
            return None
        if not authorize.authorize_url:
            self.error = USER_MESSAGES[("oauth_login", ErrorKind.REJECTED)]
            return None
        # Set last, right before the browser leaves.
        self.intents.set(intent)
        self.error = None
        return authorize.authorize_url


class OAuthCallbackHandler:
    """Routes the provider's return leg. Handles one callback per instance."""

    def __init__(self, intents: PendingIntentStore, provider: str = "kakao"):
        self.intents = intents
        self.provider = provider
        self.guard = TerminalGuard(retry_on_failure=False)

    def handle(self, params: Mapping[str, str]) -> Optional[CallbackRoute]:
        return self.guard.run(lambda: self._route(params)).value

    def _route(self, params: Mapping[str, str]) -> CallbackRoute:
        intent = self.intents.take_and_clear()
        error_page = MY_PAGE if intent == Intent.LINK else LOGIN_PAGE

        error = params.get("error")
        if error:
            log.warning(f"⚠️ {self.provider} returned an error for {intent.value}: {error}")
            return CallbackRoute(intent, _with_query(error_page, error=error))

        code = params.get("code")
        state = params.get("state")
        if code and state:
            if intent == Intent.LINK:
                target = _with_query(f"/auth/{self.provider}/link/callback", code=code, state=state)
            else:
                target = _with_query(LOGIN_PAGE, code=code, state=state)
            log.info(f"{self.provider} callback routed to {intent.value}")
            return CallbackRoute(intent, target)

        log.warning(f"⚠️ {self.provider} callback without code/state")
        return CallbackRoute(intent, _with_query(error_page, error=INVALID_CALLBACK))


@dataclass(frozen=True)
class CompletionOutcome:
    success: bool
    message: Optional[str]
    redirect_to: Optional[str]


class LinkCompletionFlow:
    """Link callback page. Always ends on the my-page screen."""

    def __init__(self, session: SessionContext):
        self.session = session
        self.guard = TerminalGuard(retry_on_failure=False)
        self.outcome: Optional[CompletionOutcome] = None

    def complete(self, code: Optional[str], state: Optional[str]) -> Optional[CompletionOutcome]:
        run = self.guard.run(lambda: self._complete(code, state))
        if run.executed:
            self.outcome = run.value
        return run.value

    def _complete(self, code: Optional[str], state: Optional[str]) -> CompletionOutcome:
        if not code or not state:
            return CompletionOutcome(False, None, _with_query(MY_PAGE, error=INVALID_CALLBACK))
        try:
            self.session.link_external_identity(code, state)
        except ApiError as e:
            log.warning(f"⚠️ Account link failed: {e.message}")
            return CompletionOutcome(False, user_message("oauth_link", e), MY_PAGE)
        return CompletionOutcome(True, LINK_SUCCESS_MESSAGE, MY_PAGE)


class OAuthLoginFlow:
    """Exchanges the provider code for user credentials on the login page."""

    def __init__(self, session: SessionContext):
        self.session = session
        self.guard = TerminalGuard(retry_on_failure=False)
        self.outcome: Optional[CompletionOutcome] = None

    def complete(
        self, code: Optional[str], state: Optional[str], return_to: Optional[str] = None
    ) -> Optional[CompletionOutcome]:
        run = self.guard.run(lambda: self._complete(code, state, return_to))
        if run.executed:
            self.outcome = run.value
        return run.value

    def _complete(self, code: Optional[str], state: Optional[str], return_to: Optional[str]) -> CompletionOutcome:
        if not code:
            return CompletionOutcome(False, USER_MESSAGES[("oauth_login", ErrorKind.INVALID_CALLBACK)], None)
        try:
            self.session.oauth_login(code, state)
        except ApiError as e:
            log.warning(f"⚠️ {self.session.provider} login failed: {e.message}")
            return CompletionOutcome(False, user_message("oauth_login", e), None)
        return CompletionOutcome(True, None, resolve_return_target(return_to))
