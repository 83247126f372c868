"""Withdrawn-account recovery: request the email, then confirm its token."""

import logging
from typing import Optional, Tuple

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from services import auth_service
from use_cases.error_policy import user_message
from use_cases.terminal_guard import GuardState, TerminalGuard

log = logging.getLogger(__name__)

EMPTY_EMAIL_MESSAGE = "이메일을 입력해주세요."
MISSING_TOKEN_MESSAGE = "복구 토큰이 없습니다."
EMAIL_SENT_MESSAGE = "복구 메일이 발송되었습니다. 메일함을 확인해주세요."
RECOVERED_MESSAGE = "계정이 복구되었습니다. 다시 로그인해주세요."

NOT_FOUND_MESSAGE = "해당하는 회원을 찾을 수 없습니다."

EMAIL_FRAGMENT_MESSAGES: Tuple[Tuple[str, str], ...] = (
    ("탈퇴 상태가 아닌", "탈퇴 상태가 아닌 회원입니다."),
    ("복구 가능 기간", "복구 가능 기간(30일)이 만료되었습니다."),
    ("찾을 수 없습니다", NOT_FOUND_MESSAGE),
)

CONFIRM_FRAGMENT_MESSAGES: Tuple[Tuple[str, str], ...] = (
    ("유효하지 않거나 만료", "복구 토큰이 유효하지 않거나 만료되었습니다."),
    ("찾을 수 없습니다", NOT_FOUND_MESSAGE),
)


def _message_for(error: ApiError, fragments: Tuple[Tuple[str, str], ...]) -> str:
    for fragment, message in fragments:
        if fragment in (error.message or ""):
            return message
    return user_message("recovery", error)


class RecoveryEmailFlow:
    def __init__(self, client: BookingApiClient):
        self.client = client
        self.guard = TerminalGuard()
        self.email = ""
        self.error: Optional[str] = None
        self.message: Optional[str] = None

    @property
    def is_sent(self) -> bool:
        return self.guard.is_done

    def send(self, email: str) -> bool:
        self.email = email
        if not email or not email.strip():
            self.error = EMPTY_EMAIL_MESSAGE
            return False
        self.error = None
        try:
            run = self.guard.run(lambda: auth_service.send_recovery_email(self.client, email.strip()))
        except ApiError as e:
            log.warning(f"⚠️ Recovery email request failed: {e.message}")
            self.error = _message_for(e, EMAIL_FRAGMENT_MESSAGES)
            return False
        if run.executed:
            self.message = EMAIL_SENT_MESSAGE
        return run.executed


class RecoveryConfirmFlow:
    """Runs once per recovery link visit."""

    def __init__(self, client: BookingApiClient):
        self.client = client
        self.guard = TerminalGuard(retry_on_failure=False)
        self.success = False
        self.error: Optional[str] = None

    def confirm(self, token: Optional[str]) -> bool:
        if not self.guard.can_enter:
            return self.success
        if not token:
            self.guard.state = GuardState.DONE
            self.error = MISSING_TOKEN_MESSAGE
            return False
        try:
            self.guard.run(lambda: auth_service.confirm_recovery(self.client, token))
        except ApiError as e:
            log.warning(f"⚠️ Recovery confirmation failed: {e.message}")
            self.error = _message_for(e, CONFIRM_FRAGMENT_MESSAGES)
            return False
        self.success = True
        log.info("✅ Withdrawn account recovered")
        return True
