"""Administrator session and venue management."""

import logging
from typing import Any, Optional

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from infrastructure.storage.credential_store import CredentialStore
from services import admin_service, auth_service
from use_cases.error_policy import ValidationError, user_message

log = logging.getLogger(__name__)

ADMIN_LOGIN_REQUIRED_MESSAGE = "관리자 로그인이 필요합니다."
ADMIN_MISSING_TOKEN_MESSAGE = "로그인 응답에 토큰이 없습니다."


class AdminSession:
    """Admin principal. Never reads or writes the user's credentials."""

    def __init__(self, client: BookingApiClient, store: CredentialStore):
        self.client = client
        self.store = store

    @property
    def is_authenticated(self) -> bool:
        return self.store.is_authenticated()

    def login(self, email: str, password: str) -> None:
        tokens = auth_service.login(self.client, email, password)
        if tokens is None:
            raise ApiError(ADMIN_MISSING_TOKEN_MESSAGE, error_code="MISSING_TOKEN")
        self.store.set_access(tokens.access_token)
        log.info("✅ Admin logged in")

    def logout(self) -> None:
        self.store.clear()


def validate_section_name(section_name: str) -> None:
    if not section_name or not section_name.strip():
        raise ValidationError("구역 이름을 입력해주세요.")


def validate_seat(row_label: str, seat_number) -> None:
    if not row_label or not row_label.strip():
        raise ValidationError("열 이름을 입력해주세요.")
    if isinstance(seat_number, bool) or not isinstance(seat_number, int) or seat_number <= 0:
        raise ValidationError("좌석 번호는 1 이상의 정수여야 합니다.")


class VenueAdminFlow:
    def __init__(self, admin: AdminSession):
        self.admin = admin
        self.is_submitting = False
        self.error: Optional[str] = None
        self.message: Optional[str] = None

    def _run(self, action, success_message: str) -> Optional[Any]:
        if not self.admin.is_authenticated:
            self.error = ADMIN_LOGIN_REQUIRED_MESSAGE
            return None
        if self.is_submitting:
            return None
        self.is_submitting = True
        self.error = None
        self.message = None
        try:
            result = action()
        except ApiError as e:
            log.warning(f"⚠️ Venue admin request failed: {e.message}")
            self.error = user_message("admin", e)
            return None
        finally:
            self.is_submitting = False
        self.message = success_message
        return result if result is not None else True

    def create_section(self, venue_id: int, section_name: str) -> Optional[Any]:
        try:
            validate_section_name(section_name)
        except ValidationError as e:
            self.error = str(e)
            return None
        return self._run(
            lambda: admin_service.create_section(self.admin.client, venue_id, section_name.strip()),
            "구역이 생성되었습니다.",
        )

    def create_seat(self, venue_id: int, section_id: int, row_label: str, seat_number) -> Optional[Any]:
        try:
            validate_seat(row_label, seat_number)
        except ValidationError as e:
            self.error = str(e)
            return None
        return self._run(
            lambda: admin_service.create_seat(self.admin.client, venue_id, section_id, row_label.strip(), seat_number),
            "좌석이 생성되었습니다.",
        )
