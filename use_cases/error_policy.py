"""
Error taxonomy for the orchestration layer.

Backend failures arrive as `ApiError`. They are classified in three passes:
the structured error code of the envelope, then the HTTP status, then
fragments of the message text for endpoints that only send prose.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from infrastructure.http.booking_api_client import NETWORK_ERROR_MESSAGE, ApiError

GENERIC_ERROR_MESSAGE = "요청 처리 중 오류가 발생했습니다. 다시 시도해주세요."


class ValidationError(Exception):
    """Draft is missing a required field. Never leaves the wizard."""


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT = "TRANSIENT"
    INVALID_CALLBACK = "INVALID_CALLBACK"
    REJECTED = "REJECTED"


ERROR_CODE_KINDS: Dict[str, ErrorKind] = {
    "UNAUTHORIZED": ErrorKind.UNAUTHORIZED,
    "FORBIDDEN": ErrorKind.UNAUTHORIZED,
    "INVALID_TOKEN": ErrorKind.UNAUTHORIZED,
    "EXPIRED_TOKEN": ErrorKind.UNAUTHORIZED,
    "INVALID_CALLBACK": ErrorKind.INVALID_CALLBACK,
    "INVALID_OAUTH_STATE": ErrorKind.INVALID_CALLBACK,
    "MISSING_TOKEN": ErrorKind.REJECTED,
    "MISSING_RESERVATION": ErrorKind.REJECTED,
}

# (fragments, kind) checked in order against the raw message.
MESSAGE_FRAGMENT_KINDS: Tuple[Tuple[Tuple[str, ...], ErrorKind], ...] = (
    (("409", "이미"), ErrorKind.CONFLICT),
    (("404", "찾을 수 없"), ErrorKind.NOT_FOUND),
    (("401", "인증", "로그인"), ErrorKind.UNAUTHORIZED),
)

# Messages shown per (entity, kind). Anything missing falls back to the raw
# backend message.
USER_MESSAGES: Dict[Tuple[str, ErrorKind], str] = {
    ("oauth_link", ErrorKind.CONFLICT): "이미 다른 계정에 연동된 소셜 계정입니다.",
    ("oauth_link", ErrorKind.NOT_FOUND): "해당하는 회원을 찾을 수 없습니다.",
    ("oauth_link", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("oauth_link", ErrorKind.INVALID_CALLBACK): "잘못된 접근입니다.",
    ("oauth_login", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("oauth_login", ErrorKind.INVALID_CALLBACK): "잘못된 접근입니다.",
    ("oauth_login", ErrorKind.REJECTED): "카카오 로그인에 실패했습니다. 다시 시도해주세요.",
    ("oauth_login", ErrorKind.CONFLICT): "카카오 로그인에 실패했습니다. 다시 시도해주세요.",
    ("oauth_login", ErrorKind.NOT_FOUND): "카카오 로그인에 실패했습니다. 다시 시도해주세요.",
    ("prereservation", ErrorKind.CONFLICT): "이미 신청한 구역입니다.",
    ("prereservation", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("lottery", ErrorKind.CONFLICT): "이미 응모한 회차입니다.",
    ("lottery", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("booking", ErrorKind.CONFLICT): "이미 선택된 좌석입니다. 다른 좌석을 선택해주세요.",
    ("booking", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("queue", ErrorKind.NOT_FOUND): "대기열에 등록되지 않았습니다.",
    ("queue", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("payment", ErrorKind.CONFLICT): "이미 결제가 완료되었습니다.",
    ("payment", ErrorKind.UNAUTHORIZED): "인증이 필요합니다. 다시 로그인해주세요.",
    ("admin", ErrorKind.UNAUTHORIZED): "관리자 인증이 필요합니다. 다시 로그인해주세요.",
}


def _kind_from_error_code(error_code: Optional[str]) -> Optional[ErrorKind]:
    if not error_code:
        return None
    code = error_code.upper()
    if code in ERROR_CODE_KINDS:
        return ERROR_CODE_KINDS[code]
    if code.endswith("NOT_FOUND"):
        return ErrorKind.NOT_FOUND
    if "ALREADY" in code or "DUPLICATE" in code:
        return ErrorKind.CONFLICT
    return None


def _kind_from_status(status_code: Optional[int]) -> Optional[ErrorKind]:
    if status_code is None:
        return ErrorKind.TRANSIENT
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if status_code >= 500:
        return ErrorKind.TRANSIENT
    return None


def _kind_from_message(message: str) -> Optional[ErrorKind]:
    for fragments, kind in MESSAGE_FRAGMENT_KINDS:
        if any(fragment in message for fragment in fragments):
            return kind
    return None


def classify(error: Exception) -> ErrorKind:
    if isinstance(error, ValidationError):
        return ErrorKind.VALIDATION
    if not isinstance(error, ApiError):
        return ErrorKind.REJECTED
    return (
        _kind_from_error_code(error.error_code)
        or _kind_from_status(error.status_code)
        or _kind_from_message(error.message or "")
        or ErrorKind.REJECTED
    )


def user_message(entity: str, error: Exception) -> str:
    """Message to render inline for a failed action on `entity`."""
    kind = classify(error)
    if (entity, kind) in USER_MESSAGES:
        return USER_MESSAGES[(entity, kind)]
    if isinstance(error, ApiError) and error.is_network_error:
        return NETWORK_ERROR_MESSAGE
    return str(error) or GENERIC_ERROR_MESSAGE
