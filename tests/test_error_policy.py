import pytest

from infrastructure.http.booking_api_client import NETWORK_ERROR_MESSAGE, ApiError
from use_cases.error_policy import ErrorKind, ValidationError, classify, user_message


@pytest.mark.parametrize(
    "error, kind",
    [
        (ApiError("x", status_code=409, error_code="MEMBER_NOT_FOUND"), ErrorKind.NOT_FOUND),
        (ApiError("x", status_code=400, error_code="ALREADY_APPLIED"), ErrorKind.CONFLICT),
        (ApiError("x", status_code=401), ErrorKind.UNAUTHORIZED),
        (ApiError("x", status_code=403), ErrorKind.UNAUTHORIZED),
        (ApiError("x", status_code=404), ErrorKind.NOT_FOUND),
        (ApiError("x", status_code=409), ErrorKind.CONFLICT),
        (ApiError("x", status_code=503), ErrorKind.TRANSIENT),
        (ApiError(NETWORK_ERROR_MESSAGE), ErrorKind.TRANSIENT),
        (ApiError("이미 연동된 계정입니다", status_code=400), ErrorKind.CONFLICT),
        (ApiError("회원을 찾을 수 없습니다", status_code=400), ErrorKind.NOT_FOUND),
        (ApiError("로그인이 필요합니다", status_code=400), ErrorKind.UNAUTHORIZED),
        (ApiError("좌석이 부족합니다", status_code=400), ErrorKind.REJECTED),
        (ValidationError("필수"), ErrorKind.VALIDATION),
    ],
)
def test_classify(error, kind):
    assert classify(error) == kind


def test_structured_code_wins_over_status():
    error = ApiError("x", status_code=404, error_code="ALREADY_LINKED")
    assert classify(error) == ErrorKind.CONFLICT


def test_entity_message_lookup_then_raw_message():
    conflict = ApiError("raw", status_code=409)
    rejected = ApiError("좌석이 부족합니다", status_code=400)

    assert user_message("oauth_link", conflict) == "이미 다른 계정에 연동된 소셜 계정입니다."
    assert user_message("login", rejected) == "좌석이 부족합니다"


def test_network_error_message():
    assert user_message("lottery", ApiError(NETWORK_ERROR_MESSAGE)) == NETWORK_ERROR_MESSAGE
