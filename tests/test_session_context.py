from unittest.mock import patch

import pytest
import requests

from infrastructure.http.booking_api_client import ApiError
from use_cases.auth_flow import LoginFlow, SessionContext, require_authenticated, resolve_return_target


def test_initialize_reads_store_without_network(user_client, user_store):
    user_store.set_access("tok")
    ctx = SessionContext(user_client, user_store)
    assert ctx.is_loading

    with patch("requests.request") as mock_request:
        state = ctx.initialize()

    mock_request.assert_not_called()
    assert state.is_authenticated is True
    assert state.is_loading is False


@patch("requests.request")
def test_login_stores_tokens_then_flips_state(mock_request, response, session, user_store):
    mock_request.return_value = response(200, {"data": {"accessToken": "a1", "refreshToken": "r1"}})

    session.login("me@example.com", "pw")

    assert user_store.get_access() == "a1"
    assert user_store.get_refresh() == "r1"
    assert session.is_authenticated
    assert mock_request.call_args.kwargs["json"] == {"email": "me@example.com", "password": "pw"}


@patch("requests.request")
def test_failed_login_propagates_and_leaves_state(mock_request, response, session, user_store):
    mock_request.return_value = response(401, {"message": "비밀번호가 일치하지 않습니다"})

    with pytest.raises(ApiError):
        session.login("me@example.com", "wrong")

    assert user_store.get_access() is None
    assert not session.is_authenticated


@pytest.mark.parametrize(
    "outcome",
    ["ok", "server_error", "timeout"],
)
def test_logout_always_clears_local_session(outcome, response, session, user_store):
    user_store.set_access("a")
    user_store.set_refresh("r")
    session.initialize()
    assert session.is_authenticated

    with patch("requests.request") as mock_request:
        if outcome == "ok":
            mock_request.return_value = response(200, {"data": None})
        elif outcome == "server_error":
            mock_request.return_value = response(500, {"message": "boom"})
        else:
            mock_request.side_effect = requests.Timeout("slow")
        session.logout()

    assert user_store.get_access() is None
    assert user_store.get_refresh() is None
    assert session.is_authenticated is False


@patch("requests.request")
def test_link_does_not_touch_credentials(mock_request, response, session, user_store):
    user_store.set_access("a")
    session.initialize()
    mock_request.return_value = response(200, {"data": None})

    session.link_external_identity("abc", "xyz")

    assert mock_request.call_args.args == ("POST", "http://api.test/oauth/kakao/link")
    assert mock_request.call_args.kwargs["json"] == {"code": "abc", "state": "xyz"}
    assert user_store.get_access() == "a"
    assert session.is_authenticated


@patch("requests.request")
def test_oauth_login_without_token_is_an_error(mock_request, response, session, user_store):
    mock_request.return_value = response(200, {"data": {"isNewMember": True}})

    with pytest.raises(ApiError):
        session.oauth_login("abc", "xyz")

    assert user_store.get_access() is None
    assert not session.is_authenticated


@patch("requests.request")
def test_reissue_overwrites_tokens(mock_request, response, session, user_store):
    user_store.set_access("old-a")
    user_store.set_refresh("old-r")
    mock_request.return_value = response(200, {"data": {"accessToken": "new-a", "refreshToken": "new-r"}})

    assert session.reissue() is True

    assert mock_request.call_args.kwargs["json"] == {"accessToken": "old-a", "refreshToken": "old-r"}
    assert user_store.get_access() == "new-a"
    assert user_store.get_refresh() == "new-r"


@patch("requests.request")
def test_reissue_failure_keeps_tokens(mock_request, response, session, user_store):
    user_store.set_access("old-a")
    user_store.set_refresh("old-r")
    mock_request.return_value = response(401, {"message": "만료된 토큰"})

    assert session.reissue() is False
    assert user_store.get_access() == "old-a"


def test_reissue_without_refresh_token_skips_network(session, user_store):
    user_store.set_access("a")
    with patch("requests.request") as mock_request:
        assert session.reissue() is False
    mock_request.assert_not_called()


@patch("requests.request")
def test_login_form_shows_backend_message_and_keeps_inputs(mock_request, response, session):
    mock_request.return_value = response(401, {"code": 401, "message": "비밀번호가 일치하지 않습니다"})
    flow = LoginFlow(session)

    target = flow.submit("me@example.com", "wrong-pw")

    assert target is None
    assert flow.error == "비밀번호가 일치하지 않습니다"
    assert flow.is_loading is False
    assert flow.email == "me@example.com"
    assert flow.password == "wrong-pw"


def test_login_form_rejects_empty_fields_without_network(session):
    flow = LoginFlow(session)
    with patch("requests.request") as mock_request:
        assert flow.submit("  ", "") is None
    mock_request.assert_not_called()
    assert flow.error


@patch("requests.request")
def test_login_form_returns_to_origin(mock_request, response, session):
    mock_request.return_value = response(200, {"data": {"accessToken": "a"}})
    flow = LoginFlow(session)

    assert flow.submit("me@example.com", "pw", return_to="/prereservation?performanceId=1&scheduleId=2") == (
        "/prereservation?performanceId=1&scheduleId=2"
    )


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "/"), ("", "/"), ("/my-page", "/my-page"), ("//evil.example", "/"), ("https://evil.example", "/")],
)
def test_resolve_return_target(raw, expected):
    assert resolve_return_target(raw) == expected


def test_gate_redirects_to_login_with_origin(session):
    result = require_authenticated(session, "/prereservation?performanceId=1&scheduleId=2")

    assert result.status == "STOP"
    assert result.redirect_to == "/login?from=%2Fprereservation%3FperformanceId%3D1%26scheduleId%3D2"


def test_gate_passes_authenticated_user(session, user_store):
    user_store.set_access("a")
    session.initialize()

    assert require_authenticated(session, "/my-page").status == "CONTINUE"
