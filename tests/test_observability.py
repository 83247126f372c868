from unittest.mock import patch

from infrastructure import observability


def test_scrubber_masks_tokens_in_request_and_frames():
    event = {
        "request": {
            "headers": {"Authorization": "Bearer abc.def.ghi"},
            "query_string": "code=abc&state=xyz",
            "data": {"email": "me@example.com", "password": "pw"},
        },
        "exception": {
            "values": [
                {"stacktrace": {"frames": [{"vars": {"access_token": "secret", "note": "Bearer zzz"}}]}}
            ]
        },
        "breadcrumbs": {"values": [{"message": "sent Bearer qqq"}]},
    }

    scrubbed = observability._scrub_sensitive_data(event, {})

    assert scrubbed["request"]["headers"]["Authorization"] == "[REDACTED]"
    assert scrubbed["request"]["data"]["password"] == "[REDACTED]"
    assert scrubbed["request"]["data"]["email"] == "me@example.com"
    assert scrubbed["request"]["query_string"] == "code=[REDACTED]&state=[REDACTED]"
    frame_vars = scrubbed["exception"]["values"][0]["stacktrace"]["frames"][0]["vars"]
    assert frame_vars["access_token"] == "[REDACTED]"
    assert frame_vars["note"] == "Bearer [REDACTED]"
    assert scrubbed["breadcrumbs"]["values"][0]["message"] == "sent Bearer [REDACTED]"


@patch("sentry_sdk.init")
def test_sentry_initialised_only_with_dsn(mock_init, monkeypatch):
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    observability.setup_observability()
    mock_init.assert_not_called()

    monkeypatch.setenv("SENTRY_DSN", "https://key@sentry.example/1")
    monkeypatch.setenv("SENTRY_ENV", "test")
    observability.setup_observability()

    kwargs = mock_init.call_args.kwargs
    assert kwargs["environment"] == "test"
    assert kwargs["send_default_pii"] is False
    assert kwargs["before_send"] is observability._scrub_sensitive_data
