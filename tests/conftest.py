import json
from unittest.mock import MagicMock

import pytest

from infrastructure.http.booking_api_client import BookingApiClient
from infrastructure.storage.browser_storage import AREA_LOCAL, AREA_SESSION, BrowserStorage
from infrastructure.storage.credential_store import CredentialStore
from use_cases.auth_flow import SessionContext

API = "http://api.test"


def make_response(status_code=200, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = b"" if body is None else json.dumps(body).encode()
    resp.json.return_value = body
    return resp


@pytest.fixture
def state():
    return {}


@pytest.fixture
def local_storage(state):
    return BrowserStorage(AREA_LOCAL, state, max_age=60)


@pytest.fixture
def session_storage(state):
    return BrowserStorage(AREA_SESSION, state)


@pytest.fixture
def user_store(local_storage):
    return CredentialStore("user", lambda: local_storage, "accessToken", "refreshToken")


@pytest.fixture
def admin_store(local_storage):
    return CredentialStore(
        "admin", lambda: local_storage, "adminAccessToken", "adminRefreshToken", refresh_writable=False
    )


@pytest.fixture
def user_client(user_store):
    return BookingApiClient(API, credential_store=user_store, timeout=5)


@pytest.fixture
def session(user_client, user_store):
    ctx = SessionContext(user_client, user_store, provider="kakao")
    ctx.initialize()
    return ctx


@pytest.fixture
def response():
    return make_response
