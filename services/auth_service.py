from typing import Optional

from infrastructure.http.booking_api_client import BookingApiClient
from use_cases.domain_models import AuthorizeUrl, TokenPair


def login(client: BookingApiClient, email: str, password: str) -> Optional[TokenPair]:
    """POST /login. Returns None when the response carries no access token."""
    data = client.post("/login", json={"email": email, "password": password})
    return TokenPair.from_api(data)


def logout(client: BookingApiClient) -> None:
    client.post("/logout")


def reissue(client: BookingApiClient, access_token: str, refresh_token: str) -> Optional[TokenPair]:
    data = client.post("/reissue", json={"accessToken": access_token, "refreshToken": refresh_token})
    return TokenPair.from_api(data)


def get_authorize_url(client: BookingApiClient, provider: str) -> AuthorizeUrl:
    return AuthorizeUrl.from_api(client.get(f"/oauth/{provider}/authorize-url"))


def oauth_login(client: BookingApiClient, provider: str, code: str, state: Optional[str] = None) -> Optional[TokenPair]:
    payload = {"code": code}
    if state:
        payload["state"] = state
    return TokenPair.from_api(client.post(f"/oauth/{provider}/login", json=payload))


def oauth_link(client: BookingApiClient, provider: str, code: str, state: str) -> None:
    client.post(f"/oauth/{provider}/link", json={"code": code, "state": state})


def send_recovery_email(client: BookingApiClient, email: str) -> None:
    client.post("/withdrawal-recovery/email", json={"email": email})


def confirm_recovery(client: BookingApiClient, token: str) -> None:
    client.post("/withdrawal-recovery/confirm", json={"token": token})
