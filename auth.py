import os
import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import streamlit as st

log = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_OAUTH_PROVIDER = "kakao"
DEFAULT_BACKEND_TIMEZONE = "Asia/Seoul"

# Browser storage keys. User and admin credentials never share a key.
USER_ACCESS_TOKEN_KEY = "accessToken"
USER_REFRESH_TOKEN_KEY = "refreshToken"
ADMIN_ACCESS_TOKEN_KEY = "adminAccessToken"
ADMIN_REFRESH_TOKEN_KEY = "adminRefreshToken"

LOCAL_STORAGE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def get_secret(key):
    try:
        value = st.secrets.get(key)
    except FileNotFoundError:
        value = None
    if value is None:
        value = os.getenv(key)
    return value


def get_api_base_url() -> str:
    base = get_secret("API_BASE_URL") or DEFAULT_API_BASE_URL
    prefix = get_secret("API_PREFIX") or ""
    return f"{base.rstrip('/')}{prefix.rstrip('/')}"


def get_request_timeout() -> float:
    raw = get_secret("API_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except (TypeError, ValueError):
        log.warning(f"⚠️ Invalid API_TIMEOUT_SECONDS={raw!r}, using {DEFAULT_TIMEOUT_SECONDS}s")
        return DEFAULT_TIMEOUT_SECONDS


def get_oauth_provider() -> str:
    return (get_secret("OAUTH_PROVIDER") or DEFAULT_OAUTH_PROVIDER).lower()


def get_backend_timezone() -> ZoneInfo:
    """Zone of the naive timestamps the backend sends (booking windows, schedules)."""
    name = get_secret("BACKEND_TIMEZONE") or DEFAULT_BACKEND_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        log.warning(f"⚠️ Unknown BACKEND_TIMEZONE={name!r}, using {DEFAULT_BACKEND_TIMEZONE}")
        return ZoneInfo(DEFAULT_BACKEND_TIMEZONE)
