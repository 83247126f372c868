"""Per-tab composition root: credential stores, API clients and sessions."""

import logging
from dataclasses import dataclass
from typing import Literal, MutableMapping, Tuple

import auth
from infrastructure.http.booking_api_client import BookingApiClient
from infrastructure.storage.credential_store import CredentialStore, StorageProvider
from use_cases.admin_flow import AdminSession
from use_cases.auth_flow import SessionContext
from use_cases.domain_models import set_backend_timezone
from use_cases.oauth_flow import PendingIntentStore
from use_cases.session_models import ADMIN, USER

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]

CONTAINER_KEY = "app_container"


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


@dataclass
class AppContainer:
    user_store: CredentialStore
    admin_store: CredentialStore
    user_client: BookingApiClient
    admin_client: BookingApiClient
    session: SessionContext
    admin_session: AdminSession
    intents: PendingIntentStore
    provider: str


def build_container(local_storage: StorageProvider, session_storage: StorageProvider) -> AppContainer:
    base_url = auth.get_api_base_url()
    timeout = auth.get_request_timeout()
    provider = auth.get_oauth_provider()
    set_backend_timezone(auth.get_backend_timezone())

    user_store = CredentialStore(USER, local_storage, auth.USER_ACCESS_TOKEN_KEY, auth.USER_REFRESH_TOKEN_KEY)
    admin_store = CredentialStore(
        ADMIN, local_storage, auth.ADMIN_ACCESS_TOKEN_KEY, auth.ADMIN_REFRESH_TOKEN_KEY, refresh_writable=False
    )
    user_client = BookingApiClient(base_url, credential_store=user_store, timeout=timeout)
    admin_client = BookingApiClient(base_url, credential_store=admin_store, timeout=timeout)

    return AppContainer(
        user_store=user_store,
        admin_store=admin_store,
        user_client=user_client,
        admin_client=admin_client,
        session=SessionContext(user_client, user_store, provider=provider),
        admin_session=AdminSession(admin_client, admin_store),
        intents=PendingIntentStore(session_storage),
        provider=provider,
    )


def run_startup(
    state: MutableMapping,
    local_storage: StorageProvider,
    session_storage: StorageProvider,
) -> StartupResult:
    """Build the tab's container once and publish the initial session state."""
    executed_steps = []

    if CONTAINER_KEY not in state:
        state[CONTAINER_KEY] = build_container(local_storage, session_storage)
        executed_steps.append("build_container")
        log.info(f"Container built for API {state[CONTAINER_KEY].user_client.base_url}")

    container: AppContainer = state[CONTAINER_KEY]
    if container.session.is_loading:
        container.session.initialize()
        executed_steps.append("initialize_session")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
