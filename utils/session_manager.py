import logging
import time
from typing import Callable, Dict, Optional, TypeVar
from urllib.parse import parse_qsl, urlencode, urlsplit

import streamlit as st
import streamlit.components.v1 as components
from streamlit import runtime

import auth
from infrastructure.storage.browser_storage import AREA_LOCAL, AREA_SESSION, BrowserStorage, flush_all
from use_cases import bootstrap

"""
SESSION STATE CONTRACT

Streamlit session state of one browser tab.

app_container: AppContainer
    credential stores, API clients, user and admin sessions
    default: built by bootstrap.run_startup on first run
    owner: use_cases.bootstrap

flows: dict[str, object]
    live orchestrators keyed by page and entity (wizards, callback handlers)
    default: {}
    owner: views

flash: tuple[str, str] | None
    (level, message) shown once on the next rendered page
    default: None
    owner: views

_browser_storage_local / _browser_storage_session: dict
    mirrors of the browser storage areas, hydrated from cookies
    owner: infrastructure.storage.browser_storage
"""

log = logging.getLogger(__name__)

T = TypeVar("T")

HOME_PAGE = "home"
NAVIGATION_FLUSH_DELAY = 0.5


def init_session_state():
    if "flows" not in st.session_state:
        st.session_state.flows = {}
    if "flash" not in st.session_state:
        st.session_state.flash = None


def _request_cookies() -> Dict[str, str]:
    try:
        return dict(st.context.cookies)
    except Exception:
        # During some tests contexts might not be fully available
        return {}


def _browser_storage(area: str, max_age: Optional[int] = None) -> Optional[BrowserStorage]:
    if not runtime.exists():
        return None
    return BrowserStorage(area, st.session_state, cookies=_request_cookies(), max_age=max_age)


def get_local_storage() -> Optional[BrowserStorage]:
    return _browser_storage(AREA_LOCAL, max_age=auth.LOCAL_STORAGE_MAX_AGE)


def get_session_storage() -> Optional[BrowserStorage]:
    return _browser_storage(AREA_SESSION)


def get_container() -> bootstrap.AppContainer:
    init_session_state()
    bootstrap.run_startup(st.session_state, get_local_storage, get_session_storage)
    return st.session_state[bootstrap.CONTAINER_KEY]


def get_flow(key: str, factory: Callable[[], T]) -> T:
    """Orchestrator kept for the tab until `reset_flow`."""
    init_session_state()
    flows = st.session_state.flows
    if key not in flows:
        flows[key] = factory()
    return flows[key]


def reset_flow(key: str) -> None:
    st.session_state.flows.pop(key, None)


def set_flash(level: str, message: str) -> None:
    st.session_state.flash = (level, message)


def pop_flash():
    flash = st.session_state.get("flash")
    st.session_state.flash = None
    return flash


def path_to_params(path: str) -> Dict[str, str]:
    """'/my-page?tab=lottery' -> {'page': 'my-page', 'tab': 'lottery'}"""
    parts = urlsplit(path)
    page = parts.path.strip("/") or HOME_PAGE
    params = {"page": page}
    params.update(dict(parse_qsl(parts.query)))
    return params


def params_to_path(params: Dict[str, str]) -> str:
    params = dict(params)
    page = params.pop("page", HOME_PAGE) or HOME_PAGE
    path = "/" if page == HOME_PAGE else f"/{page}"
    if params:
        path = f"{path}?{urlencode(params)}"
    return path


def current_page() -> str:
    return st.query_params.get("page") or HOME_PAGE


def current_path() -> str:
    return params_to_path(st.query_params.to_dict())


def flush_browser_storage(redirect_url: Optional[str] = None) -> bool:
    """Write queued browser storage changes; optionally leave the app afterwards."""
    return flush_all(
        [get_session_storage(), get_local_storage()],
        lambda script: components.html(script, height=0),
        redirect_url=redirect_url,
    )


def navigate(path: str) -> None:
    """Single-page navigation to an app path such as '/my-page?tab=lottery'."""
    if flush_browser_storage():
        time.sleep(NAVIGATION_FLUSH_DELAY)  # Give JS time to execute
    st.query_params.clear()
    st.query_params.update(path_to_params(path))
    st.rerun()


def schedule_rerun(delay: float) -> None:
    """Block this run for `delay` seconds, then render the page again."""
    time.sleep(delay)
    st.rerun()


def redirect_external(url: str) -> None:
    log.info("Redirecting browser to external identity provider")
    flush_browser_storage(redirect_url=url)
    st.stop()


def logout():
    container = get_container()
    container.session.logout()
    st.session_state.flows = {}
    navigate("/")
