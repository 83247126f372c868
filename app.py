import os
from datetime import datetime

import streamlit as st

from infrastructure.observability import setup_observability
setup_observability()

import sentry_sdk

import ui
from utils import session_manager
from views import (
    admin_view, booking_view, home_view, login_view, lottery_view,
    my_page_view, oauth_view, prereservation_view, recovery_view,
)

# --- PAGE SETTINGS ---
st.set_page_config(page_title="Ticketing", page_icon="🎫", layout="wide")

FORCE_HTTPS = os.getenv("FORCE_HTTPS", "False").lower() == "true"

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "uptime": datetime.utcnow().isoformat()})
    st.stop()

if FORCE_HTTPS:
    proto = st.context.headers.get("x-forwarded-proto", "http").lower()
    if proto != "https":
        st.error("🚨 안전하지 않은 연결입니다. HTTPS로 접속해주세요.")
        st.stop()

ui.setup_style()

# --- STARTUP ORCHESTRATION ---
container = session_manager.get_container()

ROUTES = {
    session_manager.HOME_PAGE: home_view.render_home,
    "login": login_view.render_auth_screen,
    f"auth/{container.provider}/callback": oauth_view.render_callback,
    f"auth/{container.provider}/link/callback": oauth_view.render_link_callback,
    "my-page": my_page_view.render_my_page,
    "booking": booking_view.render_booking,
    "booking/queue": booking_view.render_queue,
    "prereservation": prereservation_view.render_prereservation,
    "prereservation-booking": prereservation_view.render_prereservation_booking,
    "lottery": lottery_view.render_lottery,
    "lottery-payment": lottery_view.render_lottery_payment,
    "withdrawal-recovery": recovery_view.render_recovery_request,
    "withdrawal-recovery/confirm": recovery_view.render_recovery_confirm,
    "admin": admin_view.render_admin_panel,
}

page = session_manager.current_page()
sentry_sdk.set_tag("page", page)
sentry_sdk.set_tag("authenticated", container.session.is_authenticated)

render = ROUTES.get(page)
if render is None:
    st.error("페이지를 찾을 수 없습니다.")
    st.stop()

if not page.startswith("auth/"):
    ui.render_nav(container.session.is_authenticated)
ui.render_flash()

render(container)

# Cookie writes queued during this run that did not trigger a navigation.
session_manager.flush_browser_storage()
