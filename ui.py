import streamlit as st

from use_cases.booking_flow import SELECTED
from use_cases.domain_models import SeatStatus
from utils import session_manager

SEAT_ICONS = {
    SeatStatus.AVAILABLE.value: "🟩",
    SELECTED: "🟦",
    SeatStatus.HOLD.value: "🟨",
    SeatStatus.SOLD.value: "⬛",
}


def setup_style():
    st.markdown("""
    <style>
        .block-container { max-width: 1100px; padding-top: 2rem; }
        div[data-testid="stButton"] button[kind="secondary"] { min-width: 2.6rem; }
        .seat-legend { font-size: 0.85rem; opacity: 0.8; }
    </style>
    """, unsafe_allow_html=True)


def format_price(amount) -> str:
    return f"{int(amount or 0):,}원"


def render_flash():
    flash = session_manager.pop_flash()
    if not flash:
        return
    level, message = flash
    getattr(st, level, st.info)(message)


def render_seat_legend():
    st.markdown(
        '<div class="seat-legend">🟩 선택 가능 &nbsp; 🟦 선택됨 &nbsp; 🟨 선점 중 &nbsp; ⬛ 판매 완료</div>',
        unsafe_allow_html=True,
    )


def seat_label(status: str, seat_number: int) -> str:
    return f"{SEAT_ICONS.get(status, '⬛')}{seat_number}"


def render_nav(is_authenticated: bool):
    cols = st.columns([1, 1, 1, 4])
    if cols[0].button("🏠 홈", key="nav_home"):
        session_manager.navigate("/")
    if is_authenticated:
        if cols[1].button("👤 마이페이지", key="nav_my_page"):
            session_manager.navigate("/my-page")
        if cols[2].button("🚪 로그아웃", key="nav_logout"):
            session_manager.logout()
    else:
        if cols[1].button("🔐 로그인", key="nav_login"):
            session_manager.navigate("/login")
