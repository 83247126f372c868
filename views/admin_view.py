import streamlit as st

from infrastructure.http.booking_api_client import ApiError
from use_cases.admin_flow import VenueAdminFlow
from use_cases.error_policy import user_message
from utils import session_manager


def _render_admin_login(admin):
    st.subheader("관리자 로그인")
    with st.form("admin_login_form", clear_on_submit=False):
        email = st.text_input("관리자 이메일")
        password = st.text_input("비밀번호", type="password")
        if st.form_submit_button("로그인"):
            if not email.strip() or not password:
                st.error("이메일과 비밀번호를 입력해주세요.")
                return
            try:
                admin.login(email.strip(), password)
            except ApiError as e:
                st.error(user_message("admin", e))
                return
            session_manager.navigate("/admin")


def _render_sections_tab(flow):
    with st.form("admin_section_form", clear_on_submit=True):
        venue_id = st.number_input("공연장 ID", min_value=1, step=1, key="section_venue_id")
        section_name = st.text_input("구역 이름")
        if st.form_submit_button("구역 추가"):
            flow.create_section(int(venue_id), section_name)


def _render_seats_tab(flow):
    with st.form("admin_seat_form", clear_on_submit=True):
        venue_id = st.number_input("공연장 ID", min_value=1, step=1, key="seat_venue_id")
        section_id = st.number_input("구역 ID", min_value=1, step=1)
        row_label = st.text_input("열")
        seat_number = st.number_input("좌석 번호", min_value=1, step=1)
        if st.form_submit_button("좌석 추가"):
            flow.create_seat(int(venue_id), int(section_id), row_label, int(seat_number))


def render_admin_panel(container):
    st.header("⚙️ 관리자")
    admin = container.admin_session

    if not admin.is_authenticated:
        _render_admin_login(admin)
        return

    if st.button("관리자 로그아웃", type="secondary"):
        admin.logout()
        session_manager.reset_flow("venue_admin")
        session_manager.navigate("/admin")

    flow = session_manager.get_flow("venue_admin", lambda: VenueAdminFlow(admin))
    tab_sections, tab_seats = st.tabs(["🏟 구역", "💺 좌석"])
    with tab_sections:
        _render_sections_tab(flow)
    with tab_seats:
        _render_seats_tab(flow)

    if flow.message:
        st.success(flow.message)
    if flow.error:
        st.error(flow.error)
