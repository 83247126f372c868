import pandas as pd
import streamlit as st

from infrastructure.http.booking_api_client import ApiError
from services import lottery_service
from use_cases.auth_flow import require_authenticated
from use_cases.error_policy import user_message
from use_cases.oauth_flow import Intent, OAuthEntry
from utils import session_manager

ERROR_MESSAGES = {
    "invalid_callback": "잘못된 접근입니다.",
    "access_denied": "카카오 계정 연동이 취소되었습니다.",
}


def _render_account_tab(container):
    st.subheader("계정")
    entry = OAuthEntry(container.session, container.intents)
    if st.button("💬 카카오 계정 연동하기"):
        url = entry.begin(Intent.LINK)
        if url:
            session_manager.redirect_external(url)
        else:
            st.error(entry.error)
    if st.button("🚪 로그아웃", type="secondary"):
        session_manager.logout()


def _render_lottery_tab(container):
    st.subheader("추첨 응모 내역")
    try:
        entries = lottery_service.list_my_entries(container.user_client)
    except ApiError as e:
        st.error(user_message("lottery", e))
        return
    if not entries:
        st.info("응모 내역이 없습니다.")
        return

    df = pd.DataFrame([e.to_row() for e in entries])
    df = df.rename(
        columns={
            "title": "공연명",
            "round_no": "회차",
            "start_at": "일시",
            "grade": "등급",
            "quantity": "수량",
            "status_label": "상태",
        }
    )
    st.dataframe(
        df[["공연명", "회차", "일시", "등급", "수량", "상태"]],
        use_container_width=True,
        hide_index=True,
    )

    for entry in entries:
        if entry.can_pay and st.button(f"💳 {entry.title or entry.entry_id} 결제하기", key=f"pay_{entry.entry_id}"):
            session_manager.navigate(f"/lottery-payment?entryId={entry.entry_id}")


def render_my_page(container):
    gate = require_authenticated(container.session, session_manager.current_path())
    if gate.status == "STOP":
        session_manager.navigate(gate.redirect_to)

    st.title("👤 마이페이지")
    error = st.query_params.get("error")
    if error:
        st.error(ERROR_MESSAGES.get(error, error))

    tab_labels = ["계정", "추첨 응모"]
    if st.query_params.get("tab") == "lottery":
        tab_labels.reverse()
    tabs = dict(zip(tab_labels, st.tabs(tab_labels)))
    with tabs["계정"]:
        _render_account_tab(container)
    with tabs["추첨 응모"]:
        _render_lottery_tab(container)
