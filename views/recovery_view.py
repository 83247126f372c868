import streamlit as st

from use_cases.recovery_flow import RECOVERED_MESSAGE, RecoveryConfirmFlow, RecoveryEmailFlow
from utils import session_manager


def render_recovery_request(container):
    st.title("♻️ 계정 복구")
    st.caption("탈퇴 후 30일 이내의 계정은 복구할 수 있습니다.")
    flow = session_manager.get_flow("recovery_email", lambda: RecoveryEmailFlow(container.user_client))

    if flow.is_sent:
        st.success(flow.message)
        return

    with st.form("recovery_form"):
        email = st.text_input("가입한 이메일", value=flow.email)
        if st.form_submit_button("복구 메일 보내기"):
            flow.send(email)
            st.rerun()
    if flow.error:
        st.error(flow.error)


def render_recovery_confirm(container):
    st.title("♻️ 계정 복구")
    token = st.query_params.get("token")
    flow = session_manager.get_flow(f"recovery_confirm:{token}", lambda: RecoveryConfirmFlow(container.user_client))
    with st.spinner("계정을 복구하는 중..."):
        flow.confirm(token)

    if flow.success:
        st.success(RECOVERED_MESSAGE)
        if st.button("로그인하기"):
            session_manager.navigate("/login")
    elif flow.error:
        st.error(flow.error)
