import streamlit as st

from use_cases.auth_flow import LoginFlow
from use_cases.oauth_flow import Intent, OAuthEntry, OAuthLoginFlow
from utils import session_manager


def _render_oauth_completion(container, code: str, state: str, return_to: str):
    flow = session_manager.get_flow(f"oauth_login:{code}", lambda: OAuthLoginFlow(container.session))
    with st.spinner("카카오 로그인 처리 중..."):
        flow.complete(code, state, return_to)
    outcome = flow.outcome
    if outcome is not None and outcome.success:
        session_manager.navigate(outcome.redirect_to)
    elif outcome is not None:
        st.error(outcome.message)


def render_auth_screen(container):
    params = st.query_params
    return_to = params.get("from")

    if container.session.is_authenticated and not params.get("code"):
        session_manager.navigate(return_to or "/")

    st.title("🔐 로그인")

    if params.get("error"):
        st.error("카카오 로그인에 실패했습니다. 다시 시도해주세요.")

    if params.get("code"):
        _render_oauth_completion(container, params.get("code"), params.get("state"), return_to)

    flow = session_manager.get_flow("login_form", lambda: LoginFlow(container.session))

    with st.form("login_form", clear_on_submit=False):
        email = st.text_input("이메일", value=flow.email)
        password = st.text_input("비밀번호", value=flow.password, type="password")
        submitted = st.form_submit_button("로그인", disabled=flow.is_loading)
        if submitted:
            target = flow.submit(email, password, return_to)
            if target is not None:
                session_manager.reset_flow("login_form")
                session_manager.navigate(target)

    if flow.error:
        st.error(flow.error)

    st.divider()
    entry = OAuthEntry(container.session, container.intents)
    if st.button("💬 카카오로 로그인", use_container_width=True):
        url = entry.begin(Intent.LOGIN)
        if url:
            session_manager.redirect_external(url)
        else:
            st.error(entry.error)

    if st.button("탈퇴한 계정 복구하기", type="tertiary"):
        session_manager.navigate("/withdrawal-recovery")
