import streamlit as st

from use_cases.oauth_flow import LinkCompletionFlow, OAuthCallbackHandler
from utils import session_manager


def render_callback(container):
    """Provider return leg: decide between login and link, then move on."""
    handler = session_manager.get_flow(
        "oauth_callback",
        lambda: OAuthCallbackHandler(container.intents, provider=container.provider),
    )
    params = st.query_params.to_dict()
    route = handler.handle(params)
    if route is None:
        # Already routed on an earlier rerun of this tab.
        st.info("이미 처리된 요청입니다.")
        return
    session_manager.navigate(route.target)


def render_link_callback(container):
    params = st.query_params
    code = params.get("code")
    flow = session_manager.get_flow(f"oauth_link:{code}", lambda: LinkCompletionFlow(container.session))

    st.title("🔗 계정 연동")
    with st.spinner("카카오 계정을 연동하는 중..."):
        flow.complete(code, params.get("state"))

    outcome = flow.outcome
    if outcome is None:
        return
    if outcome.message:
        session_manager.set_flash("success" if outcome.success else "error", outcome.message)
    session_manager.navigate(outcome.redirect_to)
