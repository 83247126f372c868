import streamlit as st
import streamlit.components.v1 as components
from urllib.parse import urlencode

from infrastructure.http.booking_api_client import ApiError
from use_cases.auth_flow import require_authenticated
from use_cases.domain_models import PaymentMethod
from use_cases.error_policy import user_message
from use_cases.lottery_flow import MAX_QUANTITY, MIN_QUANTITY, LotteryEntryWizard, load_payment_flow
from utils import session_manager


def _render_schedule_step(wizard):
    for date, schedules in wizard.schedules_by_date.items():
        st.markdown(f"**{date}**")
        cols = st.columns(max(len(schedules), 1))
        for col, schedule in zip(cols, schedules):
            selected = wizard.schedule_id == schedule.schedule_id
            if col.button(
                schedule.round_label,
                key=f"round_{schedule.schedule_id}",
                type="primary" if selected else "secondary",
            ):
                wizard.select_schedule(schedule.schedule_id)
                st.rerun()


def _render_grade_step(wizard):
    grades = {g.key: g for g in wizard.grades}
    options = list(grades)
    current = wizard.selected_grade.key if wizard.selected_grade else None
    key = st.selectbox(
        "등급",
        options=options,
        index=options.index(current) if current in options else None,
        format_func=lambda k: grades[k].label,
    )
    if key is not None:
        wizard.select_grade(grades[key])

    cols = st.columns([1, 1, 1, 4])
    if cols[0].button("－", disabled=wizard.quantity <= MIN_QUANTITY):
        wizard.step_quantity(-1)
        st.rerun()
    cols[1].markdown(f"**{wizard.quantity}매**")
    if cols[2].button("＋", disabled=wizard.quantity >= MAX_QUANTITY):
        wizard.step_quantity(1)
        st.rerun()


def _render_confirm_step(wizard):
    st.info("추첨 결과는 마이페이지에서 확인할 수 있습니다. 당첨 시 결제를 완료해야 예매가 확정됩니다.")
    wizard.acknowledged = st.checkbox("유의사항을 확인했습니다.", value=wizard.acknowledged)
    if st.button("응모하기", type="primary", disabled=wizard.is_submitting or wizard.is_complete):
        wizard.submit()
        st.rerun()


def render_lottery(container):
    gate = require_authenticated(container.session, session_manager.current_path())
    if gate.status == "STOP":
        session_manager.navigate(gate.redirect_to)

    performance_id = st.query_params.get("performanceId")
    if not performance_id or not performance_id.isdigit():
        st.error("잘못된 접근입니다.")
        return

    st.title("🎟 추첨 응모")
    key = f"lottery:{performance_id}"
    wizard = session_manager.get_flow(key, lambda: LotteryEntryWizard(container.user_client, int(performance_id)))
    if not wizard.is_loaded:
        try:
            wizard.load()
        except ApiError as e:
            st.error(user_message("lottery", e))
            return
    if not wizard.schedules:
        st.info("응모 가능한 회차가 없습니다.")
        return

    if wizard.is_complete:
        st.success("응모가 완료되었습니다.")
        if st.button("응모 내역 보기"):
            session_manager.reset_flow(key)
            session_manager.navigate("/my-page?tab=lottery")
        return

    step_titles = {"schedule": "1. 날짜/회차", "grade": "2. 등급/수량", "confirm": "3. 확인"}
    st.caption(" → ".join(step_titles.values()))
    st.subheader(step_titles[wizard.current_step])

    if wizard.current_step == "schedule":
        _render_schedule_step(wizard)
    elif wizard.current_step == "grade":
        _render_grade_step(wizard)
    else:
        _render_confirm_step(wizard)

    if wizard.error:
        st.error(wizard.error)

    cols = st.columns(2)
    if wizard.step_index > 0 and cols[0].button("← 이전"):
        wizard.back()
        st.rerun()
    if wizard.current_step != "confirm" and cols[1].button("다음 →"):
        wizard.next()
        st.rerun()


def _render_redirect_timer(flow):
    redirect = flow.redirect
    if redirect is None or redirect.cancelled:
        return
    if redirect.is_due():
        session_manager.navigate(redirect.target)
    query = urlencode(session_manager.path_to_params(redirect.target))
    components.html(
        f"""
        <script>
          setTimeout(function () {{
            window.parent.location.search = "?{query}";
          }}, {int(redirect.remaining() * 1000)});
        </script>
        """,
        height=0,
    )


def render_lottery_payment(container):
    gate = require_authenticated(container.session, session_manager.current_path())
    if gate.status == "STOP":
        session_manager.navigate(gate.redirect_to)

    entry_id = st.query_params.get("entryId")
    if not entry_id:
        st.error("잘못된 접근입니다.")
        return

    key = f"lottery_payment:{entry_id}"
    try:
        flow = session_manager.get_flow(key, lambda: load_payment_flow(container.user_client, entry_id))
    except ApiError as e:
        st.error(user_message("lottery", e))
        return

    st.title("💳 당첨 결제")
    if not flow.is_available:
        st.warning(f"{flow.entry.status_label} 상태의 응모는 결제할 수 없습니다.")
        return

    if flow.is_complete:
        st.success("결제가 완료되었습니다. 잠시 후 마이페이지로 이동합니다.")
        if st.button("지금 이동"):
            flow.redirect.cancel()
            session_manager.reset_flow(key)
            session_manager.navigate("/my-page?tab=lottery")
        _render_redirect_timer(flow)
        return

    st.write(f"**{flow.entry.title}** · {flow.entry.grade} · {flow.entry.quantity}매")
    methods = list(PaymentMethod)
    method = st.radio("결제 수단", options=methods, index=methods.index(flow.method), format_func=lambda m: m.label)
    flow.select_method(method)

    if flow.error:
        st.error(flow.error)
    if st.button("결제하기", type="primary", disabled=flow.is_submitting):
        flow.confirm()
        st.rerun()
