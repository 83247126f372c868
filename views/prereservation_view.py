import streamlit as st

from infrastructure.http.booking_api_client import ApiError
from use_cases.domain_models import APPLY_STATE_LABELS, ApplyState
from use_cases.error_policy import user_message
from use_cases.prereservation_flow import PrereservationBookingWizard, PrereservationFlow
from utils import session_manager
from views.booking_view import render_payment_step, render_seat_map


def _render_section(flow, section):
    state = section.apply_state()
    cols = st.columns([3, 3, 2, 2])
    cols[0].write(f"**{section.section_name}**")
    start = section.booking_start_at.strftime("%m/%d %H:%M") if section.booking_start_at else "-"
    end = section.booking_end_at.strftime("%m/%d %H:%M") if section.booking_end_at else "-"
    cols[1].caption(f"{start} ~ {end}")
    clicked = cols[2].button(
        APPLY_STATE_LABELS[state],
        key=f"apply_{section.section_id}",
        disabled=state != ApplyState.OPEN or flow.is_applying(section.section_id),
        type="primary" if state == ApplyState.OPEN else "secondary",
    )
    if clicked:
        flow.apply(section.section_id)
        st.rerun()
    if flow.can_book(section.section_id) and cols[3].button("좌석 예매", key=f"book_{section.section_id}"):
        session_manager.navigate(flow.booking_path(section.section_id))


def _load_flow(container, key):
    params = st.query_params
    performance_id = params.get("performanceId")
    schedule_id = params.get("scheduleId")
    if not (performance_id and schedule_id and performance_id.isdigit() and schedule_id.isdigit()):
        st.error("잘못된 접근입니다.")
        return None

    flow = session_manager.get_flow(
        f"{key}:{schedule_id}",
        lambda: PrereservationFlow(container.user_client, container.session, int(performance_id), int(schedule_id)),
    )
    gate = flow.enter(session_manager.current_path())
    if gate.status == "STOP":
        session_manager.navigate(gate.redirect_to)
    return flow


def render_prereservation(container):
    flow = _load_flow(container, "prereservation")
    if flow is None:
        return

    if not flow.is_loaded:
        with st.spinner("공연 정보를 불러오는 중..."):
            flow.load()
    if flow.load_error:
        st.error(flow.load_error)
        if st.button("다시 시도"):
            session_manager.reset_flow(f"prereservation:{flow.schedule_id}")
            st.rerun()
        return

    st.title(f"📝 사전 예약 · {flow.performance.title}")
    st.caption(flow.schedule.round_label)

    if flow.message:
        st.info(flow.message)
    if flow.error:
        st.error(flow.error)

    if not flow.sections:
        st.info("신청 가능한 구역이 없습니다.")
        return
    for section in flow.sections:
        _render_section(flow, section)


def render_prereservation_booking(container):
    flow = _load_flow(container, "prereservation")
    if flow is None:
        return
    section_id = st.query_params.get("sectionId")
    if not section_id or not section_id.isdigit():
        st.error("잘못된 접근입니다.")
        return

    key = f"prereservation-booking:{flow.schedule_id}:{section_id}"
    wizard = session_manager.get_flow(
        key,
        lambda: PrereservationBookingWizard(container.user_client, flow.schedule_id, int(section_id)),
    )
    if not wizard.is_loaded:
        try:
            wizard.load()
        except ApiError as e:
            st.error(user_message("booking", e))
            return

    st.title("🎫 사전 예약 좌석 예매")
    if wizard.is_complete:
        st.success("사전 예약 예매가 완료되었습니다.")
        if st.button("마이페이지로"):
            session_manager.reset_flow(key)
            session_manager.navigate("/my-page")
        return

    if wizard.current_step == "seat":
        render_seat_map(wizard)
    else:
        render_payment_step(wizard)

    if wizard.error:
        st.error(wizard.error)

    cols = st.columns(2)
    if wizard.step_index > 0 and cols[0].button("← 이전"):
        wizard.back()
        st.rerun()
    if wizard.current_step == "seat" and cols[1].button("다음 →", disabled=wizard.is_submitting):
        wizard.next()
        st.rerun()
