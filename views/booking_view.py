import streamlit as st

import ui
from infrastructure.http.booking_api_client import ApiError
from use_cases.auth_flow import require_authenticated
from use_cases.booking_flow import DirectBookingWizard
from use_cases.domain_models import PaymentMethod
from use_cases.error_policy import user_message
from use_cases.queue_flow import POLL_INTERVAL_SECONDS, BookingQueue
from utils import session_manager


def _render_section_step(wizard):
    options = [s.section_id for s in wizard.sections]
    names = {s.section_id: f"{s.section_name}구역 · {ui.format_price(s.unit_price)} · 잔여 {s.available_count}석" for s in wizard.sections}
    current = wizard.section.section_id if wizard.section else None
    choice = st.radio(
        "구역 선택",
        options=options,
        index=options.index(current) if current in options else None,
        format_func=lambda sid: names[sid],
        disabled=wizard.is_reserved,
    )
    if choice is not None and not wizard.is_reserved:
        wizard.select_section(choice)


def render_seat_map(wizard):
    ui.render_seat_legend()
    for section_name, rows in wizard.seat_map.grouped().items():
        st.markdown(f"**{section_name}구역**")
        for row_label, seats in rows.items():
            cols = st.columns(len(seats) + 1)
            cols[0].write(f"{row_label}열")
            for col, seat in zip(cols[1:], seats):
                status = wizard.seat_map.display_status(seat.seat_id)
                clicked = col.button(
                    ui.seat_label(status, seat.seat_number),
                    key=f"seat_{seat.seat_id}",
                    disabled=not seat.is_selectable or wizard.is_reserved,
                )
                if clicked:
                    wizard.toggle_seat(seat.seat_id)
                    st.rerun()
    st.write(f"선택 좌석 {wizard.seat_map.selected_count}석 · 합계 {ui.format_price(wizard.total_price)}")


def render_payment_step(wizard):
    st.caption(f"예매 번호 {wizard.reservation.reservation_id}")
    if wizard.hold_expires_at:
        st.caption(f"좌석 선점 만료: {wizard.hold_expires_at.strftime('%H:%M:%S')}")
    methods = list(PaymentMethod)
    current = wizard.payment_method
    choice = st.radio(
        "결제 수단",
        options=methods,
        index=methods.index(current) if current in methods else None,
        format_func=lambda m: m.label,
    )
    if choice is not None:
        wizard.select_payment_method(choice)
    st.write(f"결제 금액: {ui.format_price(wizard.total_price)}")
    if st.button("결제하기", type="primary", disabled=wizard.is_submitting or wizard.is_complete):
        wizard.submit()
        st.rerun()


def render_booking(container):
    gate = require_authenticated(container.session, session_manager.current_path())
    if gate.status == "STOP":
        session_manager.navigate(gate.redirect_to)

    schedule_id = st.query_params.get("scheduleId")
    if not schedule_id or not schedule_id.isdigit():
        st.error("잘못된 접근입니다.")
        return
    queue_id = st.query_params.get("queueId")
    queue_id = int(queue_id) if queue_id and queue_id.isdigit() else None

    st.title("🎫 좌석 예매")
    key = f"booking:{schedule_id}"
    wizard = session_manager.get_flow(
        key,
        lambda: DirectBookingWizard(container.user_client, int(schedule_id), queue_id=queue_id),
    )
    if not wizard.is_loaded:
        try:
            wizard.load()
        except ApiError as e:
            st.error(user_message("booking", e))
            return

    if wizard.is_complete:
        st.success("예매가 완료되었습니다.")
        if st.button("마이페이지로"):
            session_manager.reset_flow(key)
            session_manager.navigate("/my-page")
        return

    step_titles = {"section": "1. 구역", "seats": "2. 좌석", "payment": "3. 결제"}
    st.caption(" → ".join(step_titles.values()))
    st.subheader(step_titles[wizard.current_step])

    if wizard.current_step == "section":
        _render_section_step(wizard)
    elif wizard.current_step == "seats":
        render_seat_map(wizard)
    else:
        render_payment_step(wizard)

    if wizard.error:
        st.error(wizard.error)

    cols = st.columns(2)
    if wizard.step_index > 0 and cols[0].button("← 이전"):
        wizard.back()
        st.rerun()
    if wizard.current_step != "payment" and cols[1].button("다음 →", disabled=wizard.is_submitting):
        wizard.next()
        st.rerun()


def render_queue(container):
    gate = require_authenticated(container.session, session_manager.current_path())
    if gate.status == "STOP":
        session_manager.navigate(gate.redirect_to)

    schedule_id = st.query_params.get("scheduleId")
    if not schedule_id or not schedule_id.isdigit():
        st.error("잘못된 접근입니다.")
        return

    st.title("⏳ 예매 대기열")
    key = f"queue:{schedule_id}"
    queue = session_manager.get_flow(key, lambda: BookingQueue(container.user_client, int(schedule_id)))
    if queue.position is None:
        queue.start()
    elif queue.should_poll:
        queue.poll()

    if queue.is_enterable:
        session_manager.reset_flow(key)
        session_manager.navigate(queue.booking_path)

    if queue.error:
        st.error(queue.error)
        if st.button("처음으로"):
            session_manager.reset_flow(key)
            session_manager.navigate("/")
        return

    position = queue.position
    st.metric("내 앞 대기 인원", position.ahead_count if position.ahead_count is not None else "-")
    st.caption(f"대기 순번 {position.my_rank or '-'} · 잠시 후 자동으로 입장합니다.")

    if st.button("대기 취소", type="secondary"):
        queue.exit()
        session_manager.reset_flow(key)
        session_manager.navigate("/")

    if queue.should_poll:
        session_manager.schedule_rerun(POLL_INTERVAL_SECONDS)
