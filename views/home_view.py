import pandas as pd
import streamlit as st

from infrastructure.http.booking_api_client import ApiError
from services import performance_service
from use_cases.error_policy import user_message
from utils import session_manager


def _performances_frame(performances) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "ID": p.performance_id,
                "공연명": p.title,
                "공연장": p.venue_name,
                "시작일": p.start_date,
                "종료일": p.end_date,
            }
            for p in performances
        ]
    )


def _render_schedules(container, performance_id: int):
    try:
        schedules = performance_service.list_schedules(container.user_client, performance_id)
    except ApiError as e:
        st.error(user_message("performance", e))
        return
    if not schedules:
        st.info("등록된 회차가 없습니다.")
        return

    for schedule in schedules:
        start = schedule.start_at.strftime("%Y-%m-%d %H:%M") if schedule.start_at else "-"
        cols = st.columns([3, 1, 1, 1])
        cols[0].write(f"{schedule.round_no}회 · {start}")
        if cols[1].button("예매", key=f"book_{schedule.schedule_id}"):
            session_manager.navigate(f"/booking/queue?scheduleId={schedule.schedule_id}")
        if cols[2].button("사전 예약", key=f"pre_{schedule.schedule_id}"):
            session_manager.navigate(
                f"/prereservation?performanceId={performance_id}&scheduleId={schedule.schedule_id}"
            )
    if st.button("🎟 추첨 응모", key=f"lottery_{performance_id}"):
        session_manager.navigate(f"/lottery?performanceId={performance_id}")


def render_home(container):
    st.title("🎭 공연")

    query = st.text_input("공연 검색", placeholder="공연명을 입력하세요")
    try:
        if query.strip():
            performances = performance_service.search_performances(container.user_client, query.strip())
        else:
            performances = performance_service.list_performances(container.user_client)
    except ApiError as e:
        st.error(user_message("performance", e))
        return

    if not performances:
        st.info("공연이 없습니다.")
        return

    st.dataframe(_performances_frame(performances), use_container_width=True, hide_index=True)

    titles = {p.performance_id: p.title for p in performances}
    selected = st.selectbox("공연 선택", options=list(titles), format_func=lambda pid: titles[pid])
    if selected is not None:
        _render_schedules(container, selected)
