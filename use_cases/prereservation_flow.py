"""Pre-reservation: auth gate -> schedule context -> section applications -> seat booking."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Dict, List, Optional

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from services import payment_service, performance_service, prereservation_service
from use_cases.auth_flow import AuthFlowResult, SessionContext, require_authenticated
from use_cases.booking_flow import ReservingWizard, SeatMap
from use_cases.domain_models import (
    PaymentReceipt,
    Performance,
    PrereservationSection,
    Reservation,
    Schedule,
    Seat,
    SeatHold,
)
from use_cases.error_policy import ErrorKind, ValidationError, classify, user_message
from use_cases.terminal_guard import TerminalGuard

log = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "공연 정보를 불러오지 못했습니다."
SCHEDULE_NOT_FOUND_MESSAGE = "해당 회차를 찾을 수 없습니다."
APPLY_SUCCESS_MESSAGE = "사전 예약 신청이 완료되었습니다."
ALREADY_APPLIED_MESSAGE = "이미 신청한 구역입니다."
NOT_APPLICABLE_MESSAGE = "신청 기간이 아닙니다."


class PrereservationFlow:
    def __init__(self, client: BookingApiClient, session: SessionContext, performance_id: int, schedule_id: int):
        self.client = client
        self.session = session
        self.performance_id = performance_id
        self.schedule_id = schedule_id
        self.performance: Optional[Performance] = None
        self.schedule: Optional[Schedule] = None
        self.sections: List[PrereservationSection] = []
        self.is_loading = False
        self.load_error: Optional[str] = None
        self.error: Optional[str] = None
        self.message: Optional[str] = None
        self._apply_guards: Dict[int, TerminalGuard] = {}

    def enter(self, destination: str) -> AuthFlowResult:
        return require_authenticated(self.session, destination)

    @property
    def is_loaded(self) -> bool:
        return self.schedule is not None and self.load_error is None

    def load(self) -> bool:
        self.is_loading = True
        self.load_error = None
        try:
            client = self.client.pinned()
            with ThreadPoolExecutor(max_workers=2) as pool:
                performance_future = pool.submit(performance_service.get_performance, client, self.performance_id)
                schedules_future = pool.submit(performance_service.list_schedules, client, self.performance_id)
                performance = performance_future.result()
                schedules = schedules_future.result()

            schedule = next((s for s in schedules if s.schedule_id == self.schedule_id), None)
            if performance is None or schedule is None:
                self.load_error = SCHEDULE_NOT_FOUND_MESSAGE
                return False

            sections = prereservation_service.list_sections(self.client, self.schedule_id)
        except ApiError as e:
            log.warning(f"⚠️ Pre-reservation context load failed: {e.message}")
            self.load_error = user_message("prereservation", e) if e.is_network_error else LOAD_ERROR_MESSAGE
            return False
        finally:
            self.is_loading = False

        self.performance = performance
        self.schedule = schedule
        self.sections = sections
        return True

    def section(self, section_id: int) -> Optional[PrereservationSection]:
        return next((s for s in self.sections if s.section_id == section_id), None)

    def is_applying(self, section_id: int) -> bool:
        guard = self._apply_guards.get(section_id)
        return guard is not None and guard.is_processing

    def apply(self, section_id: int, now: Optional[datetime] = None) -> bool:
        section = self.section(section_id)
        if section is None or not section.can_apply(now):
            self.error = NOT_APPLICABLE_MESSAGE
            return False

        guard = self._apply_guards.setdefault(section_id, TerminalGuard())
        self.error = None
        self.message = None
        try:
            run = guard.run(lambda: prereservation_service.apply_section(self.client, self.schedule_id, section_id))
        except ApiError as e:
            if classify(e) == ErrorKind.CONFLICT:
                section.applied = True
                self.message = ALREADY_APPLIED_MESSAGE
                return False
            log.warning(f"⚠️ Pre-reservation apply failed for section {section_id}: {e.message}")
            self.error = user_message("prereservation", e)
            return False

        if run.executed:
            section.applied = True
            self.message = APPLY_SUCCESS_MESSAGE
            log.info(f"✅ Applied to section {section_id} of schedule {self.schedule_id}")
        return run.executed

    def can_book(self, section_id: int) -> bool:
        section = self.section(section_id)
        return section is not None and section.applied

    def booking_path(self, section_id: int) -> str:
        return (
            f"/prereservation-booking?performanceId={self.performance_id}"
            f"&scheduleId={self.schedule_id}&sectionId={section_id}"
        )


class PrereservationBookingWizard(ReservingWizard):
    """One seat in an applied section -> payment, through the pre-reservation endpoints."""

    steps = ("seat", "payment")
    entity = "payment"

    def __init__(self, client: BookingApiClient, schedule_id: int, section_id: int):
        super().__init__(client, schedule_id)
        self.section_id = section_id
        self.seat_map = SeatMap([], limit=1)
        self.is_loaded = False

    def load(self) -> None:
        seats = performance_service.list_schedule_seats(self.client, self.schedule_id)
        self.seat_map = SeatMap((s for s in seats if s.section_id == self.section_id), limit=1)
        self.is_loaded = True
        log.info(f"Loaded {len(self.seat_map.seats)} seats of section {self.section_id} for pre-reservation booking")

    @property
    def selected_seat(self) -> Optional[Seat]:
        ids = self.seat_map.selected_ids
        return self.seat_map.seats[ids[0]] if ids else None

    @property
    def total_price(self) -> int:
        seat = self.selected_seat
        return seat.price if seat else 0

    def validate_step(self, step: str) -> None:
        if step == "seat" and self.selected_seat is None:
            raise ValidationError("좌석을 선택해주세요.")
        super().validate_step(step)

    def _hold(self, seat_id: int) -> SeatHold:
        return prereservation_service.hold_seat(self.client, self.schedule_id, seat_id)

    def _create_reservation(self, seat_ids: List[int]) -> Reservation:
        return prereservation_service.create_booking(self.client, self.schedule_id, seat_ids[0])

    def _pay(self, reservation_id: int) -> PaymentReceipt:
        return payment_service.pay_prereservation_booking(self.client, reservation_id, self.payment_method)
