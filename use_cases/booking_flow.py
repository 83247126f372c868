"""Direct seat booking: section -> seat(s) -> payment."""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from services import payment_service, performance_service, queue_service, reservation_service
from use_cases.domain_models import PaymentMethod, PaymentReceipt, Reservation, Seat, SeatHold, Section
from use_cases.error_policy import ValidationError, user_message
from use_cases.terminal_guard import TerminalGuard
from use_cases.wizard import StepWizard

log = logging.getLogger(__name__)

SELECTED = "SELECTED"
SELECTION_LOCKED_MESSAGE = "이미 선점한 좌석은 변경할 수 없습니다."
NOT_RESERVED_MESSAGE = "좌석 선점이 완료되지 않았습니다."


class SeatMap:
    """Seat selection for one section. Only AVAILABLE seats ever toggle."""

    def __init__(self, seats: Iterable[Seat], limit: Optional[int] = None):
        self.seats: Dict[int, Seat] = {seat.seat_id: seat for seat in seats}
        self.limit = limit
        self._selected: List[int] = []

    @property
    def selected_ids(self) -> List[int]:
        return list(self._selected)

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    def is_selectable(self, seat_id: int) -> bool:
        seat = self.seats.get(seat_id)
        return seat is not None and seat.is_selectable

    def toggle(self, seat_id: int) -> bool:
        if not self.is_selectable(seat_id):
            return False
        if seat_id in self._selected:
            self._selected.remove(seat_id)
            return True
        if self.limit is not None and len(self._selected) >= self.limit:
            return False
        self._selected.append(seat_id)
        return True

    def clear(self) -> None:
        self._selected = []

    def display_status(self, seat_id: int) -> str:
        if seat_id in self._selected:
            return SELECTED
        return self.seats[seat_id].status

    def grouped(self) -> "OrderedDict[str, OrderedDict[str, List[Seat]]]":
        """Section -> row -> seats ordered by seat number."""
        layout: "OrderedDict[str, OrderedDict[str, List[Seat]]]" = OrderedDict()
        ordered = sorted(self.seats.values(), key=lambda s: (s.section_name, s.row_label, s.seat_number))
        for seat in ordered:
            rows = layout.setdefault(seat.section_name, OrderedDict())
            rows.setdefault(seat.row_label, []).append(seat)
        return layout


def sections_from_seats(seats: Iterable[Seat]) -> List[Section]:
    by_id: "OrderedDict[Optional[int], List[Seat]]" = OrderedDict()
    for seat in seats:
        by_id.setdefault(seat.section_id, []).append(seat)
    sections = []
    for section_id, members in by_id.items():
        sections.append(
            Section(
                section_id=section_id,
                section_name=members[0].section_name,
                unit_price=members[0].price,
                available_count=sum(1 for s in members if s.is_selectable),
            )
        )
    return sorted(sections, key=lambda s: s.section_name)


class ReservingWizard(StepWizard):
    """
    Wizard whose seats are held and reserved before the payment step.

    Entering `reserve_step` holds every selected seat and opens a pending
    reservation over them (one guarded write); the terminal call then pays
    that reservation by id. The selection is frozen once reserved.
    """

    reserve_step = "payment"
    reserve_entity = "booking"

    def __init__(self, client: BookingApiClient, schedule_id: int):
        super().__init__()
        self.client = client
        self.schedule_id = schedule_id
        self.seat_map = SeatMap([])
        self.payment_method: Optional[PaymentMethod] = None
        self.held_seat_ids: List[int] = []
        self.hold_expires_at: Optional[datetime] = None
        self.reservation: Optional[Reservation] = None
        self.reserve_guard = TerminalGuard()

    @property
    def is_reserved(self) -> bool:
        return self.reservation is not None

    def toggle_seat(self, seat_id: int) -> bool:
        if self.is_reserved:
            self.error = SELECTION_LOCKED_MESSAGE
            return False
        return self.seat_map.toggle(seat_id)

    def select_payment_method(self, method) -> None:
        self.payment_method = PaymentMethod(method)

    def _hold(self, seat_id: int) -> SeatHold:
        raise NotImplementedError

    def _create_reservation(self, seat_ids: List[int]) -> Reservation:
        raise NotImplementedError

    def _pay(self, reservation_id: int) -> PaymentReceipt:
        raise NotImplementedError

    def _hold_and_reserve(self) -> Reservation:
        seat_ids = self.seat_map.selected_ids
        for seat_id in seat_ids:
            # Seats held by an earlier, failed attempt stay held on the backend.
            if seat_id not in self.held_seat_ids:
                hold = self._hold(seat_id)
                self.held_seat_ids.append(seat_id)
                if hold.expires_at is not None:
                    self.hold_expires_at = hold.expires_at
        return self._create_reservation(seat_ids)

    def reserve(self) -> bool:
        if self.is_reserved:
            return True
        if self.is_submitting or not self.reserve_guard.can_enter:
            return False

        self.is_submitting = True
        self.error = None
        try:
            run = self.reserve_guard.run(self._hold_and_reserve)
        except ApiError as e:
            log.warning(f"⚠️ Seat hold/reservation failed for schedule {self.schedule_id}: {e.message}")
            self.error = user_message(self.reserve_entity, e)
            return False
        finally:
            self.is_submitting = False

        self.reservation = run.value
        log.info(f"✅ Reservation {self.reservation.reservation_id} opened for seats {self.held_seat_ids}")
        return True

    def go_to(self, step: str) -> bool:
        if step == self.reserve_step and not self.is_reserved and not self.is_complete:
            try:
                self._validate_through(self.steps.index(step) - 1)
            except ValidationError as e:
                self.error = str(e)
                return False
            if not self.reserve():
                return False
        return super().go_to(step)

    def validate_step(self, step: str) -> None:
        if step == self.reserve_step:
            if not self.is_reserved:
                raise ValidationError(NOT_RESERVED_MESSAGE)
            if self.payment_method is None:
                raise ValidationError("결제 수단을 선택해주세요.")

    def _submit(self) -> PaymentReceipt:
        return self._pay(self.reservation.reservation_id)


class DirectBookingWizard(ReservingWizard):
    steps = ("section", "seats", "payment")
    entity = "payment"

    def __init__(self, client: BookingApiClient, schedule_id: int, queue_id: Optional[int] = None):
        super().__init__(client, schedule_id)
        self.queue_id = queue_id
        self.all_seats: List[Seat] = []
        self.sections: List[Section] = []
        self.section: Optional[Section] = None
        self.is_loaded = False

    def load(self) -> None:
        self.all_seats = performance_service.list_schedule_seats(self.client, self.schedule_id)
        self.sections = sections_from_seats(self.all_seats)
        self.is_loaded = True
        log.info(f"Loaded {len(self.all_seats)} seats in {len(self.sections)} sections for schedule {self.schedule_id}")

    def select_section(self, section_id: Optional[int]) -> None:
        section = next((s for s in self.sections if s.section_id == section_id), None)
        if section is None:
            raise ValidationError("존재하지 않는 구역입니다.")
        if self.section is not None and self.section.section_id == section.section_id:
            return
        if self.is_reserved:
            raise ValidationError(SELECTION_LOCKED_MESSAGE)
        self.seat_map = SeatMap(s for s in self.all_seats if s.section_id == section.section_id)
        self.section = section

    @property
    def total_price(self) -> int:
        if self.section is None:
            return 0
        return self.seat_map.selected_count * self.section.unit_price

    def validate_step(self, step: str) -> None:
        if step == "section" and self.section is None:
            raise ValidationError("구역을 선택해주세요.")
        if step == "seats" and self.seat_map.selected_count == 0:
            raise ValidationError("좌석을 선택해주세요.")
        super().validate_step(step)

    def _hold(self, seat_id: int) -> SeatHold:
        return reservation_service.hold_seat(self.client, self.schedule_id, seat_id)

    def _create_reservation(self, seat_ids: List[int]) -> Reservation:
        return reservation_service.create_reservation(self.client, self.schedule_id, seat_ids)

    def _pay(self, reservation_id: int) -> PaymentReceipt:
        receipt = payment_service.pay_reservation(self.client, reservation_id, self.payment_method)
        if self.queue_id is not None:
            # Releasing the queue slot never undoes a completed payment.
            try:
                queue_service.complete(self.client, self.queue_id)
            except ApiError as e:
                log.warning(f"⚠️ Could not release queue {self.queue_id}: {e.message}")
        return receipt
