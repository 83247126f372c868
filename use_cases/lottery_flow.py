"""Lottery entry wizard and payment of winning entries."""

import logging
import time
from collections import OrderedDict
from typing import Callable, Iterable, List, Optional

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from services import lottery_service, payment_service, performance_service
from use_cases.domain_models import LotteryEntry, LotteryGrade, PaymentMethod, PaymentReceipt, Schedule
from use_cases.error_policy import ValidationError, user_message
from use_cases.terminal_guard import TerminalGuard
from use_cases.wizard import StepWizard

log = logging.getLogger(__name__)

MIN_QUANTITY = 1
MAX_QUANTITY = 4
PAYMENT_REDIRECT_TARGET = "/my-page?tab=lottery"
PAYMENT_REDIRECT_DELAY_SECONDS = 3.0
NOT_PAYABLE_MESSAGE = "당첨된 응모만 결제할 수 있습니다."
ENTRY_NOT_FOUND_MESSAGE = "응모 내역을 찾을 수 없습니다."


def clamp_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return MIN_QUANTITY
    return max(MIN_QUANTITY, min(MAX_QUANTITY, quantity))


def group_schedules_by_date(schedules: Iterable[Schedule]) -> "OrderedDict[str, List[Schedule]]":
    grouped: "OrderedDict[str, List[Schedule]]" = OrderedDict()
    dated = sorted((s for s in schedules if s.start_at is not None), key=lambda s: s.start_at)
    for schedule in dated:
        grouped.setdefault(schedule.start_at.strftime("%Y-%m-%d"), []).append(schedule)
    return grouped


class LotteryEntryWizard(StepWizard):
    """Date/round -> grade/quantity -> acknowledgement -> entry."""

    steps = ("schedule", "grade", "confirm")
    entity = "lottery"

    def __init__(self, client: BookingApiClient, performance_id: int):
        super().__init__()
        self.client = client
        self.performance_id = performance_id
        self.schedules: List[Schedule] = []
        self.grades: List[LotteryGrade] = []
        self.schedule_id: Optional[int] = None
        self.selected_grade: Optional[LotteryGrade] = None
        self.quantity = MIN_QUANTITY
        self.acknowledged = False
        self.is_loaded = False

    def load(self) -> None:
        self.schedules = performance_service.list_schedules(self.client, self.performance_id)
        self.grades = lottery_service.list_grades(self.client, self.performance_id)
        self.is_loaded = True

    @property
    def schedules_by_date(self) -> "OrderedDict[str, List[Schedule]]":
        return group_schedules_by_date(self.schedules)

    def select_schedule(self, schedule_id: int) -> None:
        self.schedule_id = schedule_id

    @property
    def grade(self) -> str:
        return self.selected_grade.grade.strip() if self.selected_grade else ""

    def select_grade(self, grade: LotteryGrade) -> None:
        """Grades are keyed by (section, grade); the same grade name recurs across sections."""
        self.selected_grade = grade

    def set_quantity(self, value) -> int:
        self.quantity = clamp_quantity(value)
        return self.quantity

    def step_quantity(self, delta: int) -> int:
        return self.set_quantity(self.quantity + delta)

    def validate_step(self, step: str) -> None:
        if step == "schedule" and self.schedule_id is None:
            raise ValidationError("회차를 선택해주세요.")
        if step == "grade":
            offered = {g.key for g in self.grades}
            if not self.grade or (offered and self.selected_grade.key not in offered):
                raise ValidationError("등급을 선택해주세요.")
            if not isinstance(self.quantity, int) or not MIN_QUANTITY <= self.quantity <= MAX_QUANTITY:
                raise ValidationError(f"수량은 {MIN_QUANTITY}~{MAX_QUANTITY}매 사이여야 합니다.")
        if step == "confirm" and not self.acknowledged:
            raise ValidationError("유의사항에 동의해주세요.")

    def _submit(self) -> LotteryEntry:
        return lottery_service.create_entry(
            self.client,
            performance_id=self.performance_id,
            schedule_id=self.schedule_id,
            grade=self.grade,
            quantity=self.quantity,
        )


class ScheduledRedirect:
    """Deferred navigation that a manual navigation can cancel."""

    def __init__(self, target: str, delay_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.target = target
        self.delay_seconds = delay_seconds
        self._clock = clock
        self._started_at = clock()
        self.cancelled = False

    def remaining(self) -> float:
        return max(0.0, self.delay_seconds - (self._clock() - self._started_at))

    def is_due(self) -> bool:
        return not self.cancelled and self.remaining() == 0.0

    def cancel(self) -> None:
        self.cancelled = True


class LotteryPaymentFlow:
    """Payment of a WIN entry. Exactly one method, CARD by default."""

    def __init__(self, client: BookingApiClient, entry: LotteryEntry, clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.entry = entry
        self.method = PaymentMethod.CARD
        self.guard = TerminalGuard()
        self.is_submitting = False
        self.error: Optional[str] = None
        self.receipt: Optional[PaymentReceipt] = None
        self.redirect: Optional[ScheduledRedirect] = None
        self._clock = clock

    @property
    def is_available(self) -> bool:
        return self.entry.can_pay

    @property
    def is_complete(self) -> bool:
        return self.guard.is_done

    def select_method(self, method) -> None:
        if self.is_complete:
            return
        self.method = PaymentMethod(method)

    def confirm(self) -> bool:
        if not self.is_available:
            self.error = NOT_PAYABLE_MESSAGE
            return False
        if self.is_submitting or not self.guard.can_enter:
            return False

        self.is_submitting = True
        self.error = None
        try:
            run = self.guard.run(lambda: payment_service.pay_lottery_entry(self.client, self.entry.entry_id, self.method))
        except ApiError as e:
            log.warning(f"⚠️ Lottery payment failed for entry {self.entry.entry_id}: {e.message}")
            self.error = user_message("payment", e)
            return False
        finally:
            self.is_submitting = False

        self.receipt = run.value
        self.redirect = ScheduledRedirect(PAYMENT_REDIRECT_TARGET, PAYMENT_REDIRECT_DELAY_SECONDS, clock=self._clock)
        log.info(f"✅ Lottery entry {self.entry.entry_id} paid with {self.method.value}")
        return True


def load_payment_flow(client: BookingApiClient, entry_id: str) -> LotteryPaymentFlow:
    """Payment flow for one of the user's own entries, looked up by id."""
    entry = next((e for e in lottery_service.list_my_entries(client) if entry_id and e.entry_id == entry_id), None)
    if entry is None:
        raise ApiError(ENTRY_NOT_FOUND_MESSAGE, error_code="ENTRY_NOT_FOUND")
    return LotteryPaymentFlow(client, entry)
