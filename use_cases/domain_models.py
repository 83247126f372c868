"""Backend-owned reservation entities as read by the front end."""

from dataclasses import asdict, dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

DEFAULT_BACKEND_TIMEZONE = "Asia/Seoul"

# The backend sends naive wall-clock timestamps in its own zone.
_backend_tz: tzinfo = ZoneInfo(DEFAULT_BACKEND_TIMEZONE)


def set_backend_timezone(tz: tzinfo) -> None:
    global _backend_tz
    _backend_tz = tz


def backend_timezone() -> tzinfo:
    return _backend_tz


def to_backend_time(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime in the backend zone. Naive values are read as backend wall-clock time."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=_backend_tz)
    return value.astimezone(_backend_tz)


def backend_now() -> datetime:
    return datetime.now(_backend_tz)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_backend_time(datetime.fromisoformat(value))


def _first_id(data: Dict[str, Any], *keys: str) -> str:
    """First present identifier as a string, "" when the payload carries none."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return str(value)
    return ""


class PaymentMethod(str, Enum):
    CARD = "CARD"
    VIRTUAL_ACCOUNT = "VIRTUAL_ACCOUNT"
    EASY_PAY = "EASY_PAY"

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self]


PAYMENT_METHOD_LABELS = {
    PaymentMethod.CARD: "신용카드",
    PaymentMethod.VIRTUAL_ACCOUNT: "가상계좌",
    PaymentMethod.EASY_PAY: "간편결제",
}


class PaymentDomain(str, Enum):
    RESERVATION = "RESERVATION"
    PRERESERVATION = "PRERESERVATION"
    LOTTERY = "LOTTERY"


class LotteryStatus(str, Enum):
    APPLIED = "APPLIED"
    WIN = "WIN"
    LOSE = "LOSE"
    CANCELLED = "CANCELLED"


LOTTERY_STATUS_LABELS = {
    LotteryStatus.APPLIED: "응모완료",
    LotteryStatus.WIN: "당첨",
    LotteryStatus.LOSE: "낙첨",
    LotteryStatus.CANCELLED: "취소됨",
}


class SeatStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    HOLD = "HOLD"
    SOLD = "SOLD"


class QueueStatus(str, Enum):
    WAITING = "WAITING"
    ENTERABLE = "ENTERABLE"
    EXPIRED = "EXPIRED"
    COMPLETED = "COMPLETED"
    NOT_IN_QUEUE = "NOT_IN_QUEUE"


class ApplyState(str, Enum):
    OPEN = "OPEN"
    NOT_OPEN = "NOT_OPEN"
    CLOSED = "CLOSED"
    APPLIED = "APPLIED"


APPLY_STATE_LABELS = {
    ApplyState.OPEN: "신청하기",
    ApplyState.NOT_OPEN: "오픈 예정",
    ApplyState.CLOSED: "신청 마감",
    ApplyState.APPLIED: "신청 완료",
}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: Optional[str] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["TokenPair"]:
        if not data or not data.get("accessToken"):
            return None
        refresh = data.get("refreshToken")
        return cls(access_token=data["accessToken"], refresh_token=refresh if isinstance(refresh, str) else None)


@dataclass(frozen=True)
class Performance:
    performance_id: int
    title: str
    venue_name: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Performance":
        return cls(
            performance_id=data.get("performanceId") or data.get("id"),
            title=data.get("title", ""),
            venue_name=data.get("venueName") or "",
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
        )


@dataclass(frozen=True)
class Schedule:
    schedule_id: int
    round_no: Optional[int]
    start_at: Optional[datetime]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Schedule":
        return cls(
            schedule_id=data.get("performanceScheduleId") or data.get("scheduleId") or data.get("id"),
            round_no=data.get("roundNo"),
            start_at=parse_datetime(data.get("startAt")),
        )

    @property
    def round_label(self) -> str:
        time_part = self.start_at.strftime("%H:%M") if self.start_at else ""
        return f"{self.round_no}회 {time_part}".strip()


@dataclass(frozen=True)
class Seat:
    seat_id: int
    section_id: Optional[int]
    section_name: str
    row_label: str
    seat_number: int
    status: str
    price: int = 0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Seat":
        return cls(
            seat_id=data.get("scheduleSeatId") or data.get("seatId"),
            section_id=data.get("sectionId"),
            section_name=data.get("sectionName") or "기타",
            row_label=data.get("rowLabel") or "",
            seat_number=data.get("seatNumber") or 0,
            status=data.get("status") or SeatStatus.SOLD.value,
            price=int(data.get("price") or 0),
        )

    @property
    def is_selectable(self) -> bool:
        return self.status == SeatStatus.AVAILABLE.value

    @property
    def label(self) -> str:
        return f"{self.section_name}구역 {self.row_label}열 {self.seat_number}번"


@dataclass(frozen=True)
class Section:
    section_id: Optional[int]
    section_name: str
    unit_price: int
    available_count: int = 0


@dataclass(frozen=True)
class LotteryGrade:
    section_name: str
    grade: str
    rows: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, str]:
        return (self.section_name, self.grade)

    @property
    def label(self) -> str:
        return f"{self.section_name} - {self.grade}"


@dataclass(frozen=True)
class LotteryEntry:
    entry_id: str
    status: str
    schedule_id: Optional[int] = None
    grade: str = ""
    quantity: int = 1
    title: str = ""
    start_at: Optional[str] = None
    round_no: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "LotteryEntry":
        return cls(
            entry_id=_first_id(data, "lotteryEntryId", "id", "entryId"),
            status=data.get("status") or "",
            schedule_id=data.get("scheduleId"),
            grade=data.get("gradeType") or data.get("grade") or "",
            quantity=data.get("quantity") or 1,
            title=data.get("title") or "",
            start_at=data.get("startAt"),
            round_no=data.get("roundNo"),
        )

    @property
    def status_label(self) -> str:
        try:
            return LOTTERY_STATUS_LABELS[LotteryStatus(self.status)]
        except ValueError:
            return self.status

    @property
    def can_pay(self) -> bool:
        return bool(self.entry_id) and self.status == LotteryStatus.WIN.value

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["status_label"] = self.status_label
        return row


@dataclass
class PrereservationSection:
    section_id: int
    section_name: str
    booking_start_at: Optional[datetime]
    booking_end_at: Optional[datetime]
    applied: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PrereservationSection":
        return cls(
            section_id=data["sectionId"],
            section_name=data.get("sectionName") or "",
            booking_start_at=parse_datetime(data.get("bookingStartAt")),
            booking_end_at=parse_datetime(data.get("bookingEndAt")),
            applied=bool(data.get("applied")),
        )

    def apply_state(self, now: Optional[datetime] = None) -> ApplyState:
        if self.applied:
            return ApplyState.APPLIED
        now = to_backend_time(now) if now is not None else backend_now()
        start = to_backend_time(self.booking_start_at)
        end = to_backend_time(self.booking_end_at)
        if start is not None and now < start:
            return ApplyState.NOT_OPEN
        if end is not None and now > end:
            return ApplyState.CLOSED
        return ApplyState.OPEN

    def can_apply(self, now: Optional[datetime] = None) -> bool:
        return self.apply_state(now) == ApplyState.OPEN


@dataclass(frozen=True)
class SeatHold:
    seat_id: int
    expires_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, seat_id: int, data: Optional[Dict[str, Any]]) -> "SeatHold":
        data = data if isinstance(data, dict) else {}
        return cls(seat_id=seat_id, expires_at=parse_datetime(data.get("expiresAt")))


@dataclass(frozen=True)
class Reservation:
    """Pending reservation created over held seats; paid by its id."""

    reservation_id: int
    status: str = "PENDING"
    expires_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]], id_key: str = "reservationId") -> Optional["Reservation"]:
        if not isinstance(data, dict) or data.get(id_key) is None:
            return None
        return cls(
            reservation_id=int(data[id_key]),
            status=data.get("status") or "PENDING",
            expires_at=parse_datetime(data.get("expiresAt")),
        )


@dataclass(frozen=True)
class QueuePosition:
    queue_id: Optional[int]
    status: str
    ahead_count: Optional[int] = None
    my_rank: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "QueuePosition":
        entry = data.get("entry") if isinstance(data.get("entry"), dict) else data
        queue_id = data.get("queueId") or entry.get("queueId")
        return cls(
            queue_id=int(queue_id) if queue_id is not None else None,
            status=entry.get("status") or QueueStatus.NOT_IN_QUEUE.value,
            ahead_count=entry.get("aheadCount"),
            my_rank=entry.get("myRank"),
        )

    @property
    def is_enterable(self) -> bool:
        return self.status == QueueStatus.ENTERABLE.value

    @property
    def is_waiting(self) -> bool:
        return self.status == QueueStatus.WAITING.value


@dataclass(frozen=True)
class PaymentReceipt:
    payment_id: Optional[int] = None
    order_id: Optional[str] = None
    amount: Optional[int] = None
    status: Optional[str] = None
    paid_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "PaymentReceipt":
        data = data or {}
        return cls(
            payment_id=data.get("paymentId"),
            order_id=data.get("orderId"),
            amount=data.get("amount"),
            status=data.get("status"),
            paid_at=data.get("paidAt"),
        )


@dataclass(frozen=True)
class AuthorizeUrl:
    authorize_url: str
    state: Optional[str] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "AuthorizeUrl":
        data = data or {}
        return cls(authorize_url=data.get("authorizeUrl") or "", state=data.get("state"))

