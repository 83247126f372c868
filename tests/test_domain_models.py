from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from use_cases.domain_models import (
    DEFAULT_BACKEND_TIMEZONE,
    ApplyState,
    PaymentMethod,
    PrereservationSection,
    QueuePosition,
    QueueStatus,
    Reservation,
    Schedule,
    Seat,
    TokenPair,
    backend_now,
    parse_datetime,
    set_backend_timezone,
)


def test_token_pair_requires_access_token():
    assert TokenPair.from_api({"refreshToken": "r"}) is None
    assert TokenPair.from_api(None) is None
    assert TokenPair.from_api({"accessToken": "a"}) == TokenPair("a", None)


def test_payment_method_labels():
    assert [m.label for m in PaymentMethod] == ["신용카드", "가상계좌", "간편결제"]


def test_schedule_round_label():
    schedule = Schedule.from_api({"performanceScheduleId": 1, "roundNo": 2, "startAt": "2026-06-01T19:30:00"})
    assert schedule.round_label == "2회 19:30"


def test_seat_selectable_only_when_available():
    assert Seat.from_api({"scheduleSeatId": 1, "status": "AVAILABLE"}).is_selectable
    assert not Seat.from_api({"scheduleSeatId": 2, "status": "HOLD"}).is_selectable
    assert not Seat.from_api({"scheduleSeatId": 3}).is_selectable


def test_parse_datetime_accepts_zulu():
    assert parse_datetime("2026-06-01T10:00:00Z").tzinfo is not None
    assert parse_datetime(None) is None


def test_applied_section_never_offers_apply():
    section = PrereservationSection.from_api(
        {"sectionId": 1, "sectionName": "A", "bookingStartAt": "2026-01-01T00:00:00",
         "bookingEndAt": "2027-01-01T00:00:00", "applied": True}
    )
    assert section.can_apply(datetime(2026, 6, 1)) is False


@pytest.fixture
def backend_tz():
    yield
    set_backend_timezone(ZoneInfo(DEFAULT_BACKEND_TIMEZONE))


def test_naive_timestamps_read_as_backend_time():
    parsed = parse_datetime("2026-06-01T19:30:00")

    assert parsed.utcoffset() == timedelta(hours=9)
    assert parsed.hour == 19


def test_zulu_timestamp_converted_to_backend_zone():
    parsed = parse_datetime("2026-06-01T10:00:00Z")

    assert parsed.hour == 19
    assert parsed.tzinfo == ZoneInfo("Asia/Seoul")


def test_window_open_for_utc_clock_inside_backend_window():
    # 03:00 UTC is noon in Seoul.
    section = PrereservationSection.from_api(
        {"sectionId": 1, "sectionName": "A", "bookingStartAt": "2026-05-01T11:30:00",
         "bookingEndAt": "2026-05-01T12:30:00"}
    )
    utc_noon_kst = datetime(2026, 5, 1, 3, 0, tzinfo=timezone.utc)

    assert section.apply_state(utc_noon_kst) == ApplyState.OPEN
    assert section.apply_state(utc_noon_kst + timedelta(hours=1)) == ApplyState.CLOSED


def test_window_around_backend_now_is_open():
    now = backend_now()
    wall_clock = now.replace(tzinfo=None)
    section = PrereservationSection(1, "A", wall_clock - timedelta(minutes=5), wall_clock + timedelta(minutes=5))

    assert section.apply_state() == ApplyState.OPEN


def test_mixed_naive_and_aware_bounds_compare():
    section = PrereservationSection(
        1, "A", datetime(2026, 5, 1, 11, 0), datetime(2026, 5, 1, 4, 0, tzinfo=timezone.utc)
    )

    assert section.apply_state(datetime(2026, 5, 1, 12, 0)) == ApplyState.OPEN
    assert section.apply_state(datetime(2026, 5, 1, 13, 30)) == ApplyState.CLOSED


def test_backend_timezone_is_configurable(backend_tz):
    set_backend_timezone(timezone.utc)

    assert parse_datetime("2026-06-01T19:30:00").utcoffset() == timedelta(0)
    assert backend_now().utcoffset() == timedelta(0)


def test_queue_position_reads_nested_entry():
    position = QueuePosition.from_api({"queueId": 7, "entry": {"status": "WAITING", "aheadCount": 12, "myRank": 13}})

    assert position.queue_id == 7
    assert position.is_waiting
    assert position.ahead_count == 12


def test_queue_position_without_status_is_not_in_queue():
    position = QueuePosition.from_api({})

    assert position.queue_id is None
    assert position.status == QueueStatus.NOT_IN_QUEUE.value
    assert not position.is_waiting and not position.is_enterable


def test_reservation_requires_id():
    assert Reservation.from_api({"status": "PENDING"}) is None
    assert Reservation.from_api({"prereservationBookingId": 4}, id_key="prereservationBookingId").reservation_id == 4
