from unittest.mock import patch

import pytest

from use_cases.booking_flow import SELECTED, SELECTION_LOCKED_MESSAGE, DirectBookingWizard, SeatMap
from use_cases.domain_models import Seat
from use_cases.error_policy import ValidationError


def _seat(seat_id, status="AVAILABLE", section_id=1, section="A", row="1", number=None, price=50000):
    return {
        "scheduleSeatId": seat_id,
        "sectionId": section_id,
        "sectionName": section,
        "rowLabel": row,
        "seatNumber": number if number is not None else seat_id,
        "status": status,
        "price": price,
    }


SEATS = [
    _seat(3, number=3),
    _seat(1, number=1),
    _seat(2, status="SOLD", number=2),
    _seat(4, status="HOLD", row="2", number=1),
    _seat(10, section_id=2, section="B", price=30000, number=1),
]


def test_sold_and_held_seats_never_toggle():
    seat_map = SeatMap(Seat.from_api(s) for s in SEATS)

    assert seat_map.toggle(2) is False
    assert seat_map.toggle(4) is False
    assert seat_map.selected_count == 0
    assert seat_map.display_status(2) == "SOLD"


def test_toggle_selects_and_deselects():
    seat_map = SeatMap(Seat.from_api(s) for s in SEATS)

    seat_map.toggle(1)
    assert seat_map.display_status(1) == SELECTED
    seat_map.toggle(1)
    assert seat_map.display_status(1) == "AVAILABLE"


def test_grouped_by_section_then_row_sorted_by_number():
    layout = SeatMap(Seat.from_api(s) for s in SEATS).grouped()

    assert list(layout) == ["A", "B"]
    assert list(layout["A"]) == ["1", "2"]
    assert [s.seat_number for s in layout["A"]["1"]] == [1, 2, 3]


@pytest.fixture
def wizard(response, user_client):
    wizard = DirectBookingWizard(user_client, schedule_id=7)
    with patch("requests.request", return_value=response(200, {"data": SEATS})):
        wizard.load()
    return wizard


def test_total_price_is_count_times_unit_price(wizard):
    wizard.select_section(1)
    wizard.toggle_seat(1)
    wizard.toggle_seat(3)
    wizard.toggle_seat(2)  # sold

    assert wizard.seat_map.selected_count == 2
    assert wizard.total_price == 2 * 50000


def test_changing_section_resets_selection(wizard):
    wizard.select_section(1)
    wizard.toggle_seat(1)

    wizard.select_section(2)

    assert wizard.seat_map.selected_count == 0
    assert wizard.total_price == 0


def test_cannot_advance_without_seats(wizard):
    wizard.select_section(1)
    assert wizard.next() is True
    assert wizard.current_step == "seats"

    assert wizard.next() is False
    assert wizard.error == "좌석을 선택해주세요."


def test_seat_map_limit_refuses_extra_selection():
    seat_map = SeatMap((Seat.from_api(s) for s in SEATS), limit=1)

    assert seat_map.toggle(1) is True
    assert seat_map.toggle(3) is False
    assert seat_map.selected_ids == [1]


def _booking_routes(response, calls, reservation_status=200, payment_status=200):
    def fake_request(method, url, **kwargs):
        calls.append((method, url, kwargs.get("json")))
        if "/seats/" in url and url.endswith("/hold"):
            return response(200, {"data": {"expiresAt": "2026-05-01T12:05:00"}})
        if url.endswith("/reservations"):
            if reservation_status != 200:
                return response(reservation_status, {"message": "이미 선택된 좌석"})
            return response(200, {"data": {"reservationId": 321, "status": "PENDING"}})
        if url.endswith("/payments"):
            if payment_status != 200:
                return response(payment_status, {"message": "PG 오류"})
            return response(200, {"data": {"paymentId": 99}})
        if url.endswith("/complete"):
            return response(200, {"data": None})
        raise AssertionError(f"unexpected {method} {url}")
    return fake_request


def _pick_two_seats(wizard):
    wizard.select_section(1)
    wizard.next()
    wizard.toggle_seat(1)
    wizard.toggle_seat(3)


def test_entering_payment_holds_seats_then_opens_reservation(wizard, response):
    _pick_two_seats(wizard)
    calls = []

    with patch("requests.request", side_effect=_booking_routes(response, calls)):
        assert wizard.next() is True

    assert wizard.current_step == "payment"
    assert [(m, u) for m, u, _ in calls] == [
        ("POST", "http://api.test/schedules/7/seats/1/hold"),
        ("POST", "http://api.test/schedules/7/seats/3/hold"),
        ("POST", "http://api.test/reservations"),
    ]
    assert calls[-1][2] == {"scheduleId": 7, "seatIds": [1, 3]}
    assert wizard.reservation.reservation_id == 321
    assert wizard.hold_expires_at.hour == 12 and wizard.hold_expires_at.minute == 5


def test_submit_pays_reservation_by_id_once(wizard, response):
    _pick_two_seats(wizard)
    calls = []
    with patch("requests.request", side_effect=_booking_routes(response, calls)):
        wizard.next()
    wizard.select_payment_method("EASY_PAY")

    calls.clear()
    with patch("requests.request", side_effect=_booking_routes(response, calls)):
        assert wizard.submit() is True
        assert wizard.submit() is False

    assert calls == [
        ("POST", "http://api.test/payments", {"domainType": "RESERVATION", "paymentMethod": "EASY_PAY", "domainId": 321}),
    ]
    assert wizard.is_complete
    assert wizard.result.payment_id == 99


def test_payment_releases_queue_slot_once(response, user_client):
    wizard = DirectBookingWizard(user_client, schedule_id=7, queue_id=55)
    with patch("requests.request", return_value=response(200, {"data": SEATS})):
        wizard.load()
    _pick_two_seats(wizard)
    calls = []
    with patch("requests.request", side_effect=_booking_routes(response, calls)):
        wizard.next()
        wizard.select_payment_method("CARD")
        assert wizard.submit() is True
        assert wizard.submit() is False

    completes = [u for _, u, _ in calls if u.endswith("/complete")]
    assert completes == ["http://api.test/queues/55/complete"]


def test_queue_release_failure_keeps_payment_success(response, user_client):
    wizard = DirectBookingWizard(user_client, schedule_id=7, queue_id=55)
    with patch("requests.request", return_value=response(200, {"data": SEATS})):
        wizard.load()
    _pick_two_seats(wizard)
    with patch("requests.request", side_effect=_booking_routes(response, [])):
        wizard.next()
    wizard.select_payment_method("CARD")

    def fail_on_complete(method, url, **kwargs):
        if url.endswith("/complete"):
            return response(500, {"message": "queue down"})
        return response(200, {"data": {"paymentId": 1}})

    with patch("requests.request", side_effect=fail_on_complete):
        assert wizard.submit() is True
    assert wizard.is_complete
    assert wizard.error is None


def test_selection_is_locked_once_reserved(wizard, response):
    _pick_two_seats(wizard)
    with patch("requests.request", side_effect=_booking_routes(response, [])):
        wizard.next()

    assert wizard.toggle_seat(1) is False
    assert wizard.error == SELECTION_LOCKED_MESSAGE
    assert wizard.seat_map.selected_ids == [1, 3]
    with pytest.raises(ValidationError):
        wizard.select_section(2)


def test_failed_reservation_retries_without_rehold(wizard, response):
    _pick_two_seats(wizard)
    calls = []
    with patch("requests.request", side_effect=_booking_routes(response, calls, reservation_status=409)):
        assert wizard.next() is False
    assert wizard.current_step == "seats"
    assert wizard.error == "이미 선택된 좌석입니다. 다른 좌석을 선택해주세요."
    assert wizard.is_submitting is False

    calls.clear()
    with patch("requests.request", side_effect=_booking_routes(response, calls)):
        assert wizard.next() is True
    assert [u for _, u, _ in calls] == ["http://api.test/reservations"]


def test_submit_without_payment_method_is_validation_error(wizard, response):
    _pick_two_seats(wizard)
    with patch("requests.request", side_effect=_booking_routes(response, [])):
        wizard.next()

    with patch("requests.request") as mock_request:
        assert wizard.submit() is False
    mock_request.assert_not_called()
    assert wizard.error == "결제 수단을 선택해주세요."


def test_submit_before_reservation_makes_no_call(wizard):
    wizard.select_section(1)
    wizard.toggle_seat(1)
    wizard.select_payment_method("CARD")

    with patch("requests.request") as mock_request:
        assert wizard.submit() is False
    mock_request.assert_not_called()
    assert wizard.error == "좌석 선점이 완료되지 않았습니다."


def test_failed_payment_can_be_retried(wizard, response):
    _pick_two_seats(wizard)
    with patch("requests.request", side_effect=_booking_routes(response, [])):
        wizard.next()
    wizard.select_payment_method("CARD")

    with patch("requests.request", side_effect=_booking_routes(response, [], payment_status=500)):
        assert wizard.submit() is False
    assert wizard.error == "PG 오류"
    assert wizard.is_submitting is False

    with patch("requests.request", return_value=response(200, {"data": {}})):
        assert wizard.submit() is True
