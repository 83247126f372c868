from typing import List

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from use_cases.domain_models import Reservation, SeatHold

MISSING_RESERVATION_MESSAGE = "예매 생성에 실패했습니다."


def hold_seat(client: BookingApiClient, schedule_id: int, seat_id: int) -> SeatHold:
    data = client.post(f"/schedules/{schedule_id}/seats/{seat_id}/hold")
    return SeatHold.from_api(seat_id, data)


def create_reservation(client: BookingApiClient, schedule_id: int, seat_ids: List[int]) -> Reservation:
    """Pending reservation over seats this user already holds."""
    data = client.post("/reservations", json={"scheduleId": schedule_id, "seatIds": list(seat_ids)})
    reservation = Reservation.from_api(data)
    if reservation is None:
        raise ApiError(MISSING_RESERVATION_MESSAGE, error_code="MISSING_RESERVATION")
    return reservation
