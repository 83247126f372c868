from typing import List

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from use_cases.domain_models import PrereservationSection, Reservation, SeatHold

MISSING_BOOKING_MESSAGE = "사전 예매 생성에 실패했습니다."


def list_sections(client: BookingApiClient, schedule_id: int) -> List[PrereservationSection]:
    data = client.get(f"/schedules/{schedule_id}/prereservation-sections") or []
    return [PrereservationSection.from_api(item) for item in data]


def apply_section(client: BookingApiClient, schedule_id: int, section_id: int) -> None:
    client.post(f"/schedules/{schedule_id}/prereservation-sections/{section_id}/apply")


def hold_seat(client: BookingApiClient, schedule_id: int, seat_id: int) -> SeatHold:
    data = client.post(f"/prereservations/schedules/{schedule_id}/seats/{seat_id}/hold")
    return SeatHold.from_api(seat_id, data)


def create_booking(client: BookingApiClient, schedule_id: int, seat_id: int) -> Reservation:
    data = client.post(f"/prereservations/schedules/{schedule_id}/seats/{seat_id}/bookings")
    booking = Reservation.from_api(data, id_key="prereservationBookingId")
    if booking is None:
        raise ApiError(MISSING_BOOKING_MESSAGE, error_code="MISSING_RESERVATION")
    return booking
