from infrastructure.http.booking_api_client import BookingApiClient


def create_section(client: BookingApiClient, venue_id: int, section_name: str):
    return client.post(f"/admin/venues/{venue_id}/sections", json={"sectionName": section_name})


def create_seat(client: BookingApiClient, venue_id: int, section_id: int, row_label: str, seat_number: int):
    return client.post(
        f"/admin/venues/{venue_id}/seats",
        json={"sectionId": section_id, "rowLabel": row_label, "seatNumber": seat_number},
    )
