from typing import List, Optional

from infrastructure.http.booking_api_client import BookingApiClient
from use_cases.domain_models import Performance, Schedule, Seat


def _items(data) -> list:
    """List payloads arrive either bare or wrapped in a page object."""
    if data is None:
        return []
    if isinstance(data, dict):
        return data.get("content") or data.get("items") or []
    return list(data)


def list_performances(client: BookingApiClient) -> List[Performance]:
    return [Performance.from_api(item) for item in _items(client.get("/performances"))]


def search_performances(client: BookingApiClient, query: str) -> List[Performance]:
    data = client.get("/performances/search", params={"q": query})
    return [Performance.from_api(item) for item in _items(data)]


def get_performance(client: BookingApiClient, performance_id: int) -> Optional[Performance]:
    data = client.get(f"/performances/{performance_id}")
    return Performance.from_api(data) if data else None


def list_schedules(client: BookingApiClient, performance_id: int) -> List[Schedule]:
    data = client.get(f"/performances/{performance_id}/schedules")
    return [Schedule.from_api(item) for item in _items(data)]


def list_schedule_seats(client: BookingApiClient, schedule_id: int) -> List[Seat]:
    data = client.get(f"/schedules/{schedule_id}/seats")
    return [Seat.from_api(item) for item in _items(data)]
