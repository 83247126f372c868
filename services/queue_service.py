from infrastructure.http.booking_api_client import BookingApiClient
from use_cases.domain_models import QueuePosition


def start_booking(client: BookingApiClient, schedule_id: int) -> QueuePosition:
    data = client.post(f"/queues/start-booking/{schedule_id}", json={})
    return QueuePosition.from_api(data or {})


def get_position(client: BookingApiClient, queue_id: int) -> QueuePosition:
    data = client.get(f"/queues/{queue_id}/position")
    return QueuePosition.from_api(data or {"queueId": queue_id})


def complete(client: BookingApiClient, queue_id: int) -> None:
    client.post(f"/queues/{queue_id}/complete", json={})


def exit_queue(client: BookingApiClient, queue_id: int) -> None:
    client.post(f"/queues/{queue_id}/exit", json={})
