"""Waiting queue in front of the direct-booking seat map."""

import logging
from typing import Optional

from infrastructure.http.booking_api_client import ApiError, BookingApiClient
from services import queue_service
from use_cases.domain_models import QueuePosition, QueueStatus
from use_cases.error_policy import user_message
from use_cases.terminal_guard import TerminalGuard

log = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 3.0

QUEUE_STATUS_MESSAGES = {
    QueueStatus.EXPIRED.value: "입장 권한이 만료되었습니다.",
    QueueStatus.COMPLETED.value: "이미 입장이 완료되었습니다.",
    QueueStatus.NOT_IN_QUEUE.value: "대기열에 등록되지 않았습니다.",
}


class BookingQueue:
    """
    One user's place in a schedule's booking queue.

    `start` registers once; `poll` refreshes the position until the backend
    reports ENTERABLE, at which point `booking_path` leads to the seat map.
    Terminal queue states surface as `error` and stop polling.
    """

    def __init__(self, client: BookingApiClient, schedule_id: int):
        self.client = client
        self.schedule_id = schedule_id
        self.position: Optional[QueuePosition] = None
        self.error: Optional[str] = None
        self.poll_count = 0
        self._start_guard = TerminalGuard()
        self._exit_guard = TerminalGuard(retry_on_failure=False)

    @property
    def queue_id(self) -> Optional[int]:
        return self.position.queue_id if self.position else None

    @property
    def is_enterable(self) -> bool:
        return self.position is not None and self.position.is_enterable

    @property
    def should_poll(self) -> bool:
        return self.error is None and self.position is not None and self.position.is_waiting

    @property
    def booking_path(self) -> str:
        path = f"/booking?scheduleId={self.schedule_id}"
        return path if self.queue_id is None else f"{path}&queueId={self.queue_id}"

    def _apply(self, position: QueuePosition) -> None:
        self.position = position
        self.error = QUEUE_STATUS_MESSAGES.get(position.status)

    def start(self) -> bool:
        if self.position is not None:
            return True
        try:
            run = self._start_guard.run(lambda: queue_service.start_booking(self.client, self.schedule_id))
        except ApiError as e:
            log.warning(f"⚠️ Could not join queue for schedule {self.schedule_id}: {e.message}")
            self.error = user_message("queue", e)
            return False
        if not run.executed:
            return False
        self._apply(run.value)
        log.info(f"Joined queue {self.queue_id} for schedule {self.schedule_id} ({self.position.status})")
        return True

    def poll(self) -> Optional[QueuePosition]:
        if self.queue_id is None:
            return None
        self.poll_count += 1
        try:
            position = queue_service.get_position(self.client, self.queue_id)
        except ApiError as e:
            log.warning(f"⚠️ Queue {self.queue_id} position lookup failed: {e.message}")
            self.error = user_message("queue", e)
            return None
        self._apply(position)
        return position

    def exit(self) -> None:
        """Leave the queue. Failures are logged; the user leaves regardless."""
        if self.queue_id is None:
            return
        try:
            self._exit_guard.run(lambda: queue_service.exit_queue(self.client, self.queue_id))
        except ApiError as e:
            log.warning(f"⚠️ Leaving queue {self.queue_id} failed: {e.message}")
