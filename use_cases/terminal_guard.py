"""One-shot execution guard for terminal actions."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class GuardState(str, Enum):
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class GuardRun:
    executed: bool
    value: Any = None


class TerminalGuard:
    """
    Idle -> Processing -> Done | Failed.

    A call while Processing or after Done is suppressed. Failed may be
    re-entered by a deliberate retry unless the guard is a latch
    (`retry_on_failure=False`), in which case a failure is final as well.
    """

    def __init__(self, retry_on_failure: bool = True):
        self.retry_on_failure = retry_on_failure
        self.state = GuardState.IDLE

    @property
    def can_enter(self) -> bool:
        if self.state == GuardState.IDLE:
            return True
        return self.state == GuardState.FAILED and self.retry_on_failure

    @property
    def is_processing(self) -> bool:
        return self.state == GuardState.PROCESSING

    @property
    def is_done(self) -> bool:
        return self.state == GuardState.DONE

    def run(self, action: Callable[[], Any]) -> GuardRun:
        if not self.can_enter:
            return GuardRun(executed=False)
        self.state = GuardState.PROCESSING
        try:
            value = action()
        except BaseException:
            self.state = GuardState.FAILED if self.retry_on_failure else GuardState.DONE
            raise
        self.state = GuardState.DONE
        return GuardRun(executed=True, value=value)
