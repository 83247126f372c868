"""Shared shape of the booking wizards."""

import logging
from typing import Any, Optional, Tuple

from infrastructure.http.booking_api_client import ApiError
from use_cases.error_policy import ValidationError, user_message
from use_cases.terminal_guard import TerminalGuard

log = logging.getLogger(__name__)


class StepWizard:
    """
    Ordered steps with exactly one terminal write.

    Subclasses declare `steps`, implement `validate_step` for each step and
    `_submit` for the terminal call. Every transition re-validates all steps
    up to the target, so a draft edited on an earlier step can never reach
    the terminal call half-filled.
    """

    steps: Tuple[str, ...] = ()
    entity = "booking"

    def __init__(self):
        self.step_index = 0
        self.error: Optional[str] = None
        self.is_submitting = False
        self.result: Any = None
        self.guard = TerminalGuard()

    @property
    def current_step(self) -> str:
        return self.steps[self.step_index]

    @property
    def is_complete(self) -> bool:
        return self.guard.is_done

    def validate_step(self, step: str) -> None:
        raise NotImplementedError

    def _submit(self) -> Any:
        raise NotImplementedError

    def _validate_through(self, index: int) -> None:
        for step in self.steps[: index + 1]:
            self.validate_step(step)

    def go_to(self, step: str) -> bool:
        target = self.steps.index(step)
        if self.is_complete:
            return False
        if target > self.step_index:
            try:
                self._validate_through(target - 1)
            except ValidationError as e:
                self.error = str(e)
                return False
        self.step_index = target
        self.error = None
        return True

    def next(self) -> bool:
        if self.step_index + 1 >= len(self.steps):
            return False
        return self.go_to(self.steps[self.step_index + 1])

    def back(self) -> bool:
        if self.step_index == 0:
            return False
        return self.go_to(self.steps[self.step_index - 1])

    def submit(self) -> bool:
        """Run the terminal call once. Returns True only on the successful run."""
        if self.is_submitting or not self.guard.can_enter:
            return False
        try:
            self._validate_through(len(self.steps) - 1)
        except ValidationError as e:
            self.error = str(e)
            return False

        self.is_submitting = True
        self.error = None
        try:
            run = self.guard.run(self._submit)
        except ApiError as e:
            log.warning(f"⚠️ {self.entity} submission failed: {e.message}")
            self.error = user_message(self.entity, e)
            return False
        finally:
            self.is_submitting = False

        self.result = run.value
        log.info(f"✅ {self.entity} submission completed")
        return run.executed
