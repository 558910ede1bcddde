"""Change notification and the single in-flight operation guard."""
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List

from .models import OperationState
from .utils.exceptions import OperationInProgressError

log = logging.getLogger(__name__)

Listener = Callable[[], None]


class StateNotifier:
    """Base for session objects that views observe."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self) -> None:
        # Copy so a listener may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                log.exception(f"State listener {listener!r} failed: {e}")


class OperationGuard:
    """
    Allows at most one operation at a time.

    Entering `run()` while another operation is outstanding raises
    OperationInProgressError instead of waiting.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = OperationState.IDLE

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state != OperationState.IDLE

    @contextmanager
    def run(self, operation: OperationState) -> Iterator[None]:
        with self._lock:
            if self._state != OperationState.IDLE:
                raise OperationInProgressError(
                    f"Cannot start {operation.value}: {self._state.value} is in progress",
                    details={"requested": operation.value, "current": self._state.value},
                )
            self._state = operation
        log.debug(f"Operation started: {operation.value}")
        try:
            yield
        finally:
            with self._lock:
                self._state = OperationState.IDLE
            log.debug(f"Operation finished: {operation.value}")
