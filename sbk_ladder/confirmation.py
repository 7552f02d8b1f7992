import logging
import threading
from enum import Enum
from typing import Callable, Optional

from . import config

logger = logging.getLogger("ConfirmationTimer")


class ConfirmationState(str, Enum):
    READY = "ready"
    PENDING = "pending"


class ConfirmationTimer:
    """
    Double-tap gate for the WIN action.

    The first tap arms a pending confirmation for one ladder and starts an
    expiry timer; a second tap for the same ladder before expiry confirms.
    Only one confirmation (and one live timer) exists at a time. Timers that
    fire after a confirm or reset are ignored via a generation counter.
    """

    def __init__(
        self,
        timeout_ms: int = config.WIN_TIMEOUT_MS,
        on_expire: Optional[Callable[[str], None]] = None,
        timer_factory=threading.Timer,
    ):
        self.timeout_ms = timeout_ms
        self.on_expire = on_expire
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._state = ConfirmationState.READY
        self._ladder_id = None
        self._timer = None
        self._generation = 0

    @property
    def state(self) -> ConfirmationState:
        return self._state

    @property
    def ladder_id(self) -> Optional[str]:
        return self._ladder_id

    @property
    def is_pending(self) -> bool:
        return self._state == ConfirmationState.PENDING

    def tap(self, ladder_id: str) -> bool:
        """
        Register a WIN tap.

        Returns:
            True when this tap confirms a pending WIN for the same ladder,
            False when it only armed a new confirmation.
        """
        with self._lock:
            if self._state == ConfirmationState.PENDING and self._ladder_id == ladder_id:
                self._clear_locked()
                return True

            self._clear_locked()
            self._state = ConfirmationState.PENDING
            self._ladder_id = ladder_id
            self._timer = self._timer_factory(self.timeout_ms / 1000, self._expire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()
            return False

    def reset(self):
        """Drop any pending confirmation and cancel its expiry."""
        with self._lock:
            self._clear_locked()

    def close(self):
        self.reset()

    def _clear_locked(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1
        self._state = ConfirmationState.READY
        self._ladder_id = None

    def _expire(self, generation: int):
        with self._lock:
            if generation != self._generation or self._state != ConfirmationState.PENDING:
                return
            ladder_id = self._ladder_id
            self._timer = None
            self._generation += 1
            self._state = ConfirmationState.READY
            self._ladder_id = None

        logger.info(f"WIN confirmation expired for ladder {ladder_id}")
        if self.on_expire:
            self.on_expire(ladder_id)
