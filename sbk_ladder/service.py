import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import BaseModel

from . import config
from .confirmation import ConfirmationState, ConfirmationTimer
from .errors import (
    AlreadyCompleteError,
    ConfirmationRequiredError,
    LadderBusyError,
    LadderError,
    LadderNotFoundError,
    PersistenceError,
)
from .models import Ladder, LadderStatus
from .projector import create_ladder
from .state_machine import apply_loss, apply_win, ladder_status
from .storage import LadderStore, build_store

logger = logging.getLogger("LadderService")


@dataclass
class LadderEvent:
    """Change notification handed to subscribers."""
    kind: str  # created, updated, deleted, selected, win_pending, win_expired, delete_pending, message
    ladder_id: Optional[str]
    message: str


class WinTapResult(BaseModel):
    confirmed: bool
    state: ConfirmationState
    ladder: Ladder
    message: str


class ServiceStatus(BaseModel):
    message: str
    selected_ladder_id: Optional[str] = None
    win_state: ConfirmationState
    delete_pending: bool
    saving: bool


class LadderService:
    """
    Owner of all ladder state for one presentation session.

    Holds the selected ladder, the WIN double-tap gate, the two-step delete
    flag and the status message. Ladders themselves live only in the store:
    every mutation reads the stored ladder, applies a transition and writes it
    back before reporting success, so a failed write leaves the stored state
    as it was. A non-blocking 'saving' lock rejects a second mutation while
    one is in flight.
    """

    def __init__(
        self,
        store: LadderStore,
        timeout_ms: int = config.WIN_TIMEOUT_MS,
        max_steps: int = config.MAX_LADDER_STEPS,
        timer_factory=threading.Timer,
    ):
        self.store = store
        self.max_steps = max_steps
        self.selected_ladder_id = None
        self.delete_pending = False
        self.message = "Ready!"
        self._saving = threading.Lock()
        self._listeners = []
        self.win_confirmation = ConfirmationTimer(
            timeout_ms=timeout_ms,
            on_expire=self._on_win_expired,
            timer_factory=timer_factory
        )

        try:
            ladders = self.store.list()
        except PersistenceError as e:
            logger.error(f"Load error: {e}")
            self.message = "Load error."
            ladders = []

        if ladders:
            self.selected_ladder_id = ladders[0].id
        logger.info(f"LadderService initialized with {len(ladders)} ladder(s)")

    # ----------------------------------------------------------------
    # Observers
    # ----------------------------------------------------------------
    def subscribe(self, listener: Callable[[LadderEvent], None]) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: str, ladder_id: Optional[str] = None):
        event = LadderEvent(kind=kind, ladder_id=ladder_id, message=self.message)
        for listener in list(self._listeners):
            listener(event)

    def _set_message(self, message: str):
        self.message = message
        self._notify("message", self.selected_ladder_id)

    @contextmanager
    def _reporting(self):
        """Turn ladder errors into the status message."""
        try:
            yield
        except LadderError as e:
            self._set_message(str(e))
            raise

    @contextmanager
    def _operation(self):
        """Serialize mutations and turn errors into the status message."""
        if not self._saving.acquire(blocking=False):
            self._set_message(LadderBusyError.message)
            raise LadderBusyError()
        try:
            with self._reporting():
                yield
        finally:
            self._saving.release()

    @property
    def is_saving(self) -> bool:
        return self._saving.locked()

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------
    def list_ladders(self) -> list[Ladder]:
        return self.store.list()

    def get_ladder(self, ladder_id: str) -> Ladder:
        ladder = self.store.get(ladder_id)
        if ladder is None:
            raise LadderNotFoundError(ladder_id)
        return ladder

    def active_ladder(self) -> Optional[Ladder]:
        if self.selected_ladder_id is None:
            return None
        return self.store.get(self.selected_ladder_id)

    def _require_active(self) -> Ladder:
        ladder = self.active_ladder()
        if ladder is None:
            raise LadderNotFoundError("No ladder selected.")
        return ladder

    def status(self) -> ServiceStatus:
        return ServiceStatus(
            message=self.message,
            selected_ladder_id=self.selected_ladder_id,
            win_state=self.win_confirmation.state,
            delete_pending=self.delete_pending,
            saving=self.is_saving
        )

    # ----------------------------------------------------------------
    # Selection
    # ----------------------------------------------------------------
    def select_ladder(self, ladder_id: Optional[str]):
        """Switch the displayed ladder; any pending WIN or delete confirmation is dropped."""
        if ladder_id is not None:
            with self._reporting():
                self.get_ladder(ladder_id)

        self._select(ladder_id)
        self._notify("selected", ladder_id)

    def _select(self, ladder_id: Optional[str]):
        self.win_confirmation.reset()
        self.delete_pending = False
        self.selected_ladder_id = ladder_id

    # ----------------------------------------------------------------
    # Mutations
    # ----------------------------------------------------------------
    def create_ladder(self, name: str, start_stake, goal_amount, odds: str) -> Ladder:
        """Validate, project and persist a new ladder, then select it."""
        with self._operation():
            ladder = create_ladder(name, start_stake, goal_amount, odds, max_steps=self.max_steps)
            ladder = self.store.create(ladder)
            self._select(ladder.id)

        logger.info(f"Created ladder {ladder.id} '{ladder.name}' with {ladder.total_steps} steps")
        self.message = f"Created: {ladder.name}"
        self._notify("selected", ladder.id)
        self._notify("created", ladder.id)
        return ladder

    def apply_win(self, ladder_id: str) -> Ladder:
        with self._operation():
            ladder = self.get_ladder(ladder_id)
            updated = self.store.update(apply_win(ladder))

        reached = ladder_status(updated) == LadderStatus.GOAL_REACHED
        self.message = "GOAL REACHED!" if reached else "WIN!"
        self._notify("updated", ladder_id)
        return updated

    def apply_loss(self, ladder_id: str) -> Ladder:
        with self._operation():
            ladder = self.get_ladder(ladder_id)
            updated = self.store.update(apply_loss(ladder))

        self.message = "LOSS - Reset"
        self._notify("updated", ladder_id)
        return updated

    def tap_win(self) -> WinTapResult:
        """
        Double-tap WIN on the selected ladder.

        The first tap only arms the confirmation; the second tap within the
        timeout applies the win.
        """
        with self._reporting():
            ladder = self._require_active()
            if self.is_saving:
                raise LadderBusyError()
            if ladder_status(ladder) == LadderStatus.GOAL_REACHED:
                raise AlreadyCompleteError()

        if not self.win_confirmation.tap(ladder.id):
            self.message = "Tap WIN again to confirm"
            self._notify("win_pending", ladder.id)
            return WinTapResult(confirmed=False, state=self.win_confirmation.state, ladder=ladder, message=self.message)

        updated = self.apply_win(ladder.id)
        return WinTapResult(confirmed=True, state=self.win_confirmation.state, ladder=updated, message=self.message)

    def _on_win_expired(self, ladder_id: str):
        if ladder_id != self.selected_ladder_id:
            return
        self.message = "Expired. Tap Win again."
        self._notify("win_expired", ladder_id)

    def request_delete(self) -> Ladder:
        """First step of deleting the selected ladder."""
        with self._reporting():
            ladder = self._require_active()
        self.win_confirmation.reset()
        self.delete_pending = True
        self.message = f"Delete '{ladder.name}'? Confirm to remove."
        self._notify("delete_pending", ladder.id)
        return ladder

    def cancel_delete(self):
        self.delete_pending = False
        self._set_message("Ready!")

    def confirm_delete(self):
        with self._reporting():
            ladder = self._require_active()
            if not self.delete_pending:
                raise ConfirmationRequiredError("Request delete first.")
        self.delete_ladder(ladder.id)

    def delete_ladder(self, ladder_id: str):
        """Remove a ladder; clears the selection when it pointed at it."""
        with self._operation():
            self.store.delete(ladder_id)

        if self.selected_ladder_id == ladder_id:
            self.win_confirmation.reset()
            self.selected_ladder_id = None
        self.delete_pending = False
        logger.info(f"Deleted ladder {ladder_id}")
        self.message = "Deleted"
        self._notify("deleted", ladder_id)

    def close(self):
        """Teardown: cancel any live confirmation timer and drop listeners."""
        self.win_confirmation.close()
        self._listeners.clear()


# Global Accessor
_service = None
_service_lock = threading.Lock()


def get_ladder_service() -> LadderService:
    global _service
    with _service_lock:
        if _service is None:
            _service = LadderService(build_store())
    return _service
