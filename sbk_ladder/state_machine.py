"""
Ladder progress state machine.

    ACTIVE --win--> ACTIVE (next step)
    ACTIVE --win on goal day--> GOAL_REACHED
    ACTIVE --loss--> ACTIVE (back to step 0, start stake)

A GOAL_REACHED ladder is frozen: win and loss are both rejected and the
ladder stays as it is until deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from . import config
from .errors import AlreadyCompleteError
from .models import Ladder, LadderStatus, Step

logger = logging.getLogger("LadderStateMachine")


def ladder_status(ladder: Ladder) -> LadderStatus:
    if ladder.current_step_index >= len(ladder.ladder_steps):
        return LadderStatus.GOAL_REACHED
    return LadderStatus.ACTIVE


def next_step(ladder: Ladder) -> Optional[Step]:
    """The step the next WIN would settle, or None once the goal is reached."""
    if ladder_status(ladder) == LadderStatus.GOAL_REACHED:
        return None
    return ladder.ladder_steps[ladder.current_step_index]


def progress(ladder: Ladder) -> float:
    if not ladder.ladder_steps:
        return 0.0
    return min(ladder.current_step_index, len(ladder.ladder_steps)) / len(ladder.ladder_steps)


def cashout_available(ladder: Ladder, limit: float = config.CASHOUT_LIMIT) -> bool:
    """Advisory reminder only; never changes state."""
    return ladder_status(ladder) == LadderStatus.ACTIVE and ladder.current_amount >= limit


def apply_win(ladder: Ladder, now: Optional[datetime] = None) -> Ladder:
    """
    Settle the current step as won.

    Raises:
        AlreadyCompleteError: the ladder already reached its goal
    """
    step = next_step(ladder)
    if step is None:
        raise AlreadyCompleteError()

    new_amount = ladder.goal_amount if step.is_goal_day else step.next_balance
    updated = ladder.model_copy(update={
        "current_amount": new_amount,
        "current_step_index": ladder.current_step_index + 1,
        "last_updated": now or datetime.now(timezone.utc),
    })

    if step.is_goal_day:
        logger.info(f"Ladder {ladder.id}: ACTIVE -> GOAL_REACHED on day {step.day_number}")
    return updated


def apply_loss(ladder: Ladder, now: Optional[datetime] = None) -> Ladder:
    """
    Reset the ladder to its start stake and first step.

    Raises:
        AlreadyCompleteError: the ladder already reached its goal
    """
    if ladder_status(ladder) == LadderStatus.GOAL_REACHED:
        raise AlreadyCompleteError("Completed ladders cannot be reset.")

    return ladder.model_copy(update={
        "current_amount": ladder.start_stake,
        "current_step_index": 0,
        "last_updated": now or datetime.now(timezone.utc),
    })
