"""
=============================================
LADDER PROJECTOR - Stake Compounding Path
=============================================
Builds the full sequence of steps from a start stake to a goal:
1. Each step risks the whole running balance at fixed odds
2. A win rolls the balance into the next step's stake
3. The first step whose balance meets the goal ends the ladder
"""

import logging
import math
import re
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from . import config
from .errors import ComputationError, LadderValidationError
from .models import Ladder, Step
from .odds import calculate_profit, is_valid_odds

logger = logging.getLogger("LadderProjector")

Amount = Union[str, int, float]


def project_ladder(
    start_stake: float,
    goal_amount: float,
    odds: str,
    max_steps: int = config.MAX_LADDER_STEPS,
) -> list[Step]:
    """
    Project the compounding path from start_stake to goal_amount.

    Returns an empty list when start_stake already meets the goal. When the
    goal is not reached within max_steps the result is cut there and its last
    step is not a goal day.
    """
    steps = []
    current_stake = float(start_stake)
    goal = float(goal_amount)
    day = 1

    while current_stake < goal and day <= max_steps:
        profit = calculate_profit(current_stake, odds)
        next_balance = current_stake + profit
        is_goal_day = next_balance >= goal

        steps.append(Step(
            day_number=day,
            stake=current_stake,
            profit=profit,
            next_balance=next_balance,
            is_goal_day=is_goal_day
        ))

        if is_goal_day:
            break

        current_stake = next_balance
        day += 1

    return steps


def projection_reaches_goal(steps: list[Step]) -> bool:
    return bool(steps) and steps[-1].is_goal_day


def _parse_amount(raw: Amount) -> Optional[float]:
    """Parse a user-typed amount, ignoring currency symbols and separators ('$1,000' -> 1000.0)."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        cleaned = re.sub(r"[^0-9.\-]", "", str(raw))
        try:
            value = float(cleaned)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


def validate_ladder_input(name: str, start_stake: Amount, goal_amount: Amount, odds: str) -> tuple[str, float, float, str]:
    """
    Validate raw form input before any projection runs.

    Returns:
        (name, start_stake, goal_amount, odds) normalized

    Raises:
        LadderValidationError: on the first rule that fails
    """
    clean_name = str(name or "").strip()
    if not clean_name:
        raise LadderValidationError("Ladder name is required.")

    stake = _parse_amount(start_stake)
    if stake is None or stake <= 0:
        raise LadderValidationError("Start stake must be a positive number.")

    goal = _parse_amount(goal_amount)
    if goal is None or goal <= stake:
        raise LadderValidationError("Goal must be greater than the start stake.")

    clean_odds = str(odds or "").strip()
    if not is_valid_odds(clean_odds):
        raise LadderValidationError("Odds must look like +150 or -110.")

    return clean_name, stake, goal, clean_odds


def create_ladder(
    name: str,
    start_stake: Amount,
    goal_amount: Amount,
    odds: str,
    max_steps: int = config.MAX_LADDER_STEPS,
    now: Optional[datetime] = None,
) -> Ladder:
    """
    Validate input, project the path and build a fresh ladder.

    Raises:
        LadderValidationError: bad input (nothing projected)
        ComputationError: the projection is empty or never reaches the goal
    """
    clean_name, stake, goal, clean_odds = validate_ladder_input(name, start_stake, goal_amount, odds)

    steps = project_ladder(stake, goal, clean_odds, max_steps=max_steps)
    if not projection_reaches_goal(steps):
        logger.warning(f"Projection for '{clean_name}' did not converge ({len(steps)} steps, odds {clean_odds})")
        raise ComputationError(f"Goal not reached within {max_steps} steps.")

    timestamp = now or datetime.now(timezone.utc)
    return Ladder(
        id=uuid.uuid4().hex,
        name=clean_name,
        start_stake=stake,
        goal_amount=goal,
        odds=clean_odds,
        ladder_steps=tuple(steps),
        current_amount=stake,
        current_step_index=0,
        last_updated=timestamp,
        created_at=timestamp
    )
