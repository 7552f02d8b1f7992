from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LadderStatus(str, Enum):
    ACTIVE = "ACTIVE"
    GOAL_REACHED = "GOAL_REACHED"


class Step(BaseModel):
    """One projected wager (a 'day') of a ladder."""
    day_number: int = Field(..., ge=1)
    stake: float
    profit: float
    next_balance: float
    is_goal_day: bool = False

    model_config = ConfigDict(frozen=True, from_attributes=True)


class Ladder(BaseModel):
    """
    Persisted ladder document.

    The projected path (ladder_steps) and the creation inputs never change;
    only current_amount, current_step_index and last_updated move.
    """
    id: str
    name: str = Field(..., min_length=1)
    start_stake: float = Field(..., gt=0)
    goal_amount: float
    odds: str
    ladder_steps: tuple[Step, ...]
    current_amount: float
    current_step_index: int = Field(default=0, ge=0)
    last_updated: datetime
    created_at: datetime

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def total_steps(self) -> int:
        return len(self.ladder_steps)
