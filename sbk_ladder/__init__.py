"""
SBK Ladder - Betting Ladder Tracker
===================================
Projects and tracks compounding betting ladders:
1. Converts American odds into per-step profit
2. Projects the stake path from a start stake to a goal
3. Advances or resets progress with a double-tap WIN confirmation
"""

from .confirmation import ConfirmationState, ConfirmationTimer
from .errors import (
    AlreadyCompleteError,
    ComputationError,
    LadderError,
    LadderValidationError,
    PersistenceError
)
from .models import Ladder, LadderStatus, Step
from .odds import calculate_profit, format_currency, is_valid_odds
from .projector import create_ladder, project_ladder
from .service import LadderService, get_ladder_service
from .state_machine import apply_loss, apply_win, cashout_available, ladder_status

__all__ = [
    "calculate_profit",
    "is_valid_odds",
    "format_currency",
    "project_ladder",
    "create_ladder",
    "apply_win",
    "apply_loss",
    "ladder_status",
    "cashout_available",
    "ConfirmationTimer",
    "ConfirmationState",
    "LadderService",
    "get_ladder_service",
    "Ladder",
    "Step",
    "LadderStatus",
    "LadderError",
    "LadderValidationError",
    "ComputationError",
    "AlreadyCompleteError",
    "PersistenceError"
]

__version__ = "1.0.0"
