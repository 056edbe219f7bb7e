"""
Round advancement decision.

Pure calculation: given who is still active and who went out in the round
that just closed, decide what "advance" should do. Applying the decision to
the database is GameManager's job.
"""
import enum
from dataclasses import dataclass, field
from typing import List

from models import RolloverMode, WinnerMode


class AdvanceAction(str, enum.Enum):
    COMPLETE = "complete"
    NEXT_ROUND = "next_round"
    ROLLOVER_ROUND = "rollover_round"
    ROLLOVER_GAME = "rollover_game"
    STALLED = "stalled"  # nobody active and nobody to restore


@dataclass
class AdvanceDecision:
    action: AdvanceAction
    winners: List[str] = field(default_factory=list)
    restore_winners: bool = False  # joint winners were eliminated together


def decide_advancement(
    active_names: List[str],
    eliminated_this_round: List[str],
    winner_mode: WinnerMode,
    rollover_mode: RolloverMode,
    max_winners: int = 1,
) -> AdvanceDecision:
    """
    Single-winner mode:
        1 active           -> COMPLETE with that participant
        0 active           -> rollover
        more than 1 active -> NEXT_ROUND

    Multiple-winner mode (M = max_winners):
        1..M active                         -> COMPLETE with all active
        0 active, 1..M went out this round  -> COMPLETE, those are joint winners
        0 active otherwise                  -> rollover
        more than M active                  -> NEXT_ROUND

    Rollover is ROLLOVER_ROUND or ROLLOVER_GAME by rollover_mode. A round
    rollover with nobody eliminated this round has nobody to restore and
    yields STALLED.
    """
    active = sorted(active_names)
    eliminated = sorted(eliminated_this_round)
    limit = max(1, max_winners) if winner_mode == WinnerMode.MULTIPLE else 1

    if 1 <= len(active) <= limit:
        return AdvanceDecision(AdvanceAction.COMPLETE, winners=active)

    if len(active) > limit:
        return AdvanceDecision(AdvanceAction.NEXT_ROUND)

    # nobody left standing
    if winner_mode == WinnerMode.MULTIPLE and 1 <= len(eliminated) <= limit:
        return AdvanceDecision(
            AdvanceAction.COMPLETE, winners=eliminated, restore_winners=True
        )

    if rollover_mode == RolloverMode.GAME:
        return AdvanceDecision(AdvanceAction.ROLLOVER_GAME)

    if not eliminated:
        return AdvanceDecision(AdvanceAction.STALLED)

    return AdvanceDecision(AdvanceAction.ROLLOVER_ROUND)
