"""
Status state machines for games and rounds.

Game:   ACTIVE -> COMPLETED (winner found or declared)
        COMPLETED -> ACTIVE (a deciding round was reopened)
Round:  OPEN -> CLOSED (results saved)
        CLOSED -> OPEN (reopened for correction)

Every status change goes through here so illegal jumps fail loudly.
"""
import logging

from models import Game, GameStatus, Round, RoundStatus
from core.exceptions import InvalidStateTransition

logger = logging.getLogger(__name__)


class GameStateMachine:
    TRANSITIONS = {
        GameStatus.ACTIVE: {GameStatus.COMPLETED},
        GameStatus.COMPLETED: {GameStatus.ACTIVE},
    }

    @classmethod
    def can_transition(cls, current: GameStatus, target: GameStatus) -> bool:
        return target in cls.TRANSITIONS.get(current, set())

    @classmethod
    def transition(cls, game: Game, target: GameStatus) -> Game:
        if not cls.can_transition(game.status, target):
            raise InvalidStateTransition(
                f"Game {game.id} cannot go from {game.status.value} to {target.value}"
            )
        logger.info(f"Game {game.id}: {game.status.value} -> {target.value}")
        game.status = target
        return game


class RoundStateMachine:
    TRANSITIONS = {
        RoundStatus.OPEN: {RoundStatus.CLOSED},
        RoundStatus.CLOSED: {RoundStatus.OPEN},
    }

    @classmethod
    def can_transition(cls, current: RoundStatus, target: RoundStatus) -> bool:
        return target in cls.TRANSITIONS.get(current, set())

    @classmethod
    def transition(cls, round_obj: Round, target: RoundStatus) -> Round:
        if not cls.can_transition(round_obj.status, target):
            raise InvalidStateTransition(
                f"Round {round_obj.round_number} is already {round_obj.status.value}"
            )
        logger.info(
            f"Game {round_obj.game_id} round {round_obj.round_number}: "
            f"{round_obj.status.value} -> {target.value}"
        )
        round_obj.status = target
        return round_obj
