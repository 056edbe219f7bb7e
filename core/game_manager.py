"""
Game Manager: lifecycle of a managed elimination game

Responsibilities:
1. Create a game (participants + round 1)
2. Look up games, always scoped to the owning manager
3. Advance a game after a round closes (win / rollover / next round)
4. Declare winners manually, add late participants, delete games
"""
from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Tuple
import logging

from models import (
    Game,
    GameStatus,
    Group,
    Participant,
    Round,
    RoundStatus,
    RolloverMode,
    WinnerMode,
)
from core.state_machine import GameStateMachine
from core.locks import with_game_lock
from core.exceptions import (
    DuplicateName,
    GameNotFound,
    GroupNotFound,
    InvalidGameSetup,
    InvalidStateTransition,
    NoActiveParticipants,
)
from services.advancement_service import AdvanceAction, decide_advancement
from database import transactional

logger = logging.getLogger(__name__)


def _clean_names(names: List[str]) -> List[str]:
    seen = set()
    cleaned = []
    for name in names:
        name = (name or "").strip()
        if name and name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


class GameManager:
    """Managed game lifecycle"""

    @staticmethod
    def get_game(db: Session, game_id: int, manager_email: str) -> Game:
        """
        Fetch a game owned by manager_email.

        A game owned by someone else is reported as missing, never as
        forbidden, so its existence does not leak.
        """
        game = db.query(Game).filter(Game.id == game_id).first()
        if not game or game.manager_email != manager_email:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def _get_locked_game(db: Session, game_id: int, manager_email: str) -> Game:
        game = with_game_lock(game_id, db).first()
        if not game or game.manager_email != manager_email:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def latest_round(db: Session, game_id: int) -> Optional[Round]:
        return db.query(Round).filter(
            Round.game_id == game_id
        ).order_by(Round.round_number.desc()).first()

    @staticmethod
    def list_games(db: Session, manager_email: str) -> List[Tuple[Game, Dict]]:
        """Manager's games, newest first, each with a few counters."""
        games = db.query(Game).filter(
            Game.manager_email == manager_email
        ).order_by(Game.created_at.desc(), Game.id.desc()).all()

        summaries = []
        for game in games:
            latest = GameManager.latest_round(db, game.id)
            summaries.append((game, {
                "group_name": game.group.name if game.group else None,
                "participant_count": len(game.participants),
                "active_count": sum(1 for p in game.participants if p.is_active),
                "current_round": latest.round_number if latest else 0,
            }))
        return summaries

    @staticmethod
    @transactional
    def create_game(
        db: Session,
        manager_email: str,
        name: str,
        group_id: int,
        player_names: List[str],
        winner_mode: WinnerMode = WinnerMode.SINGLE,
        rollover_mode: RolloverMode = RolloverMode.ROUND,
        max_winners: int = 1,
        postpone_as_win: bool = False,
    ) -> Game:
        """
        Create a game, its participants and an open round 1.

        Raises:
            GroupNotFound: group missing or owned by another manager
            InvalidGameSetup: blank name, no players or max_winners < 1
        """
        name = (name or "").strip()
        if not name:
            raise InvalidGameSetup("Game name required")

        names = _clean_names(player_names)
        if not names:
            raise InvalidGameSetup("At least one player is required")

        if max_winners < 1:
            raise InvalidGameSetup("maxWinners must be at least 1")

        group = db.query(Group).filter(
            Group.id == group_id,
            Group.manager_email == manager_email
        ).first()
        if not group:
            raise GroupNotFound(group_id)

        game = Game(
            manager_email=manager_email,
            name=name,
            group_id=group.id,
            status=GameStatus.ACTIVE,
            winner_mode=winner_mode,
            rollover_mode=rollover_mode,
            max_winners=max_winners if winner_mode == WinnerMode.MULTIPLE else 1,
            postpone_as_win=postpone_as_win,
            winner_names=[],
        )
        db.add(game)
        db.flush()

        for player_name in names:
            game.participants.append(Participant(player_name=player_name, is_active=True))
        game.rounds.append(Round(round_number=1, status=RoundStatus.OPEN))

        logger.info(
            f"Created game {game.id} '{name}' for {manager_email} with {len(names)} players "
            f"(winner_mode={game.winner_mode.value}, rollover_mode={game.rollover_mode.value})"
        )
        return game

    @staticmethod
    @transactional
    def delete_game(db: Session, game_id: int, manager_email: str) -> None:
        game = GameManager.get_game(db, game_id, manager_email)
        db.delete(game)
        logger.info(f"Deleted game {game_id}")

    @staticmethod
    @transactional
    def add_participant(db: Session, game_id: int, manager_email: str, player_name: str) -> Participant:
        """Add an entrant to a game that is still running."""
        game = GameManager._get_locked_game(db, game_id, manager_email)
        if game.status != GameStatus.ACTIVE:
            raise InvalidStateTransition("Cannot add participants to a completed game")

        player_name = (player_name or "").strip()
        if not player_name:
            raise InvalidGameSetup("Player name required")
        if any(p.player_name == player_name for p in game.participants):
            raise DuplicateName(f"{player_name} is already in this game")

        participant = Participant(player_name=player_name, is_active=True)
        game.participants.append(participant)
        db.flush()

        logger.info(f"Added participant {player_name} to game {game_id}")
        return participant

    @staticmethod
    def _complete(game: Game, winners: List[str]) -> None:
        GameStateMachine.transition(game, GameStatus.COMPLETED)
        game.winner_names = list(winners)
        logger.info(f"Game {game.id} completed, winners: {', '.join(winners)}")

    @staticmethod
    @transactional
    def declare_winner(db: Session, game_id: int, manager_email: str) -> List[str]:
        """
        End the game now; everyone still active shares the win.

        Raises:
            NoActiveParticipants: nobody is left to declare
        """
        game = GameManager._get_locked_game(db, game_id, manager_email)
        winners = sorted(p.player_name for p in game.participants if p.is_active)
        if not winners:
            raise NoActiveParticipants("No active players to declare as winners")

        GameManager._complete(game, winners)
        return winners

    @staticmethod
    @transactional
    def advance_game(db: Session, game_id: int, manager_email: str) -> Dict:
        """
        Run the round advancement engine once.

        Preconditions:
        - game exists and belongs to manager_email
        - no round of the game is open

        Outcomes:
        - winner(s) found: game COMPLETED, winner names recorded
        - everyone out, rollover "round": this round's eliminations undone,
          next round opened
        - everyone out, rollover "game": all participants back in, every
          round and pick deleted, round 1 reopened
        - otherwise: next round opened

        A completed game is returned as-is without any change.

        Returns:
            dict with status, winner_name, winner_names, round_number, rolled_over
        """
        game = GameManager._get_locked_game(db, game_id, manager_email)

        if game.status == GameStatus.COMPLETED:
            logger.info(f"Advance called on completed game {game_id}; nothing to do")
            return {
                "status": game.status,
                "winner_name": game.winner_name,
                "winner_names": list(game.winner_names or []),
            }

        latest = GameManager.latest_round(db, game_id)
        if latest is None:
            game.rounds.append(Round(round_number=1, status=RoundStatus.OPEN))
            logger.warning(f"Game {game_id} had no rounds; opened round 1")
            return {"status": game.status, "round_number": 1}

        still_open = db.query(Round).filter(
            Round.game_id == game_id,
            Round.status == RoundStatus.OPEN
        ).order_by(Round.round_number).first()
        if still_open:
            raise InvalidStateTransition(
                f"Round {still_open.round_number} is still open; save its results first"
            )

        active_names = [p.player_name for p in game.participants if p.is_active]
        eliminated = [
            p for p in game.participants
            if not p.is_active and p.eliminated_in_round == latest.round_number
        ]

        decision = decide_advancement(
            active_names,
            [p.player_name for p in eliminated],
            game.winner_mode,
            game.rollover_mode,
            game.max_winners,
        )
        logger.info(
            f"Advancing game {game_id} after round {latest.round_number}: "
            f"{len(active_names)} active, {len(eliminated)} eliminated -> {decision.action.value}"
        )

        if decision.action == AdvanceAction.COMPLETE:
            if decision.restore_winners:
                for participant in eliminated:
                    participant.reinstate()
            GameManager._complete(game, decision.winners)
            return {
                "status": game.status,
                "winner_name": game.winner_name,
                "winner_names": list(game.winner_names),
            }

        if decision.action == AdvanceAction.STALLED:
            raise NoActiveParticipants(
                f"No active participants and nobody eliminated in round {latest.round_number}"
            )

        if decision.action == AdvanceAction.ROLLOVER_GAME:
            for participant in game.participants:
                participant.reinstate()
            game.rounds.clear()
            db.flush()
            game.rounds.append(Round(round_number=1, status=RoundStatus.OPEN))
            logger.info(f"Game {game_id} rolled over: restarted at round 1")
            return {"status": game.status, "round_number": 1, "rolled_over": True}

        rolled_over = decision.action == AdvanceAction.ROLLOVER_ROUND
        if rolled_over:
            for participant in eliminated:
                participant.reinstate()
            logger.info(
                f"Game {game_id} rolled over round {latest.round_number}: "
                f"reinstated {len(eliminated)} participants"
            )

        next_number = latest.round_number + 1
        game.rounds.append(Round(round_number=next_number, status=RoundStatus.OPEN))
        logger.info(f"Game {game_id}: opened round {next_number}")
        return {"status": game.status, "round_number": next_number, "rolled_over": rolled_over}
