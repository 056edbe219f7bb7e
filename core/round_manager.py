"""
Round Manager: rounds and picks inside a managed game

Responsibilities:
1. Open the next round
2. Record, change, remove and auto-assign picks while a round is open
3. Close a round with results (eliminations)
4. Reopen a closed round to correct it

All lookups go through the owning game, so another manager's round is
simply "not found".
"""
from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Set
import logging

from models import (
    Game,
    GameStatus,
    Participant,
    Pick,
    Round,
    RoundStatus,
    Team,
)
from core.state_machine import GameStateMachine, RoundStateMachine
from core.locks import with_game_lock, with_round_lock
from core.exceptions import (
    DuplicatePick,
    GameNotFound,
    InvalidStateTransition,
    ParticipantNotActive,
    ParticipantNotFound,
    PickNotFound,
    RoundNotFound,
    TeamAlreadyUsed,
    TeamNotFound,
)
from services.elimination_service import is_eliminated, parse_result
from database import transactional

logger = logging.getLogger(__name__)


class RoundManager:
    """Round and pick lifecycle"""

    # ============ Lookups ============

    @staticmethod
    def get_round(db: Session, round_id: int, manager_email: str) -> Round:
        round_obj = db.query(Round).filter(Round.id == round_id).first()
        if not round_obj or round_obj.game.manager_email != manager_email:
            raise RoundNotFound(round_id)
        return round_obj

    @staticmethod
    def _get_locked_round(db: Session, round_id: int, manager_email: str) -> Round:
        round_obj = with_round_lock(round_id, db).first()
        if not round_obj or round_obj.game.manager_email != manager_email:
            raise RoundNotFound(round_id)
        return round_obj

    @staticmethod
    def get_pick(db: Session, pick_id: int, manager_email: str) -> Pick:
        pick = db.query(Pick).filter(Pick.id == pick_id).first()
        if not pick or pick.round.game.manager_email != manager_email:
            raise PickNotFound(pick_id)
        return pick

    @staticmethod
    def list_rounds(db: Session, game_id: int, manager_email: str) -> List[Round]:
        game = db.query(Game).filter(Game.id == game_id).first()
        if not game or game.manager_email != manager_email:
            raise GameNotFound(game_id)
        return db.query(Round).filter(
            Round.game_id == game_id
        ).order_by(Round.round_number).all()

    @staticmethod
    def list_picks(db: Session, round_id: int, manager_email: str) -> List[Pick]:
        round_obj = RoundManager.get_round(db, round_id, manager_email)
        return db.query(Pick).filter(
            Pick.round_id == round_obj.id
        ).order_by(Pick.player_name).all()

    @staticmethod
    def _require_open(round_obj: Round) -> None:
        if round_obj.game.status != GameStatus.ACTIVE:
            raise InvalidStateTransition(f"Game {round_obj.game_id} is completed")
        if round_obj.status != RoundStatus.OPEN:
            raise InvalidStateTransition(
                f"Round {round_obj.round_number} is closed; reopen it first"
            )

    @staticmethod
    def used_team_ids(
        db: Session, game_id: int, player_name: str, exclude_round_id: Optional[int] = None
    ) -> Set[int]:
        """Teams this player has already picked anywhere in the game."""
        query = db.query(Pick.team_id).filter(
            Pick.game_id == game_id,
            Pick.player_name == player_name,
            Pick.team_id.isnot(None)
        )
        if exclude_round_id is not None:
            query = query.filter(Pick.round_id != exclude_round_id)
        return {team_id for (team_id,) in query.all()}

    @staticmethod
    def _group_teams(db: Session, game: Game) -> List[Team]:
        # strongest first: rank ascending, then name
        return db.query(Team).filter(
            Team.group_id == game.group_id
        ).order_by(Team.rank, Team.name).all()

    @staticmethod
    def available_teams(db: Session, round_id: int, manager_email: str, player_name: str) -> List[Team]:
        round_obj = RoundManager.get_round(db, round_id, manager_email)
        used = RoundManager.used_team_ids(
            db, round_obj.game_id, player_name, exclude_round_id=round_obj.id
        )
        return [t for t in RoundManager._group_teams(db, round_obj.game) if t.id not in used]

    @staticmethod
    def available_players(db: Session, round_id: int, manager_email: str) -> List[str]:
        """Active participants who have not picked in this round yet."""
        round_obj = RoundManager.get_round(db, round_id, manager_email)
        picked = {p.player_name for p in round_obj.picks}
        return sorted(
            p.player_name for p in round_obj.game.participants
            if p.is_active and p.player_name not in picked
        )

    # ============ Rounds ============

    @staticmethod
    @transactional
    def create_round(db: Session, game_id: int, manager_email: str) -> Round:
        """
        Open the next round by hand.

        Refused when the game is completed or a round is still open.
        """
        game = with_game_lock(game_id, db).first()
        if not game or game.manager_email != manager_email:
            raise GameNotFound(game_id)
        if game.status != GameStatus.ACTIVE:
            raise InvalidStateTransition("Game is completed")

        rounds = db.query(Round).filter(Round.game_id == game_id).all()
        if any(r.status == RoundStatus.OPEN for r in rounds):
            raise InvalidStateTransition("Close the open round before starting another")

        next_number = max((r.round_number for r in rounds), default=0) + 1
        round_obj = Round(game_id=game_id, round_number=next_number, status=RoundStatus.OPEN)
        db.add(round_obj)
        db.flush()

        logger.info(f"Game {game_id}: manually opened round {next_number}")
        return round_obj

    # ============ Picks ============

    @staticmethod
    def _check_team(db: Session, round_obj: Round, player_name: str, team_id: int) -> Team:
        team = db.query(Team).filter(Team.id == team_id).first()
        if not team or team.group_id != round_obj.game.group_id:
            raise TeamNotFound(team_id)

        used = RoundManager.used_team_ids(
            db, round_obj.game_id, player_name, exclude_round_id=round_obj.id
        )
        if team.id in used:
            raise TeamAlreadyUsed(f"{player_name} has already picked {team.name}")
        return team

    @staticmethod
    @transactional
    def create_pick(db: Session, round_id: int, manager_email: str, player_name: str, team_id: int) -> Pick:
        """
        Record a participant's pick.

        Raises:
            ParticipantNotFound / ParticipantNotActive: bad player
            DuplicatePick: player already picked this round
            TeamNotFound: team not in the game's group
            TeamAlreadyUsed: player used this team in an earlier round
        """
        round_obj = RoundManager.get_round(db, round_id, manager_email)
        RoundManager._require_open(round_obj)

        player_name = player_name.strip()
        participant = db.query(Participant).filter(
            Participant.game_id == round_obj.game_id,
            Participant.player_name == player_name
        ).first()
        if not participant:
            raise ParticipantNotFound(player_name)
        if not participant.is_active:
            raise ParticipantNotActive(f"{player_name} has been eliminated")

        existing = db.query(Pick).filter(
            Pick.round_id == round_obj.id,
            Pick.player_name == player_name
        ).first()
        if existing:
            raise DuplicatePick(f"Pick already exists for {player_name}")

        team = RoundManager._check_team(db, round_obj, player_name, team_id)

        pick = Pick(
            game_id=round_obj.game_id,
            round_id=round_obj.id,
            player_name=player_name,
            team_id=team.id,
            auto_assigned=False
        )
        db.add(pick)
        db.flush()

        logger.info(f"Round {round_id}: {player_name} picked {team.name}")
        return pick

    @staticmethod
    @transactional
    def update_pick(db: Session, pick_id: int, manager_email: str, team_id: int) -> Pick:
        pick = RoundManager.get_pick(db, pick_id, manager_email)
        RoundManager._require_open(pick.round)

        team = RoundManager._check_team(db, pick.round, pick.player_name, team_id)
        pick.team_id = team.id
        pick.auto_assigned = False
        db.flush()

        logger.info(f"Pick {pick_id}: {pick.player_name} changed to {team.name}")
        return pick

    @staticmethod
    @transactional
    def delete_pick(db: Session, pick_id: int, manager_email: str) -> None:
        pick = RoundManager.get_pick(db, pick_id, manager_email)
        RoundManager._require_open(pick.round)
        db.delete(pick)
        logger.info(f"Deleted pick {pick_id} ({pick.player_name})")

    @staticmethod
    @transactional
    def auto_assign_picks(db: Session, round_id: int, manager_email: str) -> List[Pick]:
        """
        Give every active participant without a pick the strongest team
        they have not used yet in this game.

        Participants who have used every team are left without a pick.
        """
        round_obj = RoundManager._get_locked_round(db, round_id, manager_email)
        RoundManager._require_open(round_obj)

        teams = RoundManager._group_teams(db, round_obj.game)
        picked = {p.player_name for p in round_obj.picks}

        assigned = []
        for participant in sorted(round_obj.game.participants, key=lambda p: p.player_name):
            if not participant.is_active or participant.player_name in picked:
                continue

            used = RoundManager.used_team_ids(
                db, round_obj.game_id, participant.player_name, exclude_round_id=round_obj.id
            )
            team = next((t for t in teams if t.id not in used), None)
            if team is None:
                logger.warning(
                    f"Round {round_id}: no unused team left for {participant.player_name}"
                )
                continue

            pick = Pick(
                game_id=round_obj.game_id,
                round_id=round_obj.id,
                player_name=participant.player_name,
                team_id=team.id,
                auto_assigned=True
            )
            db.add(pick)
            assigned.append(pick)

        db.flush()
        if assigned:
            logger.info(f"Auto-assigned picks for {len(assigned)} player(s) in round {round_id}")
        return assigned

    # ============ Results ============

    @staticmethod
    @transactional
    def save_results(db: Session, round_id: int, manager_email: str, results: List[Dict]) -> Dict:
        """
        Apply results to picks and close the round.

        Elimination rule (see elimination_service):
        - loss / draw -> eliminated
        - postponed   -> eliminated unless the game counts it as a win
        - win         -> survives

        Parameters:
            results: [{"pick_id": int, "result": str}, ...]

        Returns:
            {"round_number": int, "eliminated": [...], "survived": [...]}

        Raises:
            InvalidStateTransition: round already closed or game completed
            PickNotFound: a pick id does not belong to this round
            InvalidResult: unknown result value
        """
        round_obj = RoundManager._get_locked_round(db, round_id, manager_email)
        RoundManager._require_open(round_obj)
        game = round_obj.game

        picks_by_id = {p.id: p for p in round_obj.picks}
        for entry in results:
            pick = picks_by_id.get(entry["pick_id"])
            if pick is None:
                raise PickNotFound(entry["pick_id"])
            pick.result = parse_result(entry["result"])

        participants = {p.player_name: p for p in game.participants}
        eliminated, survived = [], []
        for pick in round_obj.picks:
            if pick.result is None:
                continue
            participant = participants.get(pick.player_name)
            if participant is None or not participant.is_active:
                continue
            if is_eliminated(pick.result, game.postpone_as_win):
                participant.eliminate(round_obj.round_number)
                eliminated.append(pick.player_name)
            else:
                survived.append(pick.player_name)

        RoundStateMachine.transition(round_obj, RoundStatus.CLOSED)

        logger.info(
            f"Game {game.id} round {round_obj.round_number} closed: "
            f"{len(eliminated)} eliminated, {len(survived)} survived"
        )
        return {
            "round_number": round_obj.round_number,
            "eliminated": sorted(eliminated),
            "survived": sorted(survived),
        }

    @staticmethod
    @transactional
    def reopen_round(db: Session, round_id: int, manager_email: str) -> Dict:
        """
        Undo a closed round so its results can be corrected.

        - every participant eliminated in this round is reinstated
        - every pick result in this round is cleared
        - the round goes back to OPEN
        - a game completed on the back of it goes back to ACTIVE

        Reopening while a later round exists is allowed; later rounds are
        left untouched.
        """
        round_obj = RoundManager._get_locked_round(db, round_id, manager_email)
        if round_obj.status != RoundStatus.CLOSED:
            raise InvalidStateTransition(f"Round {round_obj.round_number} is not closed")
        game = round_obj.game

        later = db.query(Round).filter(
            Round.game_id == game.id,
            Round.round_number > round_obj.round_number
        ).count()
        if later:
            logger.warning(
                f"Reopening round {round_obj.round_number} of game {game.id} "
                f"while {later} later round(s) exist"
            )

        reinstated = []
        for participant in game.participants:
            if participant.eliminated_in_round == round_obj.round_number:
                participant.reinstate()
                reinstated.append(participant.player_name)

        for pick in round_obj.picks:
            pick.result = None

        RoundStateMachine.transition(round_obj, RoundStatus.OPEN)

        if game.status == GameStatus.COMPLETED:
            GameStateMachine.transition(game, GameStatus.ACTIVE)
            game.winner_names = []

        logger.info(
            f"Game {game.id} round {round_obj.round_number} reopened: "
            f"reinstated {len(reinstated)} participant(s)"
        )
        return {"round_number": round_obj.round_number, "reinstated": sorted(reinstated)}
