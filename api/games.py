"""
Game API Endpoints

Responsibilities:
1. Create / list / fetch / delete managed games
2. Add a participant mid-game
3. Advance the game after a round closes
4. Declare winners by hand
5. List rounds and open the next one

Business logic lives in GameManager / RoundManager.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas import (
    AdvanceResponse,
    CreatedResponse,
    CreateRoundResponse,
    GameCreate,
    GameDetailResponse,
    GameResponse,
    GameSummaryResponse,
    ParticipantCreate,
    ParticipantResponse,
    RoundResponse,
    WinnersResponse,
)
from core.auth import get_manager_email
from core.game_manager import GameManager
from core.round_manager import RoundManager
from core.exceptions import (
    DuplicateName,
    GameNotFound,
    GroupNotFound,
    InvalidGameSetup,
    InvalidStateTransition,
    NoActiveParticipants,
)

router = APIRouter(prefix="/api/games", tags=["games"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[GameSummaryResponse])
def list_games(
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        return [
            GameSummaryResponse(**GameResponse.model_validate(game).model_dump(), **stats)
            for game, stats in GameManager.list_games(db, manager_email)
        ]
    except Exception as e:
        logger.error(f"Failed to list games: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch games")


@router.post("", response_model=CreatedResponse)
def create_game(
    game_data: GameCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """
    Create a game from a group and a list of player names.

    Round 1 is opened straight away.
    """
    try:
        game = GameManager.create_game(
            db,
            manager_email,
            game_data.name,
            game_data.group_id,
            game_data.player_names,
            winner_mode=game_data.winner_mode,
            rollover_mode=game_data.rollover_mode,
            max_winners=game_data.max_winners,
            postpone_as_win=game_data.postpone_as_win,
        )
        return CreatedResponse(id=game.id)

    except GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except InvalidGameSetup as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create game")


@router.get("/{game_id}", response_model=GameDetailResponse)
def get_game(
    game_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """Game with its participants and rounds."""
    try:
        game = GameManager.get_game(db, game_id, manager_email)
        return GameDetailResponse(
            game=GameResponse.model_validate(game),
            participants=[ParticipantResponse.model_validate(p) for p in game.participants],
            rounds=[RoundResponse.model_validate(r) for r in game.rounds],
        )

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to get game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch game")


@router.delete("/{game_id}", status_code=204)
def delete_game(
    game_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        GameManager.delete_game(db, game_id, manager_email)

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to delete game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete game")


@router.post("/{game_id}/participants", response_model=ParticipantResponse)
def add_participant(
    game_id: int,
    participant_data: ParticipantCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        return GameManager.add_participant(db, game_id, manager_email, participant_data.player_name)

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except (InvalidGameSetup, InvalidStateTransition) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateName as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to add participant: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add participant")


@router.post("/{game_id}/advance", response_model=AdvanceResponse, response_model_exclude_none=True)
def advance_game(
    game_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """
    Run the round advancement engine.

    Returns {status, winnerName, winnerNames} when the game is won, or
    {status, roundNumber, rolledOver} when another round opens.
    """
    try:
        return AdvanceResponse(**GameManager.advance_game(db, game_id, manager_email))

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except (InvalidStateTransition, NoActiveParticipants) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to advance game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to advance game")


@router.post("/{game_id}/declare-winner", response_model=WinnersResponse)
def declare_winner(
    game_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """Complete the game now; every active participant shares the win."""
    try:
        winners = GameManager.declare_winner(db, game_id, manager_email)
        return WinnersResponse(winners=winners)

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except (InvalidStateTransition, NoActiveParticipants) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to declare winner for game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to declare winner")


@router.get("/{game_id}/rounds", response_model=List[RoundResponse])
def list_rounds(
    game_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        return RoundManager.list_rounds(db, game_id, manager_email)

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to list rounds: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/{game_id}/rounds", response_model=CreateRoundResponse)
def create_round(
    game_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        round_obj = RoundManager.create_round(db, game_id, manager_email)
        return CreateRoundResponse(id=round_obj.id, round_number=round_obj.round_number)

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create round: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")
