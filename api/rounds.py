"""
Round API Endpoints

Picks, results and corrections for one round:
1. list / create / change / remove picks while the round is open
2. auto-assign picks for anyone who has not picked
3. save results (closes the round and eliminates)
4. reopen a closed round

All business logic lives in RoundManager.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas import (
    AutoAssignResponse,
    CreatedResponse,
    PickCreate,
    PickResponse,
    PickUpdate,
    ReopenResponse,
    SaveResultsRequest,
    SaveResultsResponse,
    SuccessResponse,
    TeamResponse,
)
from core.auth import get_manager_email
from core.round_manager import RoundManager
from core.exceptions import (
    DuplicatePick,
    InvalidResult,
    InvalidStateTransition,
    ParticipantNotActive,
    ParticipantNotFound,
    PickNotFound,
    RoundNotFound,
    TeamAlreadyUsed,
    TeamNotFound,
)

router = APIRouter(prefix="/api", tags=["rounds"])
logger = logging.getLogger(__name__)


@router.get("/rounds/{round_id}/picks", response_model=List[PickResponse])
def list_picks(
    round_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        return RoundManager.list_picks(db, round_id, manager_email)

    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    except Exception as e:
        logger.error(f"Failed to list picks: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/rounds/{round_id}/picks", response_model=CreatedResponse)
def create_pick(
    round_id: int,
    pick_data: PickCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """
    Record a participant's pick.

    A player picks once per round and never the same team twice in a game.
    """
    try:
        pick = RoundManager.create_pick(
            db, round_id, manager_email, pick_data.player_name, pick_data.team_id
        )
        return CreatedResponse(id=pick.id)

    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    except (ParticipantNotFound, TeamNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidStateTransition, ParticipantNotActive) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (DuplicatePick, TeamAlreadyUsed) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create pick: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.put("/picks/{pick_id}", response_model=SuccessResponse)
def update_pick(
    pick_id: int,
    pick_data: PickUpdate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        RoundManager.update_pick(db, pick_id, manager_email, pick_data.team_id)
        return SuccessResponse()

    except (PickNotFound, TeamNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TeamAlreadyUsed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update pick: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.delete("/picks/{pick_id}", response_model=SuccessResponse)
def delete_pick(
    pick_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        RoundManager.delete_pick(db, pick_id, manager_email)
        return SuccessResponse()

    except PickNotFound:
        raise HTTPException(status_code=404, detail="Pick not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete pick: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/rounds/{round_id}/auto-assign", response_model=AutoAssignResponse)
def auto_assign_picks(
    round_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """Strongest unused team for every active participant without a pick."""
    try:
        picks = RoundManager.auto_assign_picks(db, round_id, manager_email)
        return AutoAssignResponse(assigned=[PickResponse.model_validate(p) for p in picks])

    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to auto-assign picks: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.get("/rounds/{round_id}/available-teams", response_model=List[TeamResponse])
def get_available_teams(
    round_id: int,
    player_name: str = Query(..., alias="playerName"),
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        return RoundManager.available_teams(db, round_id, manager_email, player_name)

    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    except Exception as e:
        logger.error(f"Failed to query available teams: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.get("/rounds/{round_id}/available-players", response_model=List[str])
def get_available_players(
    round_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    try:
        return RoundManager.available_players(db, round_id, manager_email)

    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    except Exception as e:
        logger.error(f"Failed to query available players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/rounds/{round_id}/results", response_model=SaveResultsResponse)
def save_results(
    round_id: int,
    results_data: SaveResultsRequest,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """
    Save per-pick results and close the round.

    loss / draw eliminate; postponed eliminates unless the game counts
    postponements as wins. Call /games/{id}/advance afterwards.
    """
    try:
        outcome = RoundManager.save_results(
            db,
            round_id,
            manager_email,
            [{"pick_id": r.pick_id, "result": r.result} for r in results_data.results],
        )
        return SaveResultsResponse(**outcome)

    except (RoundNotFound, PickNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidStateTransition, InvalidResult) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to save results for round {round_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/rounds/{round_id}/reopen", response_model=ReopenResponse)
def reopen_round(
    round_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    """
    Reopen a closed round for correction.

    Reinstates everyone eliminated in it and clears its results.
    """
    try:
        return ReopenResponse(**RoundManager.reopen_round(db, round_id, manager_email))

    except RoundNotFound:
        raise HTTPException(status_code=404, detail="Round not found")
    except InvalidStateTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to reopen round {round_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")
