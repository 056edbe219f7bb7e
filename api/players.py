"""
Player pool API Endpoints

The manager's reusable list of player names, offered when creating games.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from models import Player
from schemas import CreatedResponse, PlayerCreate, PlayerResponse
from core.auth import get_manager_email

router = APIRouter(prefix="/api/players", tags=["players"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[PlayerResponse])
def list_players(
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    return db.query(Player).filter(
        Player.manager_email == manager_email
    ).order_by(Player.name).all()


@router.post("", response_model=CreatedResponse)
def create_player(
    player_data: PlayerCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    name = player_data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Player name required")

    try:
        player = Player(manager_email=manager_email, name=name)
        db.add(player)
        db.commit()
        db.refresh(player)

        logger.info(f"Player {player.id} ({name}) added for {manager_email}")
        return CreatedResponse(id=player.id)

    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Player name already exists")
    except Exception as e:
        logger.error(f"Failed to create player: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create player")


@router.delete("/{player_id}", status_code=204)
def delete_player(
    player_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    player = db.query(Player).filter(
        Player.id == player_id,
        Player.manager_email == manager_email
    ).first()
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")

    try:
        db.delete(player)
        db.commit()
        logger.info(f"Player {player_id} deleted")
    except Exception as e:
        logger.error(f"Failed to delete player: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete player")
