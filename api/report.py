"""
Public report endpoint (no authentication, used by embeds).
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import GameReport
from core.exceptions import GameNotFound
from services.report_service import build_game_report

router = APIRouter(prefix="/api/report", tags=["report"])
logger = logging.getLogger(__name__)


@router.get("/{game_id}", response_model=GameReport)
def get_report(game_id: int, db: Session = Depends(get_db)):
    try:
        return GameReport(**build_game_report(game_id, db))

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to build report for game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Database error")
