"""
Group & Team API Endpoints

A group is a manager's named set of teams (e.g. "Premier League 25/26").
Games draw their picks from exactly one group.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from models import Game, Group, Team
from schemas import (
    CreatedResponse,
    GroupCreate,
    GroupResponse,
    TeamCreate,
    TeamResponse,
)
from core.auth import get_manager_email

router = APIRouter(prefix="/api", tags=["groups"])
logger = logging.getLogger(__name__)


def _owned_group(db: Session, group_id: int, manager_email: str) -> Group:
    group = db.query(Group).filter(
        Group.id == group_id,
        Group.manager_email == manager_email
    ).first()
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


def _owned_team(db: Session, team_id: int, manager_email: str) -> Team:
    team = db.query(Team).join(Group, Team.group_id == Group.id).filter(
        Team.id == team_id,
        Group.manager_email == manager_email
    ).first()
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


# ============ Groups ============

@router.get("/groups", response_model=List[GroupResponse])
def list_groups(
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    rows = (
        db.query(Group, func.count(Team.id))
        .outerjoin(Team, Team.group_id == Group.id)
        .filter(Group.manager_email == manager_email)
        .group_by(Group.id)
        .order_by(Group.created_at.desc(), Group.id.desc())
        .all()
    )
    return [
        GroupResponse(
            id=group.id,
            manager_email=group.manager_email,
            name=group.name,
            created_at=group.created_at,
            team_count=team_count
        )
        for group, team_count in rows
    ]


@router.post("/groups", response_model=CreatedResponse)
def create_group(
    group_data: GroupCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    name = group_data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Group name required")

    try:
        group = Group(manager_email=manager_email, name=name)
        db.add(group)
        db.commit()
        db.refresh(group)

        logger.info(f"Group {group.id} ({name}) created for {manager_email}")
        return CreatedResponse(id=group.id)

    except Exception as e:
        logger.error(f"Failed to create group: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create group")


@router.delete("/groups/{group_id}", status_code=204)
def delete_group(
    group_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    group = _owned_group(db, group_id, manager_email)

    in_use = db.query(Game).filter(Game.group_id == group.id).count()
    if in_use:
        raise HTTPException(status_code=409, detail="Group is used by a game")

    try:
        db.delete(group)
        db.commit()
        logger.info(f"Group {group_id} deleted")
    except Exception as e:
        logger.error(f"Failed to delete group: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete group")


# ============ Teams ============

@router.get("/groups/{group_id}/teams", response_model=List[TeamResponse])
def list_teams(
    group_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    group = _owned_group(db, group_id, manager_email)
    return db.query(Team).filter(Team.group_id == group.id).order_by(Team.name).all()


@router.post("/groups/{group_id}/teams", response_model=CreatedResponse)
def create_team(
    group_id: int,
    team_data: TeamCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    group = _owned_group(db, group_id, manager_email)

    name = team_data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Team name required")

    try:
        team = Team(group_id=group.id, name=name, rank=team_data.rank)
        db.add(team)
        db.commit()
        db.refresh(team)

        logger.info(f"Team {team.id} ({name}) added to group {group_id}")
        return CreatedResponse(id=team.id)

    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Team name already exists in this group")
    except Exception as e:
        logger.error(f"Failed to create team: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create team")


@router.put("/teams/{team_id}", status_code=204)
def update_team(
    team_id: int,
    team_data: TeamCreate,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    team = _owned_team(db, team_id, manager_email)

    name = team_data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Team name required")

    try:
        team.name = name
        team.rank = team_data.rank
        db.commit()
        logger.info(f"Team {team_id} updated")

    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Team name already exists in this group")
    except Exception as e:
        logger.error(f"Failed to update team: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update team")


@router.delete("/teams/{team_id}", status_code=204)
def delete_team(
    team_id: int,
    manager_email: str = Depends(get_manager_email),
    db: Session = Depends(get_db)
):
    team = _owned_team(db, team_id, manager_email)

    try:
        db.delete(team)
        db.commit()
        logger.info(f"Team {team_id} deleted")
    except Exception as e:
        logger.error(f"Failed to delete team: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete team")
