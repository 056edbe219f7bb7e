"""
Bearer-token authentication as FastAPI dependencies.

Tokens look like "demo-token-<email>" and resolve to a row in the users
table. get_manager_email adds the capability check and optional
?impersonate=<email>.
"""
from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db, get_settings
from models import User
from core.permissions import can_act_for

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "demo-token-"


def resolve_token(db: Session, token: str) -> Optional[User]:
    if not token.startswith(TOKEN_PREFIX):
        return None
    email = token[len(TOKEN_PREFIX):].strip()
    if not email:
        return None
    return db.query(User).filter(User.email == email).first()


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization")

    user = resolve_token(db, authorization[len("Bearer "):].strip())
    if user is None:
        logger.warning("Authentication failed: unknown token")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def get_manager_email(
    impersonate: Optional[str] = Query(None),
    user: User = Depends(get_current_user)
) -> str:
    """
    Email of the manager this request acts for.

    Without ?impersonate the caller acts for themselves and needs the
    manager role; with it the caller needs the admin role.
    """
    target = impersonate or user.email
    if not can_act_for(user, target, get_settings().manager_role):
        logger.warning(f"User {user.email} denied acting for {target}")
        raise HTTPException(status_code=401, detail="Unauthorized")

    if target != user.email:
        logger.info(f"User {user.email} acting for {target}")
    return target
