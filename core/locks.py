"""
Row-level locks.

Uses SELECT ... FOR UPDATE so two requests cannot advance, close or reopen
the same game at the same time. SQLite ignores FOR UPDATE; there the
single-writer database already serializes transactions.
"""
from sqlalchemy.orm import Session, Query

from models import Game, Round


def with_game_lock(game_id: int, db: Session) -> Query:
    """
    Lock one Game row for the rest of the transaction.

    Example:
        game = with_game_lock(game_id, db).first()
        if not game or game.manager_email != manager_email:
            raise GameNotFound(game_id)

    Returns a Query; call .first() to execute it.
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)


def with_round_lock(round_id: int, db: Session) -> Query:
    """
    Lock one Round row for the rest of the transaction.

    Used when closing or reopening a round so results are not applied twice.
    """
    return db.query(Round).filter(
        Round.id == round_id
    ).with_for_update(nowait=False)
