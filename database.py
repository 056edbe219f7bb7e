from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
from typing import List
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./lms_manager.db"
    app_name: str = "LMS Manager"
    app_icon: str = "🎯"
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    manager_role: str = "game_manager"
    admin_role: str = "game_admin"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite connections are shared across FastAPI's worker threads
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency: one Session per request.

    The session is closed when the request finishes, whatever happened.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Run a unit of work inside one transaction.

    Usage:
        @transactional
        def close_round(db: Session, ...):
            round_obj.status = RoundStatus.CLOSED
            # no manual commit

    On success the session is committed. On any exception the session is
    rolled back and the exception is re-raised for the caller to map.

    The Session must be the first positional argument or passed as ``db=``.
    Do not commit inside the wrapped function.

    Only GameManager and RoundManager use it. The master-data routers
    (groups, teams, players) commit and roll back themselves.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
