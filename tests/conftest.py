"""Shared fixtures: in-memory database, users, a seeded team group."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models import Group, PickResult, Team, User
from core.game_manager import GameManager
from core.round_manager import RoundManager

MANAGER = "manager@example.com"
OTHER_MANAGER = "other@example.com"
ADMIN = "admin@example.com"
NOBODY = "nobody@example.com"

TEAM_NAMES = [
    "Arsenal", "Liverpool", "Man City", "Chelsea", "Spurs",
    "Newcastle", "Villa", "Brighton", "West Ham", "Fulham",
]


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def users(db):
    db.add_all([
        User(email=MANAGER, name="Manager", roles=["game_manager"]),
        User(email=OTHER_MANAGER, name="Other", roles=["game_manager"]),
        User(email=ADMIN, name="Admin", roles=["game_admin"]),
        User(email=NOBODY, name="Nobody", roles=[]),
    ])
    db.commit()
    return {u.email: u for u in db.query(User).all()}


@pytest.fixture
def client(db, users):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(email=MANAGER):
    return {"Authorization": f"Bearer demo-token-{email}"}


@pytest.fixture
def group(db):
    group = Group(manager_email=MANAGER, name="Premier League 25/26")
    db.add(group)
    db.flush()
    for rank, name in enumerate(TEAM_NAMES, start=1):
        db.add(Team(group_id=group.id, name=name, rank=rank))
    db.commit()
    return group


@pytest.fixture
def make_game(db, group):
    """Create a game for MANAGER; keyword arguments go to GameManager.create_game."""
    def _make(players=("Alice", "Bob", "Carol"), **kwargs):
        return GameManager.create_game(
            db, MANAGER, kwargs.pop("name", "Test LMS"), group.id, list(players), **kwargs
        )
    return _make


@pytest.fixture
def play_round(db):
    """
    Auto-assign picks in the game's open round, apply {player: result} and
    close it. Players missing from the mapping win.
    """
    def _play(game, results):
        round_obj = GameManager.latest_round(db, game.id)
        RoundManager.auto_assign_picks(db, round_obj.id, MANAGER)
        picks = RoundManager.list_picks(db, round_obj.id, MANAGER)
        payload = [
            {"pick_id": p.id, "result": results.get(p.player_name, PickResult.WIN)}
            for p in picks
        ]
        return RoundManager.save_results(db, round_obj.id, MANAGER, payload)
    return _play
