"""
ORM models for managed Last Man Standing games.

Tables:
- users: identity records resolved from bearer tokens
- managed_groups / managed_teams: manager-owned team catalogues
- managed_players: manager's reusable player pool
- managed_games / managed_participants / managed_rounds / managed_picks:
  one elimination competition and its state

Invariant: Participant.eliminated_in_round is set iff is_active is False.
"""
import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


def _values(enum_cls):
    # store "active" rather than "ACTIVE"
    return [member.value for member in enum_cls]


class GameStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class WinnerMode(str, enum.Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class RolloverMode(str, enum.Enum):
    ROUND = "round"
    GAME = "game"


class RoundStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class PickResult(str, enum.Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"
    POSTPONED = "postponed"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    roles = Column(JSON, nullable=False, default=list)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def has_role(self, role: str) -> bool:
        return role in (self.roles or [])


class Group(Base):
    __tablename__ = "managed_groups"

    id = Column(Integer, primary_key=True, index=True)
    manager_email = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    teams = relationship(
        "Team", back_populates="group", cascade="all, delete-orphan", order_by="Team.name"
    )


class Team(Base):
    __tablename__ = "managed_teams"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("managed_groups.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    rank = Column(Integer, nullable=False, default=0)  # lower = stronger
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="teams")

    __table_args__ = (
        UniqueConstraint("group_id", "name", name="uq_team_group_name"),
    )


class Player(Base):
    __tablename__ = "managed_players"

    id = Column(Integer, primary_key=True, index=True)
    manager_email = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("manager_email", "name", name="uq_player_manager_name"),
    )


class Game(Base):
    __tablename__ = "managed_games"

    id = Column(Integer, primary_key=True, index=True)
    manager_email = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    group_id = Column(Integer, ForeignKey("managed_groups.id"), nullable=True)
    status = Column(
        Enum(GameStatus, values_callable=_values), nullable=False, default=GameStatus.ACTIVE
    )
    winner_mode = Column(
        Enum(WinnerMode, values_callable=_values), nullable=False, default=WinnerMode.SINGLE
    )
    rollover_mode = Column(
        Enum(RolloverMode, values_callable=_values), nullable=False, default=RolloverMode.ROUND
    )
    max_winners = Column(Integer, nullable=False, default=1)
    postpone_as_win = Column(Boolean, nullable=False, default=False)
    winner_names = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group")
    participants = relationship(
        "Participant",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="Participant.player_name",
    )
    rounds = relationship(
        "Round",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="Round.round_number",
    )

    @property
    def winner_name(self):
        if not self.winner_names:
            return None
        return ", ".join(self.winner_names)


class Participant(Base):
    __tablename__ = "managed_participants"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("managed_games.id", ondelete="CASCADE"), nullable=False)
    player_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    eliminated_in_round = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    game = relationship("Game", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("game_id", "player_name", name="uq_participant_game_player"),
    )

    def eliminate(self, round_number: int):
        self.is_active = False
        self.eliminated_in_round = round_number

    def reinstate(self):
        self.is_active = True
        self.eliminated_in_round = None


class Round(Base):
    __tablename__ = "managed_rounds"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("managed_games.id", ondelete="CASCADE"), nullable=False)
    round_number = Column(Integer, nullable=False)
    status = Column(
        Enum(RoundStatus, values_callable=_values), nullable=False, default=RoundStatus.OPEN
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    game = relationship("Game", back_populates="rounds")
    picks = relationship(
        "Pick",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="Pick.player_name",
    )

    __table_args__ = (
        UniqueConstraint("game_id", "round_number", name="uq_round_game_number"),
    )


class Pick(Base):
    __tablename__ = "managed_picks"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("managed_games.id", ondelete="CASCADE"), nullable=False, index=True)
    round_id = Column(Integer, ForeignKey("managed_rounds.id", ondelete="CASCADE"), nullable=False, index=True)
    player_name = Column(String(255), nullable=False)
    team_id = Column(Integer, ForeignKey("managed_teams.id", ondelete="SET NULL"), nullable=True)
    result = Column(Enum(PickResult, values_callable=_values), nullable=True)
    auto_assigned = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    round = relationship("Round", back_populates="picks")
    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint("game_id", "round_id", "player_name", name="uq_pick_game_round_player"),
    )

    @property
    def team_name(self):
        return self.team.name if self.team else None
