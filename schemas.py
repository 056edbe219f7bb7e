"""
Request / response models.

JSON on the wire is camelCase; request bodies also accept snake_case.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import GameStatus, PickResult, RolloverMode, RoundStatus, WinnerMode


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============ Generic ============

class CreatedResponse(CamelModel):
    id: int


class SuccessResponse(CamelModel):
    success: bool = True


class ConfigResponse(CamelModel):
    app_name: str
    app_icon: str


# ============ Master data ============

class GroupCreate(CamelModel):
    name: str = Field(..., min_length=1)


class GroupResponse(CamelModel):
    id: int
    manager_email: str
    name: str
    created_at: Optional[datetime] = None
    team_count: int = 0


class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1)
    rank: int = 0


class TeamResponse(CamelModel):
    id: int
    group_id: int
    name: str
    rank: int
    created_at: Optional[datetime] = None


class PlayerCreate(CamelModel):
    name: str = Field(..., min_length=1)


class PlayerResponse(CamelModel):
    id: int
    manager_email: str
    name: str
    created_at: Optional[datetime] = None


# ============ Games ============

class GameCreate(CamelModel):
    name: str = Field(..., min_length=1)
    group_id: int
    player_names: List[str]
    winner_mode: WinnerMode = WinnerMode.SINGLE
    rollover_mode: RolloverMode = RolloverMode.ROUND
    max_winners: int = Field(1, ge=1)
    postpone_as_win: bool = False


class ParticipantCreate(CamelModel):
    player_name: str = Field(..., min_length=1)


class ParticipantResponse(CamelModel):
    id: int
    game_id: int
    player_name: str
    is_active: bool
    eliminated_in_round: Optional[int] = None


class RoundResponse(CamelModel):
    id: int
    game_id: int
    round_number: int
    status: RoundStatus
    created_at: Optional[datetime] = None


class GameResponse(CamelModel):
    id: int
    manager_email: str
    name: str
    group_id: Optional[int] = None
    status: GameStatus
    winner_mode: WinnerMode
    rollover_mode: RolloverMode
    max_winners: int
    postpone_as_win: bool
    winner_name: Optional[str] = None
    winner_names: List[str] = []
    created_at: Optional[datetime] = None


class GameSummaryResponse(GameResponse):
    group_name: Optional[str] = None
    participant_count: int = 0
    active_count: int = 0
    current_round: int = 0


class GameDetailResponse(CamelModel):
    game: GameResponse
    participants: List[ParticipantResponse]
    rounds: List[RoundResponse]


class AdvanceResponse(CamelModel):
    status: GameStatus
    winner_name: Optional[str] = None
    winner_names: Optional[List[str]] = None
    round_number: Optional[int] = None
    rolled_over: Optional[bool] = None


class WinnersResponse(CamelModel):
    success: bool = True
    winners: List[str]


# ============ Rounds & picks ============

class CreateRoundResponse(CamelModel):
    id: int
    round_number: int


class PickCreate(CamelModel):
    player_name: str = Field(..., min_length=1)
    team_id: int


class PickUpdate(CamelModel):
    team_id: int


class PickResponse(CamelModel):
    id: int
    game_id: int
    round_id: int
    player_name: str
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    result: Optional[PickResult] = None
    auto_assigned: bool = False


class AutoAssignResponse(CamelModel):
    assigned: List[PickResponse]


class PickResultSubmit(CamelModel):
    pick_id: int
    result: PickResult


class SaveResultsRequest(CamelModel):
    results: List[PickResultSubmit]


class SaveResultsResponse(CamelModel):
    round_number: int
    eliminated: List[str]
    survived: List[str]


class ReopenResponse(CamelModel):
    round_number: int
    reinstated: List[str]


# ============ Report ============

class TeamSummary(CamelModel):
    team_name: str
    count: int


class RoundReport(CamelModel):
    round_number: int
    status: RoundStatus
    active_players: int
    pick_count: int
    team_summary: List[TeamSummary]
    result_counts: dict
    eliminated_list: List[str]


class GameReport(CamelModel):
    game_id: int
    game_name: str
    status: GameStatus
    winner_names: List[str]
    rounds: List[RoundReport]
