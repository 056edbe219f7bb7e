"""
Public game report.

Builds a per-round summary (pick counts per team, results, eliminations)
for read-only embedding. Player picks are aggregated, never listed.
"""
from collections import Counter
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from models import Game, Pick, Round, RoundStatus
from core.exceptions import GameNotFound


def _players_in_at_start(game: Game, round_number: int) -> int:
    # still active, or knocked out in this round or a later one
    return sum(
        1 for p in game.participants
        if p.is_active or (p.eliminated_in_round is not None and p.eliminated_in_round >= round_number)
    )


def build_game_report(game_id: int, db: Session) -> Dict[str, Any]:
    game = db.query(Game).filter(Game.id == game_id).first()
    if not game:
        raise GameNotFound(game_id)

    rounds = db.query(Round).filter(Round.game_id == game_id).order_by(Round.round_number).all()

    round_reports: List[Dict[str, Any]] = []
    for round_obj in rounds:
        picks = db.query(Pick).filter(Pick.round_id == round_obj.id).all()

        team_counts = Counter(p.team_name or "(none)" for p in picks)
        team_summary = [
            {"team_name": name, "count": count}
            for name, count in sorted(team_counts.items(), key=lambda item: (-item[1], item[0]))
        ]
        result_counts = dict(Counter(p.result.value for p in picks if p.result is not None))

        eliminated = []
        if round_obj.status == RoundStatus.CLOSED:
            eliminated = sorted(
                p.player_name for p in game.participants
                if p.eliminated_in_round == round_obj.round_number
            )

        round_reports.append({
            "round_number": round_obj.round_number,
            "status": round_obj.status,
            "active_players": _players_in_at_start(game, round_obj.round_number),
            "pick_count": len(picks),
            "team_summary": team_summary,
            "result_counts": result_counts,
            "eliminated_list": eliminated,
        })

    return {
        "game_id": game.id,
        "game_name": game.name,
        "status": game.status,
        "winner_names": list(game.winner_names or []),
        "rounds": round_reports,
    }
