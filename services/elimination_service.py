"""
Elimination rule: pure function from a pick result to survive / eliminate.

- win        -> survives
- loss, draw -> eliminated
- postponed  -> eliminated, unless the game counts postponements as wins
"""
from typing import Union

from models import PickResult
from core.exceptions import InvalidResult


def parse_result(value: Union[str, PickResult]) -> PickResult:
    if isinstance(value, PickResult):
        return value
    try:
        return PickResult(str(value).strip().lower())
    except ValueError:
        raise InvalidResult(
            f"Invalid result '{value}': must be one of win, loss, draw, postponed"
        )


def is_eliminated(result: Union[str, PickResult], postpone_as_win: bool) -> bool:
    """
    Decide whether a pick result knocks the participant out.

    Examples:
        is_eliminated("loss", False)      -> True
        is_eliminated("postponed", True)  -> False
        is_eliminated("postponed", False) -> True
    """
    result = parse_result(result)
    if result == PickResult.WIN:
        return False
    if result == PickResult.POSTPONED:
        return not postpone_as_win
    return True
