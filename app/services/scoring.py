"""Per-game scoring rules.

Most games measure progress by the furthest activity reached and count one
completion per completed row. Games listed in ``SCORING_RULES`` override
either rule; lookups go through ``rule_for`` with the normalized game id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

GAME_ID_PREFIX = "game-"


class ProgressRule(str, Enum):
    # furthest (level, activity) reached, as a linear position across levels
    FURTHEST_ACTIVITY = "furthest_activity"
    # number of distinct completed (level, activity) pairs
    DISTINCT_COMPLETED = "distinct_completed"


class CompletionRule(str, Enum):
    ONE_PER_ROW = "one_per_row"
    # one row stores a batch of sub-questions; each counts as a completion
    QUESTIONS_PER_ROW = "questions_per_row"


@dataclass(frozen=True)
class GameScoringRule:
    progress_rule: ProgressRule = ProgressRule.FURTHEST_ACTIVITY
    completion_rule: CompletionRule = CompletionRule.ONE_PER_ROW


DEFAULT_RULE = GameScoringRule()

SCORING_RULES: dict[str, GameScoringRule] = {
    "calculos": GameScoringRule(
        progress_rule=ProgressRule.DISTINCT_COMPLETED,
        completion_rule=CompletionRule.QUESTIONS_PER_ROW,
    ),
}


def normalize_game_id(game_id: str) -> str:
    """'game-calculos' -> 'calculos'. Used for grouping and display only."""
    if game_id.startswith(GAME_ID_PREFIX):
        return game_id[len(GAME_ID_PREFIX):]
    return game_id


def full_game_id(game_id: str) -> str:
    """Inverse of normalize_game_id: 'calculos' -> 'game-calculos'."""
    return game_id if game_id.startswith(GAME_ID_PREFIX) else f"{GAME_ID_PREFIX}{game_id}"


def rule_for(game_id: str, rules: Mapping[str, GameScoringRule] | None = None) -> GameScoringRule:
    table = SCORING_RULES if rules is None else rules
    return table.get(normalize_game_id(game_id), DEFAULT_RULE)
