"""Reduce a student's raw statistics rows into dashboard figures.

Pure and synchronous: no I/O, same output for the same input.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Protocol

from app.services.scoring import (
    CompletionRule,
    GameScoringRule,
    SCORING_RULES,
    normalize_game_id,
    rule_for,
)


class StatisticsRow(Protocol):
    game_id: str
    attempts: int
    is_completed: bool
    correct_answers: int | None
    total_questions: int | None
    completion_time: int | None
    created_at: datetime


def round_half_up(value: float) -> int:
    """2.5 -> 3, unlike round()'s banker's rounding."""
    return math.floor(value + 0.5)


def row_accuracy_percent(row: StatisticsRow) -> float | None:
    """Accuracy in percent clamped to [0, 100], or None when the row can't be scored."""
    if row.correct_answers is None or not row.total_questions or row.total_questions <= 0:
        return None
    return max(0.0, min(100.0, row.correct_answers / row.total_questions * 100))


def _mean_rounded(values: list[float]) -> int:
    return round_half_up(sum(values) / len(values)) if values else 0


@dataclass
class GameProgress:
    completed: int = 0
    total_time: int = 0
    average_score: int = 0
    total_attempts: int = 0

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "total_time": self.total_time,
            "average_score": self.average_score,
            "total_attempts": self.total_attempts,
        }


@dataclass
class AggregatedStudentStats:
    total_games_played: int = 0
    average_score: int = 0
    last_activity: str | None = None
    progress_by_game: dict[str, GameProgress] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_games_played": self.total_games_played,
            "average_score": self.average_score,
            "last_activity": self.last_activity,
            "progress_by_game": {k: v.to_dict() for k, v in self.progress_by_game.items()},
        }


class StudentStatisticsAggregator:
    def __init__(self, scoring_rules: Mapping[str, GameScoringRule] | None = None):
        self.scoring_rules = SCORING_RULES if scoring_rules is None else scoring_rules

    def aggregate(self, rows: Iterable[StatisticsRow]) -> AggregatedStudentStats:
        rows = list(rows)
        if not rows:
            return AggregatedStudentStats()

        # strict ">" keeps the first row on equal timestamps
        latest = rows[0]
        for row in rows[1:]:
            if row.created_at > latest.created_at:
                latest = row

        scores = [s for s in (row_accuracy_percent(r) for r in rows) if s is not None]

        return AggregatedStudentStats(
            total_games_played=len({r.game_id for r in rows}),
            average_score=_mean_rounded(scores),
            last_activity=latest.created_at.isoformat(),
            progress_by_game=self._progress_by_game(rows),
        )

    def _progress_by_game(self, rows: list[StatisticsRow]) -> dict[str, GameProgress]:
        progress: dict[str, GameProgress] = {}
        scores: dict[str, list[float]] = {}

        for row in rows:
            key = normalize_game_id(row.game_id)
            game = progress.setdefault(key, GameProgress())
            game_scores = scores.setdefault(key, [])

            if row.is_completed:
                game.completed += self._completions(row)
            if row.completion_time:
                game.total_time += row.completion_time
            game.total_attempts += row.attempts or 0

            score = row_accuracy_percent(row)
            if score is not None:
                game_scores.append(score)

        for key, game in progress.items():
            game.average_score = _mean_rounded(scores[key])
        return progress

    def _completions(self, row: StatisticsRow) -> int:
        rule = rule_for(row.game_id, self.scoring_rules)
        if rule.completion_rule is CompletionRule.QUESTIONS_PER_ROW and (
            row.total_questions is not None and row.total_questions > 0
        ):
            return row.total_questions
        return 1
