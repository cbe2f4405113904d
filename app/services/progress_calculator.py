"""Per-game completion percentage for a student.

Failure policy: a fault in either repository is logged as ``progress.degraded``
and turned into a conservative result (zero, or the last activity alone).
``calculate_student_progress`` never raises; a dashboard must render even when
the statistics store is unavailable.
"""

from dataclasses import dataclass

import structlog

from app.repositories.contracts import (
    GameLevelStore,
    LastCompletedActivity,
    StatisticsStore,
)
from app.services.scoring import GameScoringRule, ProgressRule, SCORING_RULES, rule_for

logger = structlog.get_logger(__name__)

INITIAL_UNLOCKED_LEVEL = 1


@dataclass(frozen=True)
class StudentProgress:
    percentage: float = 0.0
    absolute_activity_number: int = 0
    total_activities: int = 0
    last_activity: LastCompletedActivity | None = None

    def to_dict(self) -> dict:
        last = self.last_activity
        return {
            "percentage": self.percentage,
            "absolute_activity_number": self.absolute_activity_number,
            "total_activities": self.total_activities,
            "last_activity": (
                {"level": last.level, "activity": last.activity} if last else None
            ),
        }


def _clamp_percentage(done: int, total: int) -> float:
    return max(0.0, min(100.0, done * 100 / total))


class StudentProgressCalculator:
    def __init__(
        self,
        statistics_repository: StatisticsStore,
        level_repository: GameLevelStore,
        scoring_rules: dict[str, GameScoringRule] | None = None,
    ):
        self.statistics_repository = statistics_repository
        self.level_repository = level_repository
        self.scoring_rules = SCORING_RULES if scoring_rules is None else scoring_rules

    async def calculate_student_progress(self, student_id: str, game_id: str) -> StudentProgress:
        rule = rule_for(game_id, self.scoring_rules)
        if rule.progress_rule is ProgressRule.DISTINCT_COMPLETED:
            return await self._distinct_completed_progress(student_id, game_id)
        return await self._furthest_activity_progress(student_id, game_id)

    async def _furthest_activity_progress(self, student_id: str, game_id: str) -> StudentProgress:
        last_activity = await self._safe_last_completed_activity(student_id, game_id)
        if last_activity is None:
            return StudentProgress()

        try:
            total = await self.level_repository.get_total_activities_count(game_id)
            if total <= 0:
                return StudentProgress(last_activity=last_activity)

            absolute = await self.calculate_absolute_activity_number(game_id, last_activity)
            return StudentProgress(
                percentage=_clamp_percentage(absolute, total),
                absolute_activity_number=absolute,
                total_activities=total,
                last_activity=last_activity,
            )
        except Exception as exc:
            logger.warning(
                "progress.degraded",
                student_id=student_id,
                game_id=game_id,
                step="total_activities",
                error=str(exc),
            )
            return StudentProgress(
                absolute_activity_number=last_activity.activity,
                last_activity=last_activity,
            )

    async def _distinct_completed_progress(self, student_id: str, game_id: str) -> StudentProgress:
        try:
            total = await self.level_repository.get_total_activities_count(game_id)
            if total <= 0:
                return StudentProgress()

            distinct = await self.statistics_repository.get_distinct_completed_activities(
                student_id, game_id
            )
            last_activity = await self.statistics_repository.get_last_completed_activity(
                student_id, game_id
            )
            return StudentProgress(
                percentage=_clamp_percentage(distinct, total),
                absolute_activity_number=distinct,
                total_activities=total,
                last_activity=last_activity,
            )
        except Exception as exc:
            logger.warning(
                "progress.degraded",
                student_id=student_id,
                game_id=game_id,
                step="distinct_completed",
                error=str(exc),
            )
            last_activity = await self._safe_last_completed_activity(student_id, game_id)
            return StudentProgress(last_activity=last_activity)

    async def _safe_last_completed_activity(
        self, student_id: str, game_id: str
    ) -> LastCompletedActivity | None:
        try:
            return await self.statistics_repository.get_last_completed_activity(student_id, game_id)
        except Exception as exc:
            logger.warning(
                "progress.degraded",
                student_id=student_id,
                game_id=game_id,
                step="last_completed_activity",
                error=str(exc),
            )
            return None

    async def calculate_absolute_activity_number(
        self, game_id: str, last_activity: LastCompletedActivity
    ) -> int:
        """
        Linear position of `last_activity` across the game's levels.

        Levels (1: 5 activities, 2: 5 activities) and activity 3 of level 2
        give 5 + 3 = 8. A missing level or a lookup fault falls back to the
        activity index alone.
        """
        try:
            levels = await self.level_repository.find_by_game_id(game_id)
        except Exception as exc:
            logger.warning(
                "progress.degraded",
                game_id=game_id,
                step="absolute_activity_number",
                error=str(exc),
            )
            return last_activity.activity

        absolute = 0
        for level in sorted(levels, key=lambda lv: lv.level):
            if level.level < last_activity.level:
                absolute += level.activities_count
            elif level.level == last_activity.level:
                return absolute + last_activity.activity
            else:
                break

        return last_activity.activity

    async def calculate_max_unlocked_level(self, student_id: str, game_id: str) -> int:
        last_activity = await self._safe_last_completed_activity(student_id, game_id)
        if last_activity is None:
            return INITIAL_UNLOCKED_LEVEL

        try:
            levels = sorted(
                await self.level_repository.find_by_game_id(game_id),
                key=lambda lv: lv.level,
            )
        except Exception as exc:
            logger.warning(
                "progress.degraded",
                student_id=student_id,
                game_id=game_id,
                step="max_unlocked_level",
                error=str(exc),
            )
            return last_activity.level

        current = next((lv for lv in levels if lv.level == last_activity.level), None)
        if current is None:
            return last_activity.level

        if last_activity.activity < current.activities_count:
            return current.level

        following = next((lv for lv in levels if lv.level > current.level), None)
        return following.level if following else current.level + 1
