"""Tests for StudentProgressCalculator, run against in-memory stores."""

import pytest

from app.repositories.contracts import LastCompletedActivity
from app.services.progress_calculator import StudentProgress, StudentProgressCalculator
from tests.fakes import FakeLevelStore, FakeStatisticsStore

pytestmark = pytest.mark.anyio

ESCRITURA = "game-escritura"
CALCULOS = "game-calculos"


def _calculator(stats: FakeStatisticsStore, levels: FakeLevelStore) -> StudentProgressCalculator:
    return StudentProgressCalculator(stats, levels)


class TestFurthestActivityProgress:
    async def test_position_across_levels(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 3)), FakeLevelStore([(1, 5), (2, 5)]))

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.absolute_activity_number == 8
        assert progress.total_activities == 10
        assert progress.percentage == 80
        assert progress.last_activity == LastCompletedActivity(level=2, activity=3)

    async def test_no_activity_gives_zero_progress(self):
        calc = _calculator(FakeStatisticsStore(), FakeLevelStore([(1, 5)]))

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress == StudentProgress()
        assert progress.to_dict() == {
            "percentage": 0.0,
            "absolute_activity_number": 0,
            "total_activities": 0,
            "last_activity": None,
        }

    async def test_game_without_levels_keeps_last_activity(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(1, 2)), FakeLevelStore([]))

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.percentage == 0
        assert progress.absolute_activity_number == 0
        assert progress.last_activity == LastCompletedActivity(1, 2)

    async def test_percentage_is_clamped_to_100(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 9)), FakeLevelStore([(1, 5), (2, 5)]))

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.absolute_activity_number == 14
        assert progress.percentage == 100

    async def test_unknown_level_falls_back_to_activity_index(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(3, 2)), FakeLevelStore([(1, 5), (2, 5)]))

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.absolute_activity_number == 2
        assert progress.percentage == 20

    async def test_levels_are_sorted_before_counting(self):
        calc = _calculator(
            FakeStatisticsStore(last_activity=(3, 1)),
            FakeLevelStore([(3, 4), (1, 2), (2, 3)]),
        )

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.absolute_activity_number == 6
        assert progress.total_activities == 9


class TestDistinctCompletedProgress:
    async def test_distinct_completions_over_total(self):
        levels = FakeLevelStore([(1, 5), (2, 5), (3, 5), (4, 5)])
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 2), distinct_completed=7), levels)

        progress = await calc.calculate_student_progress("student-1", CALCULOS)

        assert progress.percentage == 35
        assert progress.absolute_activity_number == 7
        assert progress.total_activities == 20
        assert progress.last_activity == LastCompletedActivity(2, 2)

    async def test_bare_game_id_uses_same_rule(self):
        calc = _calculator(FakeStatisticsStore(distinct_completed=5), FakeLevelStore([(1, 10)]))

        progress = await calc.calculate_student_progress("student-1", "calculos")

        assert progress.percentage == 50

    async def test_no_levels_gives_empty_progress(self):
        stats = FakeStatisticsStore(last_activity=(1, 1), distinct_completed=3)
        calc = _calculator(stats, FakeLevelStore([]))

        progress = await calc.calculate_student_progress("student-1", CALCULOS)

        assert progress == StudentProgress()
        assert "get_distinct_completed_activities" not in stats.calls

    async def test_more_completions_than_activities_is_clamped(self):
        calc = _calculator(FakeStatisticsStore(distinct_completed=12), FakeLevelStore([(1, 10)]))

        progress = await calc.calculate_student_progress("student-1", CALCULOS)

        assert progress.percentage == 100


class TestDegradedResults:
    async def test_last_activity_lookup_failure(self):
        stats = FakeStatisticsStore(last_activity=(2, 3), fail_on={"get_last_completed_activity"})
        calc = _calculator(stats, FakeLevelStore([(1, 5), (2, 5)]))

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress == StudentProgress()

    async def test_total_count_failure_keeps_activity(self):
        levels = FakeLevelStore([(1, 5), (2, 5)], fail_on={"get_total_activities_count"})
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 3)), levels)

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.percentage == 0
        assert progress.absolute_activity_number == 3
        assert progress.total_activities == 0
        assert progress.last_activity == LastCompletedActivity(2, 3)

    async def test_level_listing_failure_uses_activity_index(self):
        levels = FakeLevelStore([(1, 5), (2, 5)], fail_on={"find_by_game_id"})
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 3)), levels)

        progress = await calc.calculate_student_progress("student-1", ESCRITURA)

        assert progress.absolute_activity_number == 3
        assert progress.percentage == 30

    async def test_distinct_count_failure_keeps_last_activity(self):
        stats = FakeStatisticsStore(
            last_activity=(1, 4),
            distinct_completed=4,
            fail_on={"get_distinct_completed_activities"},
        )
        calc = _calculator(stats, FakeLevelStore([(1, 5)]))

        progress = await calc.calculate_student_progress("student-1", CALCULOS)

        assert progress.percentage == 0
        assert progress.absolute_activity_number == 0
        assert progress.last_activity == LastCompletedActivity(1, 4)

    async def test_everything_failing_still_returns_a_result(self):
        stats = FakeStatisticsStore(
            fail_on={"get_last_completed_activity", "get_distinct_completed_activities"}
        )
        levels = FakeLevelStore(fail_on={"find_by_game_id", "get_total_activities_count"})
        calc = _calculator(stats, levels)

        for game_id in (ESCRITURA, CALCULOS):
            assert await calc.calculate_student_progress("student-1", game_id) == StudentProgress()


class TestAbsoluteActivityNumber:
    async def test_first_level(self):
        calc = _calculator(FakeStatisticsStore(), FakeLevelStore([(1, 5), (2, 5)]))

        assert await calc.calculate_absolute_activity_number(ESCRITURA, LastCompletedActivity(1, 4)) == 4

    async def test_uneven_levels(self):
        calc = _calculator(FakeStatisticsStore(), FakeLevelStore([(1, 3), (2, 7), (3, 5)]))

        assert await calc.calculate_absolute_activity_number(ESCRITURA, LastCompletedActivity(3, 2)) == 12


class TestMaxUnlockedLevel:
    async def test_no_activity_unlocks_first_level(self):
        calc = _calculator(FakeStatisticsStore(), FakeLevelStore([(1, 5), (2, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 1

    async def test_level_in_progress_stays_unlocked(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 3)), FakeLevelStore([(1, 5), (2, 5), (3, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 2

    async def test_finished_level_unlocks_next_one(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(1, 5)), FakeLevelStore([(1, 5), (2, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 2

    async def test_next_configured_level_skips_gaps(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(1, 5)), FakeLevelStore([(1, 5), (4, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 4

    async def test_finished_last_level_goes_one_past(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 5)), FakeLevelStore([(1, 5), (2, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 3

    async def test_unconfigured_level_returns_that_level(self):
        calc = _calculator(FakeStatisticsStore(last_activity=(3, 1)), FakeLevelStore([(1, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 3

    async def test_level_lookup_failure_returns_current_level(self):
        levels = FakeLevelStore([(1, 5), (2, 5)], fail_on={"find_by_game_id"})
        calc = _calculator(FakeStatisticsStore(last_activity=(2, 5)), levels)

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 2

    async def test_statistics_failure_unlocks_first_level(self):
        stats = FakeStatisticsStore(last_activity=(2, 5), fail_on={"get_last_completed_activity"})
        calc = _calculator(stats, FakeLevelStore([(1, 5), (2, 5)]))

        assert await calc.calculate_max_unlocked_level("student-1", ESCRITURA) == 1
