"""Tests for StudentStatisticsAggregator."""

from datetime import timedelta, timezone

import pytest

from app.services.scoring import CompletionRule, GameScoringRule
from app.services.statistics_aggregator import (
    AggregatedStudentStats,
    StudentStatisticsAggregator,
    round_half_up,
    row_accuracy_percent,
)
from tests.fakes import BASE_TIME, make_row, minutes_after_base


@pytest.fixture
def aggregator():
    return StudentStatisticsAggregator()


class TestRounding:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(62.5) == 63

    def test_below_half_rounds_down(self):
        assert round_half_up(1.49) == 1
        assert round_half_up(0) == 0


class TestRowAccuracy:
    def test_percent_of_correct_answers(self):
        assert row_accuracy_percent(make_row(correct_answers=3, total_questions=4)) == 75

    @pytest.mark.parametrize(
        "correct, total",
        [(None, 4), (3, None), (0, 0)],
    )
    def test_unscorable_rows(self, correct, total):
        assert row_accuracy_percent(make_row(correct_answers=correct, total_questions=total)) is None

    def test_percent_stays_within_bounds(self):
        assert row_accuracy_percent(make_row(correct_answers=5, total_questions=2)) == 100
        assert row_accuracy_percent(make_row(correct_answers=-1, total_questions=4)) == 0


class TestAggregate:
    def test_empty_input_gives_defaults(self, aggregator):
        result = aggregator.aggregate([])

        assert result == AggregatedStudentStats()
        assert result.to_dict() == {
            "total_games_played": 0,
            "average_score": 0,
            "last_activity": None,
            "progress_by_game": {},
        }

    def test_counts_distinct_games_and_one_completion_per_row(self, aggregator):
        rows = [
            make_row(game_id="game-escritura", activity=1),
            make_row(game_id="game-escritura", activity=2),
            make_row(game_id="game-ordenamiento"),
        ]

        result = aggregator.aggregate(rows)

        assert result.total_games_played == 2
        assert result.progress_by_game["escritura"].completed == 2
        assert result.progress_by_game["ordenamiento"].completed == 1

    def test_incomplete_rows_do_not_count_as_completed(self, aggregator):
        rows = [
            make_row(is_completed=False, attempts=3),
            make_row(is_completed=True, attempts=1),
        ]

        game = aggregator.aggregate(rows).progress_by_game["escritura"]

        assert game.completed == 1
        assert game.total_attempts == 4

    def test_calculos_counts_each_question_of_a_completed_row(self, aggregator):
        rows = [
            make_row(game_id="game-calculos", total_questions=10, correct_answers=8),
            make_row(game_id="game-calculos", total_questions=None),
            make_row(game_id="game-calculos", total_questions=5, correct_answers=5, is_completed=False),
        ]

        game = aggregator.aggregate(rows).progress_by_game["calculos"]

        assert game.completed == 11

    def test_calculos_row_with_negative_question_count_counts_once(self, aggregator):
        rows = [make_row(game_id="game-calculos", total_questions=-3)]

        assert aggregator.aggregate(rows).progress_by_game["calculos"].completed == 1

    def test_custom_rules_apply_question_counting_to_other_games(self):
        aggregator = StudentStatisticsAggregator(
            {"escala": GameScoringRule(completion_rule=CompletionRule.QUESTIONS_PER_ROW)}
        )
        rows = [make_row(game_id="game-escala", total_questions=4, correct_answers=4)]

        assert aggregator.aggregate(rows).progress_by_game["escala"].completed == 4

    def test_average_score_skips_unscorable_rows(self, aggregator):
        rows = [
            make_row(correct_answers=1, total_questions=2),
            make_row(correct_answers=4, total_questions=4),
            make_row(correct_answers=None, total_questions=None),
            make_row(correct_answers=2, total_questions=0),
        ]

        result = aggregator.aggregate(rows)

        assert result.average_score == 75
        assert result.progress_by_game["escritura"].average_score == 75

    def test_average_score_rounds_half_up(self, aggregator):
        rows = [make_row(correct_answers=5, total_questions=8)]

        assert aggregator.aggregate(rows).average_score == 63

    def test_average_score_per_game(self, aggregator):
        rows = [
            make_row(game_id="game-escritura", correct_answers=1, total_questions=1),
            make_row(game_id="game-escala", correct_answers=1, total_questions=4),
        ]

        result = aggregator.aggregate(rows)

        assert result.progress_by_game["escritura"].average_score == 100
        assert result.progress_by_game["escala"].average_score == 25
        assert result.average_score == round_half_up(62.5)

    def test_total_time_ignores_missing_durations(self, aggregator):
        rows = [
            make_row(completion_time=90),
            make_row(completion_time=None),
            make_row(completion_time=30),
        ]

        assert aggregator.aggregate(rows).progress_by_game["escritura"].total_time == 120

    def test_last_activity_is_newest_timestamp(self, aggregator):
        newest = minutes_after_base(30)
        rows = [
            make_row(created_at=minutes_after_base(5)),
            make_row(created_at=newest),
            make_row(created_at=minutes_after_base(10)),
        ]

        assert aggregator.aggregate(rows).last_activity == newest.isoformat()

    def test_equal_timestamps_keep_first_row(self, aggregator):
        same_instant = BASE_TIME.astimezone(timezone(timedelta(hours=-3)))
        utc_first = [make_row(created_at=BASE_TIME), make_row(created_at=same_instant)]
        local_first = list(reversed(utc_first))

        assert aggregator.aggregate(utc_first).last_activity == "2025-03-10T09:00:00+00:00"
        assert aggregator.aggregate(local_first).last_activity == "2025-03-10T06:00:00-03:00"

    def test_aggregate_is_idempotent(self, aggregator):
        rows = [
            make_row(game_id="game-calculos", total_questions=4, correct_answers=3, completion_time=30),
            make_row(activity=2, correct_answers=1, total_questions=2, created_at=minutes_after_base(5)),
            make_row(game_id="game-escala", is_completed=False, attempts=3),
        ]
        snapshot = list(rows)

        first = aggregator.aggregate(rows)
        second = aggregator.aggregate(rows)

        assert first == second
        assert first.to_dict() == second.to_dict()
        assert rows == snapshot
        assert [r.activity for r in rows] == [1, 2, 1]

    def test_oversized_accuracy_does_not_leave_percent_range(self, aggregator):
        rows = [
            make_row(correct_answers=5, total_questions=2),
            make_row(correct_answers=1, total_questions=2),
        ]

        result = aggregator.aggregate(rows)

        assert result.average_score == 75
        assert result.progress_by_game["escritura"].average_score == 75

    def test_game_keys_are_normalized(self, aggregator):
        rows = [make_row(game_id="game-escala"), make_row(game_id="escala")]

        result = aggregator.aggregate(rows)

        assert list(result.progress_by_game) == ["escala"]
        assert result.progress_by_game["escala"].completed == 2

    def test_accepts_any_iterable(self, aggregator):
        rows = (make_row(activity=i) for i in range(1, 4))

        assert aggregator.aggregate(rows).progress_by_game["escritura"].completed == 3
