"""Derived accessors on the ORM models (no database needed)."""

from app.models import GameLevel, UserRole
from tests.fakes import build_student, build_teacher, make_row


class TestStudentStatistics:
    def test_accuracy(self):
        assert make_row(correct_answers=3, total_questions=4).accuracy == 0.75
        assert make_row(correct_answers=None, total_questions=4).accuracy == 0.0
        assert make_row(correct_answers=3, total_questions=0).accuracy == 0.0
        assert make_row(correct_answers=3, total_questions=None).accuracy == 0.0

    def test_success_rate(self):
        assert make_row(correct_answers=1, total_questions=2).success_rate == 50.0

    def test_average_time_per_question(self):
        assert make_row(completion_time=120, total_questions=4).average_time_per_question == 30.0
        assert make_row(completion_time=None, total_questions=4).average_time_per_question == 0.0
        assert make_row(completion_time=120, total_questions=0).average_time_per_question == 0.0

    def test_has_valid_questions(self):
        assert make_row(correct_answers=0, total_questions=5).has_valid_questions()
        assert not make_row(correct_answers=None, total_questions=5).has_valid_questions()
        assert not make_row(correct_answers=2, total_questions=0).has_valid_questions()

    def test_is_level_completed(self):
        assert make_row(is_completed=True, level=2, max_unlocked_level=2).is_level_completed()
        assert not make_row(is_completed=True, level=3, max_unlocked_level=2).is_level_completed()
        assert not make_row(is_completed=False, level=1, max_unlocked_level=2).is_level_completed()

    def test_update_progress_accumulates(self):
        row = make_row(points=10, total_points=40, attempts=1, is_completed=False)
        before = row.updated_at

        row.update_progress(points=5, attempts=2, is_completed=True)

        assert row.points == 15
        assert row.total_points == 45
        assert row.attempts == 3
        assert row.is_completed is True
        assert row.updated_at > before


class TestGameLevel:
    def _level(self, **overrides):
        values = dict(game_id="game-escala", level=1, name="Vecinos", activities_count=5,
                      config={"min": 5, "max": 95, "operation": 1, "color": None})
        values.update(overrides)
        return GameLevel(**values)

    def test_config_value(self):
        level = self._level()
        assert level.config_value("operation") == 1
        assert level.config_value("color", "blue") == "blue"
        assert level.config_value("missing") is None

    def test_has_config_key_ignores_null_values(self):
        level = self._level()
        assert level.has_config_key("min")
        assert not level.has_config_key("color")
        assert not level.has_config_key("icon")

    def test_numeric_range(self):
        assert self._level().numeric_range() == {"min": 5, "max": 95}
        assert self._level(config={"min": 5}).numeric_range() is None

    def test_is_valid_configuration(self):
        assert self._level().is_valid_configuration()
        assert not self._level(level=0).is_valid_configuration()
        assert not self._level(activities_count=0).is_valid_configuration()
        assert not self._level(config=["min", "max"]).is_valid_configuration()


def test_profiles_proxy_their_user():
    student = build_student(username="ana.perez")
    teacher = build_teacher(username="profe.luis")

    assert student.username == "ana.perez"
    assert student.role is UserRole.STUDENT
    assert student.password_hash == student.user.password_hash
    assert teacher.username == "profe.luis"
    assert teacher.role is UserRole.TEACHER
