"""Statistics controller: saving attempts, progress views and reports."""

import json

import httpx
import pytest

from app.controllers import statistics_controller
from app.core.ai_text_generator import GeminiTextGenerator
from app.core.exceptions import (
    AiServiceNotConfiguredError,
    NotFoundError,
    SaveGameStatisticsValidationError,
    StudentNotFoundError,
)
from app.repositories.game_level_repository import GameLevelRepository
from app.repositories.statistics_repository import StatisticsRepository
from app.schemas.statistics import SaveStatisticsRequest
from app.services.progress_calculator import StudentProgressCalculator
from app.services.statistics_aggregator import StudentStatisticsAggregator
from tests.fakes import BASE_TIME, build_game, build_levels, build_student, make_row

pytestmark = pytest.mark.anyio


@pytest.fixture
async def seeded(db):
    db.add_all([
        build_student("student-1", username="ana", name="Ana", lastname="Pérez"),
        build_game("escritura"),
        build_game("calculos"),
        *build_levels("escritura", [5, 5]),
        *build_levels("calculos", [5, 5, 5, 5]),
    ])
    await db.commit()
    return db


@pytest.fixture
def repo(seeded):
    return StatisticsRepository(seeded)


@pytest.fixture
def calculator(repo, seeded):
    return StudentProgressCalculator(repo, GameLevelRepository(seeded))


def _attempt(**overrides) -> SaveStatisticsRequest:
    values = dict(
        student_id="student-1",
        game_id="game-escritura",
        level=1,
        activity=1,
        points=10,
        attempts=1,
        is_completed=True,
    )
    values.update(overrides)
    return SaveStatisticsRequest(**values)


class TestSaveStatistics:
    @pytest.mark.parametrize("missing", ["student_id", "game_id", "level", "activity", "points", "attempts", "is_completed"])
    async def test_required_fields(self, seeded, repo, missing):
        with pytest.raises(SaveGameStatisticsValidationError) as exc:
            await statistics_controller.save_statistics(seeded, repo, _attempt(**{missing: None}))

        assert exc.value.status_code == 400
        assert exc.value.message == f"Field {missing} is required"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("level", 0),
            ("activity", 0),
            ("points", -1),
            ("attempts", -2),
            ("correct_answers", -1),
            ("total_questions", -3),
            ("completion_time", -5),
        ],
    )
    async def test_minimums(self, seeded, repo, field, value):
        with pytest.raises(SaveGameStatisticsValidationError):
            await statistics_controller.save_statistics(seeded, repo, _attempt(**{field: value}))

    async def test_more_correct_answers_than_questions(self, seeded, repo):
        with pytest.raises(SaveGameStatisticsValidationError) as exc:
            await statistics_controller.save_statistics(
                seeded, repo, _attempt(correct_answers=5, total_questions=2)
            )

        assert exc.value.message == "Field correct_answers cannot exceed total_questions"
        assert await repo.find_latest("student-1", "game-escritura") is None

    async def test_false_completion_is_accepted(self, seeded, repo):
        row = await statistics_controller.save_statistics(seeded, repo, _attempt(is_completed=False, points=0))

        assert row.is_completed is False

    async def test_total_points_accumulate_per_game(self, seeded, repo):
        await statistics_controller.save_statistics(seeded, repo, _attempt(points=10))
        await statistics_controller.save_statistics(seeded, repo, _attempt(points=5, activity=2))
        other = await statistics_controller.save_statistics(
            seeded, repo, _attempt(game_id="game-calculos", points=3)
        )
        latest = await repo.find_latest("student-1", "game-escritura")

        assert latest.total_points == 15
        assert latest.activity == 2
        assert other.total_points == 3

    async def test_max_unlocked_level_defaults_to_level(self, seeded, repo):
        row = await statistics_controller.save_statistics(seeded, repo, _attempt(level=2))
        explicit = await statistics_controller.save_statistics(
            seeded, repo, _attempt(level=2, max_unlocked_level=3)
        )

        assert row.max_unlocked_level == 2
        assert explicit.max_unlocked_level == 3

    async def test_unknown_student_or_game(self, seeded, repo):
        with pytest.raises(StudentNotFoundError):
            await statistics_controller.save_statistics(seeded, repo, _attempt(student_id="ghost"))
        with pytest.raises(NotFoundError):
            await statistics_controller.save_statistics(seeded, repo, _attempt(game_id="game-nope"))


class TestStudentProgress:
    async def test_groups_rows_per_game(self, seeded, repo, calculator):
        for activity in (1, 2, 3, 4, 5):
            await statistics_controller.save_statistics(seeded, repo, _attempt(activity=activity, points=2))
        await statistics_controller.save_statistics(
            seeded, repo, _attempt(game_id="game-calculos", points=4, correct_answers=4, total_questions=5)
        )

        result = await statistics_controller.get_student_progress(repo, calculator, "student-1")
        by_game = {g.game_id: g for g in result.game_progress}

        assert result.total_games_played == 2
        assert by_game["game-escritura"].total_points == 10
        assert by_game["game-escritura"].max_unlocked_level == 2
        assert by_game["game-escritura"].completion_rate == 100.0
        assert len(by_game["game-escritura"].statistics) == 5
        assert by_game["game-calculos"].average_accuracy == pytest.approx(80.0)

    async def test_single_game_view(self, seeded, repo, calculator):
        await statistics_controller.save_statistics(seeded, repo, _attempt(points=7))
        await statistics_controller.save_statistics(seeded, repo, _attempt(game_id="game-calculos", points=3))

        result = await statistics_controller.get_student_progress(
            repo, calculator, "student-1", "game-calculos"
        )

        assert [g.game_id for g in result.game_progress] == ["game-calculos"]
        assert result.total_points == 3

    async def test_student_without_rows(self, repo, calculator):
        result = await statistics_controller.get_student_progress(repo, calculator, "student-1")

        assert result.game_progress == []
        assert result.total_points == 0


class TestGameStatistics:
    async def test_uses_student_names(self, seeded, repo):
        await statistics_controller.save_statistics(seeded, repo, _attempt(points=10))

        result = await statistics_controller.get_game_statistics(seeded, repo, "game-escritura")

        assert result.total_students == 1
        assert result.student_progress[0].student_name == "Ana Pérez"
        assert result.student_progress[0].total_points == 10


class TestReport:
    def _generator(self, seen: dict) -> GeminiTextGenerator:
        def handler(request: httpx.Request) -> httpx.Response:
            seen["prompt"] = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Informe listo"}]}}]})

        return GeminiTextGenerator(api_key="test-key", transport=httpx.MockTransport(handler))

    async def _report(self, seeded, repo, calculator, generator, student_id="student-1"):
        return await statistics_controller.generate_student_report(
            seeded, repo, calculator, StudentStatisticsAggregator(), generator, student_id
        )

    async def test_fallback_without_statistics(self, seeded, repo, calculator):
        result = await self._report(seeded, repo, calculator, GeminiTextGenerator(api_key=None))

        assert result.student_name == "Ana"
        assert result.student_lastname == "Pérez"
        assert "No se encontraron estadísticas" in result.report

    async def test_unknown_student(self, seeded, repo, calculator):
        with pytest.raises(StudentNotFoundError):
            await self._report(seeded, repo, calculator, GeminiTextGenerator(api_key=None), "ghost")

    async def test_missing_api_key(self, seeded, repo, calculator):
        await statistics_controller.save_statistics(seeded, repo, _attempt())

        with pytest.raises(AiServiceNotConfiguredError) as exc:
            await self._report(seeded, repo, calculator, GeminiTextGenerator(api_key=None))

        assert exc.value.status_code == 503

    async def test_prompt_carries_progress_but_not_the_name(self, seeded, repo, calculator):
        for activity in (1, 2, 3, 4, 5, 6, 7, 8):
            level, act = (1, activity) if activity <= 5 else (2, activity - 5)
            await statistics_controller.save_statistics(seeded, repo, _attempt(level=level, activity=act))
        seen = {}

        result = await self._report(seeded, repo, calculator, self._generator(seen))

        assert result.report == "Informe listo"
        assert "Escritura" in seen["prompt"]
        assert "Progreso: 80%" in seen["prompt"]
        assert "Ana" not in seen["prompt"]
        assert "Pérez" not in seen["prompt"]


def test_prompt_sections_and_window():
    rows = [
        make_row(game_id="game-calculos", total_questions=10, correct_answers=5, completion_time=600),
        make_row(game_id="game-escala", attempts=4, is_completed=False, created_at=BASE_TIME.replace(month=1)),
    ]
    summary = StudentStatisticsAggregator().aggregate(rows)

    prompt = statistics_controller.build_report_prompt(
        rows, summary.progress_by_game, {"calculos": 50, "escala": 0}, 7, BASE_TIME
    )

    for heading in ("Resumen General del Estudiante", "🌟 Puntos Fuertes", "⚠️ A Reforzar", "💡 Recomendación"):
        assert heading in prompt
    assert "Cálculos" in prompt
    assert "Tiempo total invertido: 10 minutos" in prompt
    assert "Actividades completadas: 10" in prompt
    assert "Últimos 7 días: 1 sesiones" in prompt
