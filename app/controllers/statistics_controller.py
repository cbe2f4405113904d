from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ai_text_generator import GeminiTextGenerator
from app.core.exceptions import NotFoundError, SaveGameStatisticsValidationError, StudentNotFoundError
from app.models.game import Game
from app.models.student import Student
from app.models.student_statistics import StudentStatistics
from app.models.user import utcnow
from app.repositories.contracts import StatisticsStore
from app.schemas.statistics import (
    GameProgressDetail,
    GameStatisticsResponse,
    SaveStatisticsRequest,
    StatisticsOut,
    StudentGameSummary,
    StudentProgressResponse,
    StudentReportResponse,
)
from app.services.progress_calculator import StudentProgressCalculator
from app.services.scoring import full_game_id
from app.services.statistics_aggregator import StudentStatisticsAggregator, round_half_up

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("student_id", "game_id", "level", "activity", "points", "attempts", "is_completed")

# (field, minimum)
MINIMUMS = (
    ("level", 1),
    ("activity", 1),
    ("points", 0),
    ("attempts", 0),
    ("correct_answers", 0),
    ("total_questions", 0),
    ("completion_time", 0),
)

GAME_DISPLAY_NAMES = {
    "ordenamiento": "Ordenamiento",
    "escritura": "Escritura",
    "descomposicion": "Descomposición",
    "escala": "Escala Numérica",
    "calculos": "Cálculos",
}


def _validate(payload: SaveStatisticsRequest) -> None:
    for field in REQUIRED_FIELDS:
        value = getattr(payload, field)
        if value is None or value == "":
            raise SaveGameStatisticsValidationError(f"Field {field} is required")

    for field, minimum in MINIMUMS:
        value = getattr(payload, field)
        if value is not None and value < minimum:
            raise SaveGameStatisticsValidationError(
                f"Field {field} must be greater than or equal to {minimum}"
            )

    if (
        payload.correct_answers is not None
        and payload.total_questions is not None
        and payload.correct_answers > payload.total_questions
    ):
        raise SaveGameStatisticsValidationError("Field correct_answers cannot exceed total_questions")


async def save_statistics(
    db: AsyncSession,
    statistics_repository: StatisticsStore,
    payload: SaveStatisticsRequest,
) -> StudentStatistics:
    """
    Store one attempt.

    total_points accumulates: latest row's total_points + this attempt's points.
    max_unlocked_level defaults to the attempt's level.
    """
    _validate(payload)

    if not await db.get(Student, payload.student_id):
        raise StudentNotFoundError()
    if not await db.get(Game, payload.game_id):
        raise NotFoundError("Game not found")

    latest = await statistics_repository.find_latest(payload.student_id, payload.game_id)
    total_points = (latest.total_points if latest else 0) + payload.points

    now = utcnow()
    row = StudentStatistics(
        student_id=payload.student_id,
        game_id=payload.game_id,
        level=payload.level,
        activity=payload.activity,
        points=payload.points,
        total_points=total_points,
        attempts=payload.attempts,
        correct_answers=payload.correct_answers,
        total_questions=payload.total_questions,
        completion_time=payload.completion_time,
        is_completed=payload.is_completed,
        max_unlocked_level=payload.max_unlocked_level or payload.level,
        created_at=now,
        updated_at=now,
    )
    row = await statistics_repository.save(row)

    logger.info(
        "statistics.saved",
        student_id=row.student_id,
        game_id=row.game_id,
        level=row.level,
        activity=row.activity,
        total_points=row.total_points,
    )
    return row


def _latest_created_at(rows: List[StudentStatistics]) -> Optional[datetime]:
    return max((r.created_at for r in rows), default=None)


async def get_student_progress(
    statistics_repository: StatisticsStore,
    calculator: StudentProgressCalculator,
    student_id: str,
    game_id: Optional[str] = None,
) -> StudentProgressResponse:
    if game_id:
        rows = await statistics_repository.find_by_student_and_game(student_id, game_id)
    else:
        rows = await statistics_repository.find_by_student(student_id)

    groups: dict[str, List[StudentStatistics]] = {}
    for r in rows:
        groups.setdefault(r.game_id, []).append(r)

    game_progress: List[GameProgressDetail] = []
    for gid, game_rows in groups.items():
        game_progress.append(
            GameProgressDetail(
                game_id=gid,
                max_unlocked_level=await calculator.calculate_max_unlocked_level(student_id, gid),
                total_points=sum(r.points for r in game_rows),
                completion_rate=await statistics_repository.get_student_completion_rate(student_id, gid),
                average_accuracy=await statistics_repository.get_student_average_accuracy(student_id, gid),
                last_activity=_latest_created_at(game_rows),
                statistics=[StatisticsOut.model_validate(r) for r in game_rows],
            )
        )

    if game_id:
        total_points = game_progress[0].total_points if game_progress else 0
    else:
        total_points = await statistics_repository.get_student_total_points(student_id)

    return StudentProgressResponse(
        student_id=student_id,
        game_progress=game_progress,
        total_points=total_points,
        total_games_played=len(groups),
    )


async def get_game_statistics(
    db: AsyncSession,
    statistics_repository: StatisticsStore,
    game_id: str,
) -> GameStatisticsResponse:
    overview = await statistics_repository.get_game_statistics(game_id)

    student_progress: List[StudentGameSummary] = []
    for row in await statistics_repository.get_all_students_progress(game_id):
        student = await db.get(Student, row.student_id)
        name = f"{student.name} {student.lastname}" if student else f"Student {row.student_id}"
        student_progress.append(
            StudentGameSummary(
                student_id=row.student_id,
                student_name=name,
                max_unlocked_level=row.max_unlocked_level,
                total_points=await statistics_repository.get_student_total_points_by_game(row.student_id, game_id),
                completion_rate=await statistics_repository.get_student_completion_rate(row.student_id, game_id),
                average_accuracy=await statistics_repository.get_student_average_accuracy(row.student_id, game_id),
                last_activity=row.updated_at,
            )
        )

    return GameStatisticsResponse(game_id=game_id, student_progress=student_progress, **overview)


# ── Pedagogical report ────────────────────────────────────────────────

def _as_aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def build_report_prompt(
    rows: List[StudentStatistics],
    progress_by_game: dict,
    percentages: dict[str, int],
    recent_days: int,
    now: datetime,
) -> str:
    """Prompt for the report. Never includes the student's name."""
    window_start = now - timedelta(days=recent_days)

    per_game = []
    for key, game in progress_by_game.items():
        per_game.append(
            f"- {GAME_DISPLAY_NAMES.get(key, key)}:\n"
            f"  * Actividades completadas: {game.completed}\n"
            f"  * Tiempo total invertido: {round_half_up(game.total_time / 60)} minutos\n"
            f"  * Progreso: {percentages.get(key, 0)}%\n"
            f"  * Total de reintentos: {game.total_attempts}"
        )

    recent = [r for r in rows if _as_aware(r.created_at) >= window_start]
    accuracy = sum(r.accuracy for r in rows) / len(rows) * 100 if rows else 0.0
    last = _latest_created_at(rows)

    return f"""Actuás como tutor de matemática de nivel primario y redactás reportes pedagógicos en español para docentes.

ESTADÍSTICAS POR JUEGO:

{chr(10).join(per_game)}

MÉTRICAS GENERALES:
- Actividades completadas: {sum(1 for r in rows if r.is_completed)}
- Puntos acumulados: {sum(r.points for r in rows)}
- Precisión promedio: {accuracy:.1f}%
- Reintentos: {sum(r.attempts for r in rows)}
- Última actividad: {last.date().isoformat() if last else 'Sin registros'}
- Últimos {recent_days} días: {len(recent)} sesiones, {sum(r.points for r in recent)} puntos

FORMATO DEL REPORTE (usá exactamente estos títulos):

1. **Resumen General del Estudiante**: 2 o 3 oraciones sobre el desempeño global.
2. **🌟 Puntos Fuertes**: juegos con alto progreso, pocos reintentos o tiempo eficiente, con su porcentaje.
3. **⚠️ A Reforzar**: juegos con bajo progreso o muchos reintentos, indicando qué dato muestra la dificultad.
4. **💡 Recomendación**: una sugerencia concreta para el docente, en 2 o 3 oraciones.

Reglas:
- No uses nombres propios; referite siempre a "el estudiante" o "el alumno".
- Citá porcentajes, cantidades de actividades y reintentos.
- Muchos reintentos con bajo progreso sugieren que adivina; poco tiempo con alto progreso indica eficiencia.
- Un párrafo por sección como máximo."""


def _fallback_report(student: Student) -> str:
    return (
        f"No se encontraron estadísticas registradas para {student.name} {student.lastname}. "
        "Pedile al estudiante que complete nuevas actividades para poder generar un informe."
    )


async def generate_student_report(
    db: AsyncSession,
    statistics_repository: StatisticsStore,
    calculator: StudentProgressCalculator,
    aggregator: StudentStatisticsAggregator,
    text_generator: GeminiTextGenerator,
    student_id: str,
    recent_days: int = 7,
) -> StudentReportResponse:
    student = await db.get(Student, student_id)
    if not student:
        raise StudentNotFoundError()

    rows = await statistics_repository.find_by_student(student_id)
    if not rows:
        return StudentReportResponse(
            student_id=student.id,
            student_name=student.name,
            student_lastname=student.lastname,
            report=_fallback_report(student),
        )

    summary = aggregator.aggregate(rows)
    percentages = {}
    for key in summary.progress_by_game:
        progress = await calculator.calculate_student_progress(student_id, full_game_id(key))
        percentages[key] = round_half_up(progress.percentage)

    prompt = build_report_prompt(rows, summary.progress_by_game, percentages, recent_days, utcnow())
    report = await text_generator.generate_text(prompt)

    logger.info("report.generated", student_id=student_id, games=len(percentages), chars=len(report))
    return StudentReportResponse(
        student_id=student.id,
        student_name=student.name,
        student_lastname=student.lastname,
        report=report,
    )
