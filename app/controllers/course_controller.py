from typing import List

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AlreadyExistsError,
    CourseNotFoundError,
    NotFoundError,
    TeacherNotFoundError,
)
from app.models.course import Course, CourseGame
from app.models.game import Game
from app.models.student import Student
from app.models.teacher import Teacher
from app.repositories.contracts import StatisticsStore
from app.schemas.course import (
    CourseCreate,
    CourseGameOut,
    CourseOut,
    CourseStatisticsResponse,
    CourseStudentOut,
    CourseStudentsResponse,
    CourseUpdate,
    GameProgressOut,
    GameProgressSummary,
)
from app.services.progress_calculator import StudentProgressCalculator
from app.services.scoring import normalize_game_id
from app.services.statistics_aggregator import (
    GameProgress,
    StudentStatisticsAggregator,
    round_half_up,
)

logger = structlog.get_logger(__name__)


def _course_out(c: Course) -> CourseOut:
    return CourseOut(
        id=c.id,
        name=c.name,
        teacher_id=c.teacher_id,
        teacher_name=f"{c.teacher.name} {c.teacher.surname}" if c.teacher else None,
        created_at=c.created_at,
    )


def _course_game_out(cg: CourseGame) -> CourseGameOut:
    return CourseGameOut(
        id=cg.id,
        course_id=cg.course_id,
        game_id=cg.game_id,
        game_name=cg.game.name,
        description=cg.game.description,
        image_url=cg.game.image_url,
        route=cg.game.route,
        is_enabled=cg.is_enabled,
        order_index=cg.order_index,
    )


async def get_course(db: AsyncSession, course_id: str) -> Course:
    course = await db.get(Course, course_id)
    if not course:
        raise CourseNotFoundError()
    return course


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: str | None = None) -> None:
    q = select(Course.id).where(Course.name == name)
    if exclude_id:
        q = q.where(Course.id != exclude_id)
    if (await db.execute(q)).first() is not None:
        raise AlreadyExistsError("A course with that name already exists")


async def list_courses(db: AsyncSession) -> List[CourseOut]:
    courses = (await db.execute(select(Course).order_by(Course.name))).scalars().all()
    return [_course_out(c) for c in courses]


async def create_course(db: AsyncSession, payload: CourseCreate) -> CourseOut:
    name = payload.name.strip()
    await _ensure_name_free(db, name)

    if payload.teacher_id and not await db.get(Teacher, payload.teacher_id):
        raise TeacherNotFoundError()

    course = Course(name=name, teacher_id=payload.teacher_id or None)
    db.add(course)
    await db.flush()

    # every game is attached, disabled, in catalogue order
    games = (await db.execute(select(Game).order_by(Game.created_at, Game.id))).scalars().all()
    for i, game in enumerate(games):
        db.add(CourseGame(course_id=course.id, game_id=game.id, is_enabled=False, order_index=i))

    await db.commit()
    await db.refresh(course)
    logger.info("course.created", course_id=course.id, games=len(games))
    return _course_out(course)


async def update_course(db: AsyncSession, course_id: str, payload: CourseUpdate) -> CourseOut:
    course = await get_course(db, course_id)
    name = payload.name.strip()
    await _ensure_name_free(db, name, exclude_id=course.id)

    course.name = name
    await db.commit()
    await db.refresh(course)
    return _course_out(course)


async def delete_course(db: AsyncSession, course_id: str) -> None:
    course = await get_course(db, course_id)

    await db.execute(update(Student).where(Student.course_id == course.id).values(course_id=None))
    await db.execute(delete(CourseGame).where(CourseGame.course_id == course.id))
    await db.delete(course)
    await db.commit()
    logger.info("course.deleted", course_id=course_id)


async def add_game_to_course(db: AsyncSession, course_id: str, game_id: str) -> CourseGameOut:
    """Enable `game_id` for the course, appending it when it was never attached."""
    await get_course(db, course_id)
    if not await db.get(Game, game_id):
        raise NotFoundError("Game not found")

    cg = (
        await db.execute(
            select(CourseGame).where(CourseGame.course_id == course_id, CourseGame.game_id == game_id)
        )
    ).scalar_one_or_none()

    if cg is None:
        next_order = (
            await db.execute(
                select(func.coalesce(func.max(CourseGame.order_index) + 1, 0)).where(
                    CourseGame.course_id == course_id
                )
            )
        ).scalar()
        cg = CourseGame(course_id=course_id, game_id=game_id, is_enabled=True, order_index=next_order)
        db.add(cg)
    else:
        cg.is_enabled = True

    await db.commit()
    await db.refresh(cg)
    logger.info("course.game_enabled", course_id=course_id, game_id=game_id)
    return _course_game_out(cg)


async def set_course_game_status(db: AsyncSession, course_game_id: str, is_enabled: bool) -> CourseGameOut:
    cg = await db.get(CourseGame, course_game_id)
    if not cg:
        raise NotFoundError("Course game not found")

    cg.is_enabled = is_enabled
    await db.commit()
    await db.refresh(cg)
    return _course_game_out(cg)


async def _course_games(db: AsyncSession, course_id: str, only_enabled: bool = False) -> List[CourseGame]:
    q = select(CourseGame).where(CourseGame.course_id == course_id)
    if only_enabled:
        q = q.where(CourseGame.is_enabled.is_(True))
    return list((await db.execute(q.order_by(CourseGame.order_index))).scalars().all())


async def _course_students(db: AsyncSession, course_id: str) -> List[Student]:
    q = select(Student).where(Student.course_id == course_id).order_by(Student.lastname, Student.name)
    return list((await db.execute(q)).scalars().all())


async def get_course_games(db: AsyncSession, course_id: str) -> List[CourseGameOut]:
    await get_course(db, course_id)
    return [_course_game_out(cg) for cg in await _course_games(db, course_id)]


async def count_enabled_games(db: AsyncSession, course_id: str) -> int:
    return len(await _course_games(db, course_id, only_enabled=True))


async def get_course_students(
    db: AsyncSession,
    course_id: str,
    statistics_repository: StatisticsStore,
    calculator: StudentProgressCalculator,
    aggregator: StudentStatisticsAggregator,
) -> CourseStudentsResponse:
    """
    Every student of the course with their aggregated statistics.

    Each course game gets an entry in `progress_by_game`, even if never played;
    its `average_score` is the calculator's completion percentage.
    """
    await get_course(db, course_id)
    game_ids = [cg.game_id for cg in await _course_games(db, course_id)]

    out: List[CourseStudentOut] = []
    for student in await _course_students(db, course_id):
        rows = await statistics_repository.find_by_student(student.id)
        summary = aggregator.aggregate(rows)

        progress_by_game: dict[str, GameProgressOut] = {}
        for game_id in game_ids:
            key = normalize_game_id(game_id)
            game = summary.progress_by_game.get(key, GameProgress())
            progress = await calculator.calculate_student_progress(student.id, game_id)
            progress_by_game[key] = GameProgressOut(
                completed=game.completed,
                total_time=game.total_time,
                average_score=round_half_up(progress.percentage),
                total_attempts=game.total_attempts,
            )

        out.append(
            CourseStudentOut(
                id=student.id,
                name=student.name,
                lastname=student.lastname,
                username=student.username,
                enrollment_date=student.created_at.date() if student.created_at else None,
                total_games_played=summary.total_games_played,
                average_score=summary.average_score,
                last_activity=summary.last_activity,
                progress_by_game=progress_by_game,
            )
        )

    return CourseStudentsResponse(course_id=course_id, students=out)


async def get_course_statistics(
    db: AsyncSession,
    course_id: str,
    calculator: StudentProgressCalculator,
) -> CourseStatisticsResponse:
    """Average completion per course game across the course's students."""
    await get_course(db, course_id)
    students = await _course_students(db, course_id)
    course_games = await _course_games(db, course_id)

    summaries: List[GameProgressSummary] = []
    for cg in course_games:
        total_activities = await calculator.level_repository.get_total_activities_count(cg.game_id)
        if total_activities <= 0:
            summaries.append(
                GameProgressSummary(
                    game_id=normalize_game_id(cg.game_id),
                    average_progress=0,
                    total_students=len(students),
                    students_with_progress=0,
                )
            )
            continue

        percentages = [
            (await calculator.calculate_student_progress(s.id, cg.game_id)).percentage
            for s in students
        ]
        summaries.append(
            GameProgressSummary(
                game_id=normalize_game_id(cg.game_id),
                average_progress=round_half_up(sum(percentages) / len(percentages)) if percentages else 0,
                total_students=len(students),
                students_with_progress=sum(1 for p in percentages if p > 0),
            )
        )

    return CourseStatisticsResponse(
        course_id=course_id,
        total_students=len(students),
        progress_by_game=summaries,
    )
