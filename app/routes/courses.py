from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers import course_controller
from app.core.database import get_db
from app.core.dependencies import (
    CurrentUser,
    get_aggregator,
    get_current_admin,
    get_progress_calculator,
    get_statistics_repository,
    get_teacher_or_admin,
)
from app.repositories.statistics_repository import StatisticsRepository
from app.schemas.auth import MessageResponse
from app.schemas.course import (
    AddGameRequest,
    CourseCreate,
    CourseGameOut,
    CourseGameStatusUpdate,
    CourseOut,
    CourseStatisticsResponse,
    CourseStudentsResponse,
    CourseUpdate,
)
from app.services.progress_calculator import StudentProgressCalculator
from app.services.statistics_aggregator import StudentStatisticsAggregator

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get("", response_model=list[CourseOut])
async def list_courses(
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_controller.list_courses(db)


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_controller.create_course(db, payload)


@router.put("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_controller.update_course(db, course_id, payload)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await course_controller.delete_course(db, course_id)
    return MessageResponse(message="Course deleted")


# ─────────────────────────────────────────────────────────────
# COURSE GAMES
# ─────────────────────────────────────────────────────────────

@router.patch("/games/{course_game_id}/status", response_model=CourseGameOut)
async def set_course_game_status(
    course_game_id: str,
    payload: CourseGameStatusUpdate,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_controller.set_course_game_status(db, course_game_id, payload.is_enabled)


@router.get("/{course_id}/games", response_model=list[CourseGameOut])
async def course_games(
    course_id: str,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_controller.get_course_games(db, course_id)


@router.post("/{course_id}/games", response_model=CourseGameOut)
async def add_game(
    course_id: str,
    payload: AddGameRequest,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return await course_controller.add_game_to_course(db, course_id, payload.game_id)


# ─────────────────────────────────────────────────────────────
# STUDENTS + PROGRESS
# ─────────────────────────────────────────────────────────────

@router.get("/{course_id}/students", response_model=CourseStudentsResponse)
async def course_students(
    course_id: str,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
    calculator: StudentProgressCalculator = Depends(get_progress_calculator),
    aggregator: StudentStatisticsAggregator = Depends(get_aggregator),
):
    return await course_controller.get_course_students(
        db, course_id, statistics_repository, calculator, aggregator
    )


@router.get("/{course_id}/statistics", response_model=CourseStatisticsResponse)
async def course_statistics(
    course_id: str,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
    calculator: StudentProgressCalculator = Depends(get_progress_calculator),
):
    return await course_controller.get_course_statistics(db, course_id, calculator)
