from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers import teacher_controller
from app.core.database import get_db
from app.core.dependencies import (
    CurrentUser,
    get_aggregator,
    get_current_admin,
    get_current_teacher,
    get_progress_calculator,
    get_statistics_repository,
)
from app.repositories.statistics_repository import StatisticsRepository
from app.schemas.auth import MessageResponse
from app.schemas.teacher import (
    AssignCoursesRequest,
    TeacherCourseDetails,
    TeacherCourseOut,
    TeacherCreate,
    TeacherOut,
    TeacherUpdate,
)
from app.services.progress_calculator import StudentProgressCalculator
from app.services.statistics_aggregator import StudentStatisticsAggregator

router = APIRouter(prefix="/teachers", tags=["Teachers"])


# ─────────────────────────────────────────────────────────────
# TEACHER (self)
# ─────────────────────────────────────────────────────────────

@router.get("/me/courses", response_model=list[TeacherCourseOut])
async def my_courses(
    current: CurrentUser = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await teacher_controller.get_teacher_courses(db, current.id)


@router.get("/me/courses/{course_id}", response_model=TeacherCourseDetails)
async def my_course_details(
    course_id: str,
    _: CurrentUser = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
    calculator: StudentProgressCalculator = Depends(get_progress_calculator),
    aggregator: StudentStatisticsAggregator = Depends(get_aggregator),
):
    return await teacher_controller.get_course_details(
        db, course_id, statistics_repository, calculator, aggregator
    )


# ─────────────────────────────────────────────────────────────
# ADMIN
# ─────────────────────────────────────────────────────────────

@router.get("", response_model=list[TeacherOut])
async def list_teachers(
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await teacher_controller.list_teachers(db)


@router.post("", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherCreate,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await teacher_controller.create_teacher(db, payload)


@router.put("/{teacher_id}", response_model=TeacherOut)
async def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await teacher_controller.update_teacher(db, teacher_id, payload)


@router.delete("/{teacher_id}", response_model=MessageResponse)
async def delete_teacher(
    teacher_id: str,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await teacher_controller.set_teacher_enabled(db, teacher_id, False)
    return MessageResponse(message="Teacher disabled")


@router.patch("/{teacher_id}/enable", response_model=TeacherOut)
async def enable_teacher(
    teacher_id: str,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await teacher_controller.set_teacher_enabled(db, teacher_id, True)


@router.post("/{teacher_id}/courses", response_model=TeacherOut)
async def assign_courses(
    teacher_id: str,
    payload: AssignCoursesRequest,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await teacher_controller.assign_courses(db, teacher_id, payload.course_ids)
