from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers import student_controller
from app.core.database import get_db
from app.core.dependencies import CurrentUser, get_current_admin, get_current_student
from app.schemas.auth import MessageResponse
from app.schemas.student import (
    AssignCourseRequest,
    StudentCreate,
    StudentGameOut,
    StudentOut,
    StudentUpdate,
)

router = APIRouter(prefix="/students", tags=["Students"])


# ─────────────────────────────────────────────────────────────
# STUDENT (self)
# ─────────────────────────────────────────────────────────────

@router.get("/me/games", response_model=list[StudentGameOut])
async def my_games(
    current: CurrentUser = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    return await student_controller.get_student_games(db, current.id)


# ─────────────────────────────────────────────────────────────
# ADMIN
# ─────────────────────────────────────────────────────────────

@router.get("", response_model=list[StudentOut])
async def list_students(
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await student_controller.list_students(db)


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await student_controller.create_student(db, payload)


@router.put("/{student_id}", response_model=StudentOut)
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await student_controller.update_student(db, student_id, payload)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    await student_controller.set_student_enabled(db, student_id, False)
    return MessageResponse(message="Student disabled")


@router.patch("/{student_id}/enable", response_model=StudentOut)
async def enable_student(
    student_id: str,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await student_controller.set_student_enabled(db, student_id, True)


@router.post("/{student_id}/courses", response_model=StudentOut)
async def assign_course(
    student_id: str,
    payload: AssignCourseRequest,
    _: CurrentUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await student_controller.assign_course(db, student_id, payload.course_id)
