from typing import List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.users import apply_credentials, create_user, ensure_username_available
from app.core.exceptions import AlreadyExistsError, CourseNotFoundError, StudentNotFoundError
from app.models.course import Course, CourseGame
from app.models.student import Student
from app.models.user import UserRole
from app.schemas.student import StudentCreate, StudentGameOut, StudentUpdate

logger = structlog.get_logger(__name__)


def _clean(v: str) -> str:
    return (v or "").strip()


async def get_student(db: AsyncSession, student_id: str) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise StudentNotFoundError()
    return student


async def _ensure_course_exists(db: AsyncSession, course_id: str) -> None:
    if not await db.get(Course, course_id):
        raise CourseNotFoundError()


async def create_student(db: AsyncSession, payload: StudentCreate) -> Student:
    dni = _clean(payload.dni)
    existing = (await db.execute(select(Student.id).where(Student.dni == dni))).first()
    if existing:
        raise AlreadyExistsError(f"Duplicate DNI: {dni}")

    user = await create_user(db, _clean(payload.username), payload.password, UserRole.STUDENT)
    s = Student(
        user=user,
        name=_clean(payload.name),
        lastname=_clean(payload.lastname),
        dni=dni,
    )
    db.add(s)
    await db.commit()
    await db.refresh(s)

    logger.info("student.created", student_id=s.id, username=user.username)
    return s


async def list_students(db: AsyncSession) -> List[Student]:
    q = select(Student).order_by(Student.lastname, Student.name)
    return list((await db.execute(q)).scalars().all())


async def update_student(db: AsyncSession, student_id: str, payload: StudentUpdate) -> Student:
    s = await get_student(db, student_id)

    username = _clean(payload.username)
    await ensure_username_available(db, username, exclude_user_id=s.user_id)
    apply_credentials(s.user, username, payload.password)

    if payload.course_id:
        await _ensure_course_exists(db, payload.course_id)

    s.name = _clean(payload.name)
    s.lastname = _clean(payload.lastname)
    s.course_id = payload.course_id or None

    await db.commit()
    await db.refresh(s)
    logger.info("student.updated", student_id=s.id)
    return s


async def set_student_enabled(db: AsyncSession, student_id: str, enabled: bool) -> Student:
    """Soft delete (enabled=False) or re-enable. Statistics rows are kept."""
    s = await get_student(db, student_id)
    s.enable = enabled
    await db.commit()
    await db.refresh(s)
    logger.info("student.enabled" if enabled else "student.disabled", student_id=s.id)
    return s


async def assign_course(db: AsyncSession, student_id: str, course_id: str) -> Student:
    s = await get_student(db, student_id)
    await _ensure_course_exists(db, course_id)

    s.course_id = course_id
    await db.commit()
    await db.refresh(s)
    logger.info("student.course_assigned", student_id=s.id, course_id=course_id)
    return s


async def get_student_games(db: AsyncSession, student_id: str) -> List[StudentGameOut]:
    """Enabled games of the student's course, in course order."""
    s = await get_student(db, student_id)
    if not s.course_id:
        return []

    q = (
        select(CourseGame)
        .where(CourseGame.course_id == s.course_id, CourseGame.is_enabled.is_(True))
        .order_by(CourseGame.order_index)
    )
    course_games = (await db.execute(q)).scalars().all()

    return [
        StudentGameOut(
            id=cg.game.id,
            name=cg.game.name,
            description=cg.game.description,
            image_url=cg.game.image_url,
            route=cg.game.route,
            difficulty_level=cg.game.difficulty_level,
            order_index=cg.order_index,
        )
        for cg in course_games
        if cg.game.is_active
    ]
