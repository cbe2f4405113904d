from typing import List

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.course_controller import count_enabled_games, get_course, get_course_students
from app.controllers.users import apply_credentials, create_user, ensure_username_available
from app.core.exceptions import AlreadyExistsError, CourseNotFoundError, TeacherNotFoundError
from app.models.course import Course
from app.models.student import Student
from app.models.teacher import Teacher
from app.models.user import UserRole
from app.repositories.contracts import StatisticsStore
from app.schemas.teacher import (
    CourseDetailsStatistics,
    TeacherCourseDetails,
    TeacherCourseOut,
    TeacherCreate,
    TeacherOut,
    TeacherUpdate,
)
from app.services.progress_calculator import StudentProgressCalculator
from app.services.statistics_aggregator import StudentStatisticsAggregator, round_half_up

logger = structlog.get_logger(__name__)


def _clean(v: str) -> str:
    return (v or "").strip()


async def _course_ids(db: AsyncSession, teacher_id: str) -> List[str]:
    q = select(Course.id).where(Course.teacher_id == teacher_id).order_by(Course.name)
    return list((await db.execute(q)).scalars().all())


async def teacher_out(db: AsyncSession, t: Teacher) -> TeacherOut:
    return TeacherOut(
        id=t.id,
        name=t.name,
        surname=t.surname,
        email=t.email,
        username=t.username,
        enable=t.enable,
        created_at=t.created_at,
        course_ids=await _course_ids(db, t.id),
    )


async def get_teacher(db: AsyncSession, teacher_id: str) -> Teacher:
    t = await db.get(Teacher, teacher_id)
    if not t:
        raise TeacherNotFoundError()
    return t


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: str | None = None) -> None:
    q = select(Teacher.id).where(Teacher.email == email)
    if exclude_id:
        q = q.where(Teacher.id != exclude_id)
    if (await db.execute(q)).first() is not None:
        raise AlreadyExistsError(f"Duplicate email: {email}")


async def _assign(db: AsyncSession, teacher_id: str, course_ids: List[str]) -> None:
    """Give `course_ids` to the teacher. All ids are checked before any change."""
    unique_ids = list(dict.fromkeys(course_ids))
    if unique_ids:
        found = (await db.execute(select(Course.id).where(Course.id.in_(unique_ids)))).scalars().all()
        missing = set(unique_ids) - set(found)
        if missing:
            raise CourseNotFoundError(f"Course not found: {', '.join(sorted(missing))}")

        await db.execute(update(Course).where(Course.id.in_(unique_ids)).values(teacher_id=teacher_id))


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherOut:
    email = str(payload.email).strip().lower()
    await _ensure_email_free(db, email)

    user = await create_user(db, _clean(payload.username), payload.password, UserRole.TEACHER)
    t = Teacher(user=user, name=_clean(payload.name), surname=_clean(payload.surname), email=email)
    db.add(t)
    await db.commit()
    await db.refresh(t)

    logger.info("teacher.created", teacher_id=t.id, username=user.username)
    return await teacher_out(db, t)


async def list_teachers(db: AsyncSession) -> List[TeacherOut]:
    teachers = (await db.execute(select(Teacher).order_by(Teacher.surname, Teacher.name))).scalars().all()
    return [await teacher_out(db, t) for t in teachers]


async def update_teacher(db: AsyncSession, teacher_id: str, payload: TeacherUpdate) -> TeacherOut:
    t = await get_teacher(db, teacher_id)

    email = str(payload.email).strip().lower()
    await _ensure_email_free(db, email, exclude_id=t.id)

    username = _clean(payload.username)
    await ensure_username_available(db, username, exclude_user_id=t.user_id)
    apply_credentials(t.user, username, payload.password)

    t.name = _clean(payload.name)
    t.surname = _clean(payload.surname)
    t.email = email

    if payload.course_ids is not None:
        await db.execute(
            update(Course)
            .where(Course.teacher_id == t.id, Course.id.not_in(payload.course_ids))
            .values(teacher_id=None)
        )
        await _assign(db, t.id, payload.course_ids)

    await db.commit()
    await db.refresh(t)
    logger.info("teacher.updated", teacher_id=t.id)
    return await teacher_out(db, t)


async def set_teacher_enabled(db: AsyncSession, teacher_id: str, enabled: bool) -> TeacherOut:
    t = await get_teacher(db, teacher_id)
    t.enable = enabled
    await db.commit()
    await db.refresh(t)
    logger.info("teacher.enabled" if enabled else "teacher.disabled", teacher_id=t.id)
    return await teacher_out(db, t)


async def assign_courses(db: AsyncSession, teacher_id: str, course_ids: List[str]) -> TeacherOut:
    t = await get_teacher(db, teacher_id)
    await _assign(db, t.id, course_ids)
    await db.commit()
    logger.info("teacher.courses_assigned", teacher_id=t.id, course_ids=course_ids)
    return await teacher_out(db, t)


async def get_teacher_courses(db: AsyncSession, teacher_id: str) -> List[TeacherCourseOut]:
    await get_teacher(db, teacher_id)
    q = (
        select(Course.id, Course.name, func.count(Student.id))
        .outerjoin(Student, Student.course_id == Course.id)
        .where(Course.teacher_id == teacher_id)
        .group_by(Course.id, Course.name)
        .order_by(Course.name)
    )
    rows = (await db.execute(q)).all()
    return [TeacherCourseOut(id=r[0], name=r[1], total_students=r[2]) for r in rows]


async def get_course_details(
    db: AsyncSession,
    course_id: str,
    statistics_repository: StatisticsStore,
    calculator: StudentProgressCalculator,
    aggregator: StudentStatisticsAggregator,
) -> TeacherCourseDetails:
    """
    Dashboard header for one course.

    average_progress: per student, the rounded mean of their per-game
    progress; then the rounded mean over students.
    """
    course = await get_course(db, course_id)
    students = (
        await get_course_students(db, course_id, statistics_repository, calculator, aggregator)
    ).students

    per_student = []
    for s in students:
        scores = [g.average_score for g in s.progress_by_game.values()]
        per_student.append(round_half_up(sum(scores) / len(scores)) if scores else 0)

    average = round_half_up(sum(per_student) / len(per_student)) if per_student else 0

    return TeacherCourseDetails(
        id=course.id,
        name=course.name,
        statistics=CourseDetailsStatistics(
            total_students=len(students),
            active_games=await count_enabled_games(db, course_id),
            average_progress=average,
        ),
    )
