from typing import Any

from sqlalchemy import Float, case, cast, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.student_statistics import StudentStatistics
from app.repositories.contracts import LastCompletedActivity


def _accuracy_expr():
    # NULLIF keeps rows without questions out of AVG()
    return (
        cast(StudentStatistics.correct_answers, Float)
        / func.nullif(StudentStatistics.total_questions, 0)
    )


def _completed_expr():
    return func.sum(case((StudentStatistics.is_completed.is_(True), 1), else_=0))


class StatisticsRepository:
    """SQLAlchemy-backed statistics store. Rows are append-only attempts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _pair(self, student_id: str, game_id: str):
        return (
            StudentStatistics.student_id == student_id,
            StudentStatistics.game_id == game_id,
        )

    async def save(self, statistics: StudentStatistics) -> StudentStatistics:
        self.db.add(statistics)
        await self.db.flush()
        await self.db.refresh(statistics)
        return statistics

    async def find_latest(self, student_id: str, game_id: str) -> StudentStatistics | None:
        q = (
            select(StudentStatistics)
            .where(*self._pair(student_id, game_id))
            .order_by(StudentStatistics.created_at.desc())
            .limit(1)
        )
        return (await self.db.execute(q)).scalars().first()

    async def find_by_student(self, student_id: str) -> list[StudentStatistics]:
        q = (
            select(StudentStatistics)
            .where(StudentStatistics.student_id == student_id)
            .order_by(
                StudentStatistics.game_id,
                StudentStatistics.level,
                StudentStatistics.activity,
                StudentStatistics.created_at.desc(),
            )
        )
        return list((await self.db.execute(q)).scalars().all())

    async def find_by_student_and_game(self, student_id: str, game_id: str) -> list[StudentStatistics]:
        q = (
            select(StudentStatistics)
            .where(*self._pair(student_id, game_id))
            .order_by(
                StudentStatistics.level,
                StudentStatistics.activity,
                StudentStatistics.created_at.desc(),
            )
        )
        return list((await self.db.execute(q)).scalars().all())

    async def get_last_completed_activity(
        self, student_id: str, game_id: str
    ) -> LastCompletedActivity | None:
        # Furthest row reached, completed or not
        q = (
            select(StudentStatistics.level, StudentStatistics.activity)
            .where(*self._pair(student_id, game_id))
            .order_by(StudentStatistics.level.desc(), StudentStatistics.activity.desc())
            .limit(1)
        )
        row = (await self.db.execute(q)).first()
        if row is None:
            return None
        return LastCompletedActivity(level=row.level, activity=row.activity)

    async def get_distinct_completed_activities(self, student_id: str, game_id: str) -> int:
        pairs = (
            select(StudentStatistics.level, StudentStatistics.activity)
            .where(*self._pair(student_id, game_id), StudentStatistics.is_completed.is_(True))
            .distinct()
            .subquery()
        )
        count = (await self.db.execute(select(func.count()).select_from(pairs))).scalar()
        return int(count or 0)

    async def get_student_total_points(self, student_id: str) -> int:
        q = select(func.sum(StudentStatistics.total_points)).where(
            StudentStatistics.student_id == student_id
        )
        return int((await self.db.execute(q)).scalar() or 0)

    async def get_student_total_points_by_game(self, student_id: str, game_id: str) -> int:
        q = select(func.sum(StudentStatistics.total_points)).where(*self._pair(student_id, game_id))
        return int((await self.db.execute(q)).scalar() or 0)

    async def get_student_completion_rate(self, student_id: str, game_id: str) -> float:
        q = select(_completed_expr(), func.count()).where(*self._pair(student_id, game_id))
        completed, total = (await self.db.execute(q)).one()
        if not total:
            return 0.0
        return (completed or 0) / total * 100

    async def get_student_average_accuracy(self, student_id: str, game_id: str) -> float:
        q = select(func.avg(_accuracy_expr())).where(
            *self._pair(student_id, game_id),
            StudentStatistics.total_questions > 0,
        )
        accuracy = (await self.db.execute(q)).scalar()
        return float(accuracy or 0) * 100

    async def get_all_students_progress(self, game_id: str) -> list[StudentStatistics]:
        """One row per student: highest unlocked level, newest first on ties."""
        q = (
            select(StudentStatistics)
            .where(StudentStatistics.game_id == game_id)
            .order_by(
                StudentStatistics.student_id,
                StudentStatistics.max_unlocked_level.desc(),
                StudentStatistics.created_at.desc(),
            )
        )
        rows = (await self.db.execute(q)).scalars().all()

        furthest: dict[str, StudentStatistics] = {}
        for row in rows:
            furthest.setdefault(row.student_id, row)
        return list(furthest.values())

    async def get_game_statistics(self, game_id: str) -> dict[str, Any]:
        per_student_max = (
            select(func.max(StudentStatistics.total_points).label("max_total_points"))
            .where(StudentStatistics.game_id == game_id)
            .group_by(StudentStatistics.student_id)
            .subquery()
        )
        avg_points = (
            await self.db.execute(select(func.avg(per_student_max.c.max_total_points)))
        ).scalar()

        q = select(
            func.count(distinct(StudentStatistics.student_id)),
            func.avg(_accuracy_expr()),
            _completed_expr(),
            func.count(),
        ).where(StudentStatistics.game_id == game_id)
        total_students, avg_accuracy, completed, total_rows = (await self.db.execute(q)).one()

        return {
            "total_students": int(total_students or 0),
            "average_points": float(avg_points or 0),
            "average_accuracy": float(avg_accuracy or 0) * 100,
            "completion_rate": ((completed or 0) / total_rows * 100) if total_rows else 0.0,
        }
