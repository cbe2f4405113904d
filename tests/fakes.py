"""In-memory stores and model builders shared by the tests."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.core.security import create_access_token, hash_password
from app.models import Course, CourseGame, Game, GameLevel, Student, StudentStatistics, Teacher, User, UserRole
from app.repositories.contracts import LastCompletedActivity

PASSWORD = "secret123"
# bcrypt is slow; hash once for every seeded account
PASSWORD_HASH = hash_password(PASSWORD)

BASE_TIME = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


class StoreFailure(RuntimeError):
    pass


class _FailingStore:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def _call(self, name: str):
        self.calls.append(name)
        if name in self.fail_on:
            raise StoreFailure(f"{name} unavailable")


class FakeStatisticsStore(_FailingStore):
    def __init__(self, last_activity=None, distinct_completed=0, rows=(), fail_on=()):
        super().__init__(fail_on)
        self.last_activity = (
            LastCompletedActivity(*last_activity) if isinstance(last_activity, tuple) else last_activity
        )
        self.distinct_completed = distinct_completed
        self.rows = list(rows)

    async def get_last_completed_activity(self, student_id, game_id):
        self._call("get_last_completed_activity")
        return self.last_activity

    async def get_distinct_completed_activities(self, student_id, game_id):
        self._call("get_distinct_completed_activities")
        return self.distinct_completed

    async def find_by_student(self, student_id):
        self._call("find_by_student")
        return [r for r in self.rows if r.student_id == student_id]


class FakeLevelStore(_FailingStore):
    """`levels` is a list of (level, activities_count) pairs."""

    def __init__(self, levels=(), fail_on=()):
        super().__init__(fail_on)
        self.levels = [SimpleNamespace(level=lv, activities_count=count) for lv, count in levels]

    async def find_by_game_id(self, game_id):
        self._call("find_by_game_id")
        return list(self.levels)

    async def get_total_activities_count(self, game_id):
        self._call("get_total_activities_count")
        return sum(lv.activities_count for lv in self.levels)


def make_row(**overrides) -> StudentStatistics:
    """A transient statistics row with every column filled."""
    values = dict(
        student_id="student-1",
        game_id="game-escritura",
        level=1,
        activity=1,
        points=10,
        total_points=10,
        attempts=1,
        correct_answers=None,
        total_questions=None,
        completion_time=None,
        is_completed=True,
        max_unlocked_level=1,
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
    )
    values.update(overrides)
    return StudentStatistics(**values)


def minutes_after_base(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


# ── Persistent builders ───────────────────────────────────────────────

def build_student(
    student_id: str = "student-1",
    username: str = "ana.perez",
    name: str = "Ana",
    lastname: str = "Pérez",
    dni: str = "40123456",
    course_id: str | None = None,
    enable: bool = True,
) -> Student:
    user = User(username=username, password_hash=PASSWORD_HASH, role=UserRole.STUDENT)
    return Student(
        id=student_id,
        user=user,
        name=name,
        lastname=lastname,
        dni=dni,
        course_id=course_id,
        enable=enable,
    )


def build_teacher(
    teacher_id: str = "teacher-1",
    username: str = "profe.luis",
    email: str = "luis@escuela.edu.ar",
    enable: bool = True,
) -> Teacher:
    user = User(username=username, password_hash=PASSWORD_HASH, role=UserRole.TEACHER)
    return Teacher(id=teacher_id, user=user, name="Luis", surname="Gómez", email=email, enable=enable)


def build_game(slug: str, difficulty_level: int = 1) -> Game:
    return Game(
        id=f"game-{slug}",
        name=slug.capitalize(),
        description=f"Juego de {slug}",
        route=f"/alumno/juegos/{slug}",
        difficulty_level=difficulty_level,
        is_active=True,
    )


def build_levels(slug: str, counts: list[int], config: dict | None = None) -> list[GameLevel]:
    return [
        GameLevel(
            id=f"level-{slug}-{i}",
            game_id=f"game-{slug}",
            level=i,
            name=f"Nivel {i}",
            activities_count=count,
            config=dict(config or {"min": 1, "max": 50}),
            is_active=True,
        )
        for i, count in enumerate(counts, start=1)
    ]


def build_course(course_id: str = "course-1", name: str = "3° A", teacher_id: str | None = None) -> Course:
    return Course(id=course_id, name=name, teacher_id=teacher_id)


def build_course_game(course_id: str, game_id: str, order_index: int, is_enabled: bool = True) -> CourseGame:
    return CourseGame(
        id=f"{course_id}:{game_id}",
        course_id=course_id,
        game_id=game_id,
        is_enabled=is_enabled,
        order_index=order_index,
    )


async def seed(session_factory, *objects) -> None:
    """Persist `objects` in their own committed session."""
    async with session_factory() as session:
        session.add_all(objects)
        await session.commit()


def auth_headers(entity_id: str, role: str, username: str = "tester") -> dict:
    token = create_access_token(entity_id, username, role)
    return {"Authorization": f"Bearer {token}"}
