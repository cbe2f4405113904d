from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


CourseNameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=120)]


class CourseCreate(BaseModel):
    name: CourseNameStr
    teacher_id: str | None = None


class CourseUpdate(BaseModel):
    name: CourseNameStr


class AddGameRequest(BaseModel):
    game_id: str = Field(..., min_length=1)


class CourseGameStatusUpdate(BaseModel):
    is_enabled: bool


class CourseOut(BaseModel):
    id: str
    name: str
    teacher_id: str | None
    teacher_name: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CourseGameOut(BaseModel):
    id: str
    course_id: str
    game_id: str
    game_name: str
    description: str | None = None
    image_url: str | None = None
    route: str | None = None
    is_enabled: bool
    order_index: int


class GameProgressOut(BaseModel):
    completed: int = 0
    total_time: int = 0
    average_score: int = 0
    total_attempts: int = 0


class CourseStudentOut(BaseModel):
    """
    A student row of the course dashboard.

    last_activity is the newest attempt's created_at as Python's
    datetime.isoformat(), e.g. "2025-03-10T09:00:00+00:00" (or without the
    offset for naive timestamps). average_score is a percentage in [0, 100].
    """

    id: str
    name: str
    lastname: str
    username: str
    enrollment_date: date | None
    total_games_played: int
    average_score: int
    last_activity: str | None
    progress_by_game: dict[str, GameProgressOut]


class CourseStudentsResponse(BaseModel):
    course_id: str
    students: list[CourseStudentOut]


class GameProgressSummary(BaseModel):
    game_id: str
    average_progress: int
    total_students: int
    students_with_progress: int


class CourseStatisticsResponse(BaseModel):
    course_id: str
    total_students: int
    progress_by_game: list[GameProgressSummary]
