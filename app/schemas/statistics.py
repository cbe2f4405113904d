from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ── Request Bodies ────────────────────────────────────────────────────
class SaveStatisticsRequest(BaseModel):
    """
    One game attempt sent by a mini-game.

    Required fields and ranges are checked by the controller so that a bad
    attempt answers 400 with a readable message instead of a 422 error list.
    """
    student_id: Optional[str] = None
    game_id: Optional[str] = None
    level: Optional[int] = None
    activity: Optional[int] = None
    points: Optional[int] = None
    attempts: Optional[int] = None
    correct_answers: Optional[int] = None
    total_questions: Optional[int] = None
    completion_time: Optional[int] = None  # seconds
    is_completed: Optional[bool] = None
    max_unlocked_level: Optional[int] = None


class ReportRequest(BaseModel):
    recent_days: int = Field(default=7, ge=1, le=365)


# ── Response Bodies ───────────────────────────────────────────────────
class StatisticsOut(BaseModel):
    id: str
    student_id: str
    game_id: str
    level: int
    activity: int
    points: int
    total_points: int
    attempts: int
    correct_answers: Optional[int]
    total_questions: Optional[int]
    completion_time: Optional[int]
    is_completed: bool
    max_unlocked_level: int
    accuracy: float
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GameProgressDetail(BaseModel):
    game_id: str
    max_unlocked_level: int
    total_points: int
    completion_rate: float
    average_accuracy: float
    last_activity: Optional[datetime]
    statistics: list[StatisticsOut]


class StudentProgressResponse(BaseModel):
    student_id: str
    game_progress: list[GameProgressDetail]
    total_points: int
    total_games_played: int


class StudentGameSummary(BaseModel):
    student_id: str
    student_name: str
    max_unlocked_level: int
    total_points: int
    completion_rate: float
    average_accuracy: float
    last_activity: Optional[datetime]


class GameStatisticsResponse(BaseModel):
    game_id: str
    total_students: int
    average_points: float
    average_accuracy: float
    completion_rate: float
    student_progress: list[StudentGameSummary]


class StudentReportResponse(BaseModel):
    student_id: str
    student_name: str
    student_lastname: str
    report: str
