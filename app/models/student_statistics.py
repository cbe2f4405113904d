from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.user import new_id, utcnow


class StudentStatistics(Base):
    """
    One row per game attempt: (student, game, level, activity).

    `total_points` is cumulative for the (student, game) pair at the time the
    row was written; `points` is what this attempt earned.
    """
    __tablename__ = "student_statistics"

    id = Column(String(255), primary_key=True, default=new_id)
    student_id = Column(String(255), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = Column(String(255), ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)

    level = Column(Integer, nullable=False, default=1)
    activity = Column(Integer, nullable=False, default=1)

    points = Column(Integer, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)
    attempts = Column(Integer, nullable=False, default=0)

    correct_answers = Column(Integer, nullable=True)
    total_questions = Column(Integer, nullable=True)
    completion_time = Column(Integer, nullable=True)  # seconds

    is_completed = Column(Boolean, nullable=False, default=False)
    max_unlocked_level = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    student = relationship("Student")
    game = relationship("Game")

    __table_args__ = (
        Index("ix_student_statistics_student_game", "student_id", "game_id"),
        Index("ix_student_statistics_student_game_level", "student_id", "game_id", "level"),
    )

    @property
    def accuracy(self) -> float:
        if not self.total_questions:
            return 0.0
        return (self.correct_answers or 0) / self.total_questions

    @property
    def success_rate(self) -> float:
        return self.accuracy * 100

    @property
    def average_time_per_question(self) -> float:
        if not self.completion_time or not self.total_questions:
            return 0.0
        return self.completion_time / self.total_questions

    def has_valid_questions(self) -> bool:
        """True when the row can contribute to an accuracy average."""
        return (
            self.total_questions is not None
            and self.total_questions > 0
            and self.correct_answers is not None
        )

    def is_level_completed(self) -> bool:
        return bool(self.is_completed) and self.level <= self.max_unlocked_level

    def update_progress(self, points: int, attempts: int, is_completed: bool = False) -> None:
        self.points = (self.points or 0) + points
        self.total_points = (self.total_points or 0) + points
        self.attempts = (self.attempts or 0) + attempts
        self.is_completed = is_completed
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<StudentStatistics student={self.student_id} game={self.game_id} "
            f"level={self.level} activity={self.activity} completed={self.is_completed}>"
        )
