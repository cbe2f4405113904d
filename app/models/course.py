from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.user import new_id, utcnow

if TYPE_CHECKING:
    from app.models.game import Game
    from app.models.student import Student
    from app.models.teacher import Teacher


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    teacher_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        ForeignKey("teachers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    teacher: Mapped[Optional["Teacher"]] = relationship("Teacher", lazy="joined")

    students: Mapped[List["Student"]] = relationship(
        "Student",
        back_populates="course",
        foreign_keys="Student.course_id",
        passive_deletes=True,
    )

    games: Mapped[List["CourseGame"]] = relationship(
        "CourseGame",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseGame.order_index",
        passive_deletes=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class CourseGame(Base):
    """A game made available to a course; teachers toggle `is_enabled`."""
    __tablename__ = "courses_games"

    __table_args__ = (
        UniqueConstraint("course_id", "game_id", name="uq_courses_games_course_game"),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)

    course_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    game_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True
    )

    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped["Course"] = relationship("Course", back_populates="games")
    game: Mapped["Game"] = relationship("Game", lazy="joined")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
