from __future__ import annotations

from typing import Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import (
    String,
    DateTime,
    Boolean,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.user import User, UserRole, new_id, utcnow

if TYPE_CHECKING:
    from app.models.course import Course


class Student(Base):
    __tablename__ = "students"

    __table_args__ = (
        UniqueConstraint("dni", name="uq_students_dni"),
    )

    # --------------------------------------------------
    # PRIMARY KEY / LOGIN
    # --------------------------------------------------

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)

    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user: Mapped[User] = relationship("User", lazy="joined")

    # --------------------------------------------------
    # BASIC DETAILS
    # --------------------------------------------------

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    lastname: Mapped[str] = mapped_column(String(255), nullable=False)
    dni: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # --------------------------------------------------
    # COURSE
    # --------------------------------------------------

    course_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        ForeignKey("courses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    course: Mapped[Optional["Course"]] = relationship(
        "Course",
        back_populates="students",
        foreign_keys=[course_id],
    )

    # soft delete: disabled students cannot log in
    enable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def password_hash(self) -> str:
        return self.user.password_hash

    @property
    def role(self) -> UserRole:
        return self.user.role
