import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, String, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class User(Base):
    """
    Login credentials shared by the three portals.

    A Student / Teacher / Admin row points at exactly one user; the role
    stored here is what ends up in the JWT and what the route guards check.
    """
    __tablename__ = "users"

    id:            Mapped[str]      = mapped_column(String(255), primary_key=True, default=new_id)
    username:      Mapped[str]      = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str]      = mapped_column(Text, nullable=False)
    role:          Mapped[UserRole] = mapped_column(SAEnum(UserRole, name="user_role_enum"), nullable=False)
    created_at:    Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"
