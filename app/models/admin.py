from datetime import datetime
from sqlalchemy import DateTime, Integer, String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, JSONType
from app.models.user import User, UserRole, new_id, utcnow


class Admin(Base):
    """
    Administrator profile, linked to a `users` row with role ADMIN.

    Columns:
      id             TEXT - uuid primary key
      user_id        TEXT - login credentials (users.id)
      access_level   INT  - 1 = full access
      permissions    JSON - list of permission names
      last_login_at  TS   - updated on every successful login
      created_at     TS   - when the admin row was created
    """
    __tablename__ = "admins"

    id:            Mapped[str]             = mapped_column(String(255), primary_key=True, default=new_id)
    user_id:       Mapped[str]             = mapped_column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    access_level:  Mapped[int]             = mapped_column(Integer, default=1, nullable=False, server_default="1")
    permissions:   Mapped[list]            = mapped_column(JSONType, default=list, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at:    Mapped[datetime]        = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped[User] = relationship("User", lazy="joined")

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def password_hash(self) -> str:
        return self.user.password_hash

    @property
    def role(self) -> UserRole:
        return self.user.role

    def __repr__(self) -> str:
        return f"<Admin id={self.id} user_id={self.user_id!r}>"
