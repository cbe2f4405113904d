from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidRequestError, UsernameAlreadyExistsError
from app.core.security import hash_password
from app.models.user import User, UserRole

MIN_PASSWORD_LENGTH = 6


async def ensure_username_available(
    db: AsyncSession, username: str, exclude_user_id: str | None = None
) -> None:
    """Usernames are shared by students, teachers and admins."""
    q = select(User.id).where(User.username == username)
    if exclude_user_id:
        q = q.where(User.id != exclude_user_id)
    if (await db.execute(q)).first() is not None:
        raise UsernameAlreadyExistsError()


async def create_user(db: AsyncSession, username: str, password: str, role: UserRole) -> User:
    await ensure_username_available(db, username)
    user = User(username=username, password_hash=hash_password(password), role=role)
    db.add(user)
    await db.flush()
    return user


def apply_credentials(user: User, username: str, password: str | None) -> None:
    """Update username and, when given, the password. Blank passwords are ignored."""
    user.username = username
    if password and password.strip():
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidRequestError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        user.password_hash = hash_password(password)
