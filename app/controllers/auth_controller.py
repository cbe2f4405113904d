import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AccountDisabledError, InvalidCredentialsError
from app.core.security import create_access_token, verify_password
from app.models.admin import Admin
from app.models.student import Student
from app.models.teacher import Teacher
from app.models.user import User, UserRole, utcnow
from app.schemas.auth import LoggedUser, LoginRequest, LoginResponse

logger = structlog.get_logger(__name__)

_PROFILES = {
    UserRole.STUDENT: Student,
    UserRole.TEACHER: Teacher,
    UserRole.ADMIN: Admin,
}


async def _find_profile(db: AsyncSession, role: UserRole, username: str):
    model = _PROFILES[role]
    result = await db.execute(
        select(model)
        .join(User, model.user_id == User.id)
        .where(User.username == username, User.role == role)
    )
    return result.scalars().first()


def _logged_user(profile, role: UserRole) -> LoggedUser:
    if role is UserRole.STUDENT:
        return LoggedUser(
            id=profile.id,
            username=profile.username,
            role=role.value,
            name=profile.name,
            lastname=profile.lastname,
            course_id=profile.course_id,
        )
    if role is UserRole.TEACHER:
        return LoggedUser(
            id=profile.id,
            username=profile.username,
            role=role.value,
            name=profile.name,
            lastname=profile.surname,
        )
    return LoggedUser(id=profile.id, username=profile.username, role=role.value)


async def login(db: AsyncSession, role: UserRole, payload: LoginRequest) -> LoginResponse:
    """
    Shared login for the three portals.

    Security measures:
    ─────────────────
    1. verify_password always runs, even when the username is unknown
       → response time does not reveal which usernames exist
    2. Same error for unknown username AND wrong password
    3. `enable` is checked only after the password matched
    """
    username = payload.username.strip()
    profile = await _find_profile(db, role, username)

    password_ok = verify_password(payload.password, profile.password_hash if profile else None)
    if not profile or not password_ok:
        logger.info("auth.login_failed", role=role.value, username=username)
        raise InvalidCredentialsError()

    if role is not UserRole.ADMIN and not profile.enable:
        logger.info("auth.login_disabled", role=role.value, username=username)
        raise AccountDisabledError()

    if role is UserRole.ADMIN:
        profile.last_login_at = utcnow()
        await db.flush()

    token = create_access_token(profile.id, profile.username, role.value)
    logger.info("auth.login", role=role.value, user_id=profile.id)

    return LoginResponse(
        token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        role=role.value,
        user=_logged_user(profile, role),
    )
