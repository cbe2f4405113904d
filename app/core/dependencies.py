from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ai_text_generator import GeminiTextGenerator
from app.core.config import settings
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import UserRole
from app.repositories.game_level_repository import GameLevelRepository
from app.repositories.statistics_repository import StatisticsRepository
from app.services.progress_calculator import StudentProgressCalculator
from app.services.statistics_aggregator import StudentStatisticsAggregator

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by the access token. `id` is the student/teacher/admin id."""
    id: str
    username: str
    role: UserRole


def _forbidden(detail: str = "Invalid or expired token") -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def require_roles(*roles: UserRole):
    """
    Route guard factory.

      no bearer token          -> 401
      bad / expired token      -> 403
      role not in `roles`      -> 403
    """
    allowed = set(roles)

    async def guard(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    ) -> CurrentUser:
        if not credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token not provided",
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            payload = decode_access_token(credentials.credentials)
            user = CurrentUser(
                id=str(payload["sub"]),
                username=payload.get("username", ""),
                role=UserRole(payload["role"]),
            )
        except (JWTError, KeyError, ValueError):
            raise _forbidden()

        if allowed and user.role not in allowed:
            raise _forbidden("Access denied for this role")

        return user

    return guard


get_current_admin = require_roles(UserRole.ADMIN)
get_current_teacher = require_roles(UserRole.TEACHER)
get_current_student = require_roles(UserRole.STUDENT)
get_teacher_or_admin = require_roles(UserRole.TEACHER, UserRole.ADMIN)
get_any_user = require_roles(UserRole.ADMIN, UserRole.TEACHER, UserRole.STUDENT)


# ── Core services, built per request from the request session ─────────

def get_statistics_repository(db: AsyncSession = Depends(get_db)) -> StatisticsRepository:
    return StatisticsRepository(db)


def get_level_repository(db: AsyncSession = Depends(get_db)) -> GameLevelRepository:
    return GameLevelRepository(db)


def get_progress_calculator(
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
    level_repository: GameLevelRepository = Depends(get_level_repository),
) -> StudentProgressCalculator:
    return StudentProgressCalculator(statistics_repository, level_repository)


def get_aggregator() -> StudentStatisticsAggregator:
    return StudentStatisticsAggregator()


def get_text_generator() -> GeminiTextGenerator:
    return GeminiTextGenerator(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        timeout=settings.GEMINI_TIMEOUT_SECONDS,
    )
