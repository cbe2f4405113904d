from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.auth_controller import login
from app.core.database import get_db
from app.models.user import UserRole
from app.schemas.auth import LoginRequest, LoginResponse, MessageResponse

router = APIRouter(tags=["Auth"])

_LOGIN_DESCRIPTION = """
Authenticate with username + password.
Returns a JWT Bearer token to use in all other requests.

**How to use the token:**
Add to request headers: `Authorization: Bearer <your_token>`
"""


@router.post("/login/student", response_model=LoginResponse, summary="Student Login", description=_LOGIN_DESCRIPTION)
async def student_login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> LoginResponse:
    return await login(db, UserRole.STUDENT, payload)


@router.post("/login/teacher", response_model=LoginResponse, summary="Teacher Login", description=_LOGIN_DESCRIPTION)
async def teacher_login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> LoginResponse:
    return await login(db, UserRole.TEACHER, payload)


@router.post("/login/admin", response_model=LoginResponse, summary="Admin Login", description=_LOGIN_DESCRIPTION)
async def admin_login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> LoginResponse:
    return await login(db, UserRole.ADMIN, payload)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="""
JWT tokens are stateless - the server has no session to destroy.
To logout: delete the token from your frontend (sessionStorage/localStorage).
    """,
)
async def logout() -> MessageResponse:
    return MessageResponse(message="Logged out. Delete your token on the client side.")
