from pydantic import BaseModel, Field


# ── Request Body ──────────────────────────────────────────────────────
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "profe.ana",
                "password": "YourPassword123",
            }
        }
    }


# ── Response Bodies ───────────────────────────────────────────────────
class LoggedUser(BaseModel):
    """
    Safe profile sent to the frontend after login.
    password_hash is never included here.
    """
    id: str
    username: str
    role: str
    name: str | None = None
    lastname: str | None = None
    course_id: str | None = None


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    role: str
    user: LoggedUser


class MessageResponse(BaseModel):
    message: str
