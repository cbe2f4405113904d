from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
UsernameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=60)]
DniStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=6, max_length=20)]


class StudentCreate(BaseModel):
    name: NameStr
    lastname: NameStr
    username: UsernameStr
    password: str = Field(..., min_length=6)
    dni: DniStr


class StudentUpdate(BaseModel):
    name: NameStr
    lastname: NameStr
    username: UsernameStr
    password: str | None = None  # empty or missing keeps the current password
    course_id: str | None = None


class AssignCourseRequest(BaseModel):
    course_id: str = Field(..., min_length=1)


class StudentOut(BaseModel):
    id: str
    name: str
    lastname: str
    username: str
    dni: str
    course_id: str | None
    enable: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentGameOut(BaseModel):
    """A game enabled for the student's course."""
    id: str
    name: str
    description: str | None
    image_url: str | None
    route: str
    difficulty_level: int
    order_index: int
