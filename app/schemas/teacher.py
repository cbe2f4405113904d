from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints


NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
UsernameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=60)]


class TeacherCreate(BaseModel):
    name: NameStr
    surname: NameStr
    email: EmailStr
    username: UsernameStr
    password: str = Field(..., min_length=6)


class TeacherUpdate(BaseModel):
    name: NameStr
    surname: NameStr
    email: EmailStr
    username: UsernameStr
    password: str | None = None
    course_ids: list[str] | None = None  # None leaves course assignments untouched


class AssignCoursesRequest(BaseModel):
    course_ids: list[str] = Field(..., min_length=1)


class TeacherOut(BaseModel):
    id: str
    name: str
    surname: str
    email: str
    username: str
    enable: bool
    created_at: datetime
    course_ids: list[str] = []

    model_config = {"from_attributes": True}


class TeacherCourseOut(BaseModel):
    id: str
    name: str
    total_students: int


class CourseDetailsStatistics(BaseModel):
    total_students: int
    active_games: int
    average_progress: int


class TeacherCourseDetails(BaseModel):
    id: str
    name: str
    statistics: CourseDetailsStatistics
