# Import every model so string relationships resolve and Base.metadata is complete
from app.models.user import User, UserRole  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.admin import Admin  # noqa: F401
from app.models.course import Course, CourseGame  # noqa: F401
from app.models.game import Game, GameLevel  # noqa: F401
from app.models.student_statistics import StudentStatistics  # noqa: F401
