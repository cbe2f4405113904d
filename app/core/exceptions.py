"""Domain errors raised by controllers.

Each error carries the HTTP status it maps to; ``app.main`` registers a single
handler that turns any ``ReDaError`` into ``{"detail": message}``.
"""


class ReDaError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ReDaError):
    status_code = 404
    default_message = "Resource not found"


class StudentNotFoundError(NotFoundError):
    default_message = "Student not found"


class TeacherNotFoundError(NotFoundError):
    default_message = "Teacher not found"


class CourseNotFoundError(NotFoundError):
    default_message = "Course not found"


class AlreadyExistsError(ReDaError):
    status_code = 409
    default_message = "Resource already exists"


class UsernameAlreadyExistsError(AlreadyExistsError):
    default_message = "Username already exists"


class InvalidRequestError(ReDaError):
    status_code = 400
    default_message = "Invalid request"


class SaveGameStatisticsValidationError(InvalidRequestError):
    pass


class InvalidCredentialsError(ReDaError):
    status_code = 401
    default_message = "Invalid credentials"


class AccountDisabledError(ReDaError):
    status_code = 403
    default_message = "Account is disabled. Contact an administrator."


class AiServiceNotConfiguredError(ReDaError):
    status_code = 503
    default_message = "AI service is not configured. Set GEMINI_API_KEY to generate reports."


class AiServiceError(ReDaError):
    status_code = 502
    default_message = "The AI service did not return a report"
