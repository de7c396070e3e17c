"""
Custom exceptions for the performance engine with user-friendly error messages.
"""

class PerformanceException(Exception):
    """Base exception for performance-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class NotFoundError(PerformanceException):
    """Raised when a referenced student, unit or teacher scope does not resolve."""

class StudentNotFoundError(NotFoundError):
    """Raised when a student is not found or not approved."""
    def __init__(self, identifier):
        super().__init__(
            f"Student '{identifier}' not found",
            "Student not found"
        )
        self.identifier = identifier

class TeacherNotFoundError(NotFoundError):
    """Raised when a student has no teacher to scope a roster to."""
    def __init__(self, student_id: int):
        super().__init__(
            f"Teacher for student {student_id} not found",
            "Teacher not found"
        )
        self.student_id = student_id

class UnitNotFoundError(NotFoundError):
    """Raised when an exam or activity is not found for the given scope."""
    def __init__(self, unit_kind: str, identifier):
        super().__init__(
            f"{unit_kind.capitalize()} '{identifier}' not found",
            f"{unit_kind.capitalize()} not found"
        )
        self.unit_kind = unit_kind
        self.identifier = identifier

class InvariantViolationError(PerformanceException):
    """Raised when unit data breaks a rule the aggregator relies on."""

class UnknownGameTypeError(InvariantViolationError):
    """Raised when an activity claims a game type the aggregator does not recognize."""
    def __init__(self, game_type):
        super().__init__(
            f"Unknown game type: {game_type!r}",
            "This activity has an unsupported game type."
        )
        self.game_type = game_type

class EmptyStageCategoriesError(InvariantViolationError):
    """Raised when a stage activity has no eligible category to score against."""
    def __init__(self, activity_id=None):
        super().__init__(
            f"Stage activity {activity_id} has no eligible categories",
            "This activity has no levels to score."
        )
        self.activity_id = activity_id
