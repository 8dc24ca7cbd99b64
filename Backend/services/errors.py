"""
Exceptions raised by the quiz services, each carrying a message safe to show
next to the action that triggered it.
"""


class QuizError(Exception):
    """Base exception for quiz-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class InputValidationError(QuizError):
    """Raised before any external call when request input is incomplete."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid input: {reason}", reason)


class SupplierFormatError(QuizError):
    """Raised when the LLM response is unusable; the whole batch is rejected."""
    def __init__(self, reason: str):
        super().__init__(
            f"Question generation failed: {reason}",
            reason,
        )


class StoreError(QuizError):
    """Raised when a Firestore operation that must succeed fails."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Store error during {operation}: {details}",
            "Die Daten konnten nicht gespeichert werden. Bitte später erneut versuchen.",
        )
