"""
Custom application-specific exceptions.

Missing or forbidden quizzes are not exceptions: services report them as a
`SubmissionStatus` (or `None`) and the API layer picks the status code.
"""

class BaseAppException(Exception):
    """Base exception for the application."""
    pass

class StorageError(BaseAppException):
    """Raised when a write references a quiz or user the store does not hold."""
    pass

class InvalidSubmissionError(BaseAppException):
    """Raised when a submission is addressed to a different quiz than its payload names."""
    pass
