"""Custom exceptions for question bank uploads."""
from typing import Optional


class QuizLoadError(Exception):
    """Base exception for question bank upload errors."""
    pass


class ParseError(QuizLoadError):
    """Payload could not be turned into questions."""
    pass


class ValidationError(ParseError):
    """A line does not have the shape its question type requires."""

    def __init__(self, message: str, line: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.line_number = line_number


class UnknownTypeError(ParseError):
    """The type tag of a line matches no question type."""

    def __init__(self, tag: str, line_number: Optional[int] = None):
        super().__init__(f"type: {tag} is not known")
        self.tag = tag
        self.line_number = line_number


class StorageError(QuizLoadError):
    """The store rejected a delete or insert; the upload was rolled back."""
    pass
