"""
Error taxonomy shared by the catalog client, the quiz engine and the API.

Every error carries the HTTP status it maps to. TooSoonError and
AlreadyFinishedError are game-state signals rather than failures; the
service layer turns them into regular 200 responses.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for all pokequiz errors."""
    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class InvalidRequestError(QuizError):
    """Malformed or empty request input."""
    status_code = 400


class NotFoundError(QuizError):
    """Unknown session, unknown identity, or missing artwork."""
    status_code = 404


class ForbiddenError(QuizError):
    """Answer or artwork requested before the session is finished."""
    status_code = 403


class UpstreamError(QuizError):
    """The external catalog is unreachable or answered with an error."""
    status_code = 502


class DecodeError(UpstreamError):
    """Artwork bytes could not be decoded as an image."""


class NoCandidatesError(QuizError):
    """The selected regions and flags produced an empty candidate pool."""
    status_code = 400


class TooSoonError(QuizError):
    """A guess arrived before the cooldown elapsed."""
    status_code = 200

    def __init__(self, retry_after: int):
        super().__init__(f"guess too soon, retry after {retry_after}s")
        self.retry_after = retry_after


class AlreadyFinishedError(QuizError):
    """The session is already solved or given up."""
    status_code = 200

    def __init__(self, message: str = "quiz already finished"):
        super().__init__(message)
