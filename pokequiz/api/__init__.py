"""
API Module - Web frontend interface.

Exposes the quiz via REST API. The frontend:
1. Starts a round with a region selection and form flags
2. Shows the silhouette for the session
3. Submits guesses (throttled to one every 5 seconds)
4. Asks for hints or gives up
5. Shows the color artwork once the round is over

All state is session-scoped and in memory. No user accounts.
"""

from .schemas import (
    # Requests
    StartRequest,
    GuessRequest,
    GiveUpRequest,
    # Responses
    StartResponse,
    GuessResponse,
    RevealResponse,
    HintResponse,
    ErrorResponse,
)
from .service import QuizService, GuessResult, RevealResult
from .app import create_app, build_service

__all__ = [
    # Requests
    "StartRequest",
    "GuessRequest",
    "GiveUpRequest",
    # Responses
    "StartResponse",
    "GuessResponse",
    "RevealResponse",
    "HintResponse",
    "ErrorResponse",
    # Service
    "QuizService",
    "GuessResult",
    "RevealResult",
    "create_app",
    "build_service",
]
