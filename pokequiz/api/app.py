"""
FastAPI Application - REST API for the quiz frontend.

Endpoints:
    GET    /health                                Liveness probe (plain "ok")
    POST   /api/quiz/start                        Start a round
    POST   /api/quiz/guess                        Submit a guess
    POST   /api/quiz/giveup                       Give up and reveal the answer
    GET    /api/quiz/silhouette/{session_id}      Silhouette PNG
    GET    /api/quiz/silhouette/entity/{id}       Silhouette PNG for any identity
    GET    /api/quiz/artwork/{session_id}         Color artwork PNG (finished rounds)
    GET    /api/quiz/hint/{session_id}            Types, region, first letter
    GET    /api/quiz/search?prefix=...            Name autocomplete

Throttled and already-finished guesses are normal 200 responses.
Errors are JSON {"error": "..."} with the status carried by the QuizError.

Endpoints are plain functions, so Starlette runs each request in its
worker thread pool; catalog I/O blocks only the calling worker.
"""

from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..catalog.client import (
    CatalogClient,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TTL_SECONDS,
)
from ..errors import QuizError
from ..quiz import CandidateSelector
from ..quiz.selector import DEFAULT_POOL_WORKERS
from .schemas import (
    ErrorResponse,
    GiveUpRequest,
    GuessRequest,
    GuessResponse,
    HintResponse,
    RevealResponse,
    StartRequest,
    StartResponse,
)
from .service import QuizService

logger = logging.getLogger(__name__)

# Environment configuration
CATALOG_URL = os.getenv("POKEQUIZ_CATALOG_URL", DEFAULT_BASE_URL)
CACHE_TTL = float(os.getenv("POKEQUIZ_CACHE_TTL", DEFAULT_TTL_SECONDS))
HTTP_TIMEOUT = float(os.getenv("POKEQUIZ_HTTP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
POOL_WORKERS = int(os.getenv("POKEQUIZ_POOL_WORKERS", DEFAULT_POOL_WORKERS))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def build_service() -> QuizService:
    """Service wired from environment configuration."""
    client = CatalogClient(base_url=CATALOG_URL, ttl=CACHE_TTL, timeout=HTTP_TIMEOUT)
    selector = CandidateSelector(client, max_workers=POOL_WORKERS)
    return QuizService(client=client, selector=selector)


def create_app(service: QuizService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional QuizService instance (built from env if not provided)

    Returns:
        FastAPI application instance
    """
    quiz_service = service or build_service()

    @asynccontextmanager
    async def lifespan(app):
        try:
            yield
        finally:
            quiz_service.close()
            logger.info("Quiz service stopped")

    app = FastAPI(
        title="Pokequiz API",
        description="Silhouette guessing game backed by PokeAPI.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.quiz_service = quiz_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        expose_headers=["Link"],
        max_age=300,
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(message: str, status_code: int = 400) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message).model_dump(),
        )

    @app.exception_handler(QuizError)
    async def handle_quiz_error(request, exc: QuizError):
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return make_error_response(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "invalid request") if errors else "invalid request"
        return make_error_response(message, status_code=400)

    # =========================================================================
    # System
    # =========================================================================

    @app.get("/health", response_class=PlainTextResponse, tags=["System"])
    def health_check() -> str:
        """Health check endpoint for load balancers."""
        return "ok"

    # =========================================================================
    # Quiz Endpoints
    # =========================================================================

    @app.post(
        "/api/quiz/start",
        response_model=StartResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Empty candidate pool"},
            502: {"model": ErrorResponse, "description": "Catalog unavailable"},
        },
        tags=["Quiz"],
        summary="Start a new round",
    )
    def start_quiz(body: StartRequest) -> StartResponse:
        session = quiz_service.start(body.regions, body.allow_mega, body.allow_primal)
        return StartResponse(session_id=session.session_id)

    @app.post(
        "/api/quiz/guess",
        response_model=GuessResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Quiz"],
        summary="Submit a guess",
    )
    def guess(body: GuessRequest) -> GuessResponse:
        """
        Submit a guess.

        `retryAfter` is set when the previous guess was less than 5 seconds
        ago. A finished round answers `{correct: false, solved: true}`.
        """
        result = quiz_service.guess(body.session_id, body.answer)
        return GuessResponse(
            correct=result.correct,
            solved=result.solved,
            retry_after=result.retry_after,
        )

    @app.post(
        "/api/quiz/giveup",
        response_model=RevealResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Quiz"],
        summary="Give up and reveal the answer",
    )
    def giveup(body: GiveUpRequest) -> RevealResponse:
        result = quiz_service.give_up(body.session_id)
        return RevealResponse(
            pokemon_id=result.pokemon_id,
            name=result.name,
            types=list(result.types),
            region=result.region,
        )

    @app.get(
        "/api/quiz/hint/{session_id}",
        response_model=HintResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Quiz"],
        summary="Get a hint",
    )
    def hint(session_id: str) -> HintResponse:
        result = quiz_service.hint(session_id)
        return HintResponse(
            types=list(result.types),
            region=result.region,
            first_letter=result.first_letter,
        )

    @app.get(
        "/api/quiz/search",
        response_model=list[str],
        tags=["Quiz"],
        summary="Autocomplete display names",
    )
    def search(prefix: str = Query("", description="Name prefix")) -> list[str]:
        return quiz_service.search(prefix)

    # =========================================================================
    # Image Endpoints
    # =========================================================================

    @app.get(
        "/api/quiz/silhouette/entity/{entity_id}",
        response_class=Response,
        responses={404: {"model": ErrorResponse}},
        tags=["Images"],
        summary="Silhouette for a catalog identity",
    )
    def silhouette_by_entity(entity_id: int) -> Response:
        return Response(
            content=quiz_service.silhouette_png_for_entity(entity_id),
            media_type="image/png",
        )

    @app.get(
        "/api/quiz/silhouette/{session_id}",
        response_class=Response,
        responses={404: {"model": ErrorResponse}},
        tags=["Images"],
        summary="Silhouette of the hidden target",
    )
    def silhouette(session_id: str) -> Response:
        return Response(
            content=quiz_service.silhouette_png(session_id),
            media_type="image/png",
        )

    @app.get(
        "/api/quiz/artwork/{session_id}",
        response_class=Response,
        responses={
            403: {"model": ErrorResponse, "description": "Round still active"},
            404: {"model": ErrorResponse},
        },
        tags=["Images"],
        summary="Color artwork after the round ends",
    )
    def artwork(session_id: str) -> Response:
        return Response(
            content=quiz_service.artwork_png(session_id),
            media_type="image/png",
        )

    return app


# For running directly: uvicorn --factory pokequiz.api.app:create_app
