"""
API Service - Business logic layer between the HTTP app and the quiz engine.

The service:
1. Owns the catalog client, the candidate selector and the session store
2. Starts rounds and routes guesses / give-ups / hints to sessions
3. Renders silhouettes and artwork
4. Answers name-search queries for autocomplete

This layer is framework-agnostic; create_app() wraps it in FastAPI.
One instance is built at startup and lives as long as the process.
"""

from __future__ import annotations
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable

from ..catalog import (
    CatalogClient,
    MAX_ENTITY_ID,
    encode_png,
    to_silhouette,
)
from ..errors import (
    AlreadyFinishedError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    QuizError,
    TooSoonError,
    UpstreamError,
)
from ..quiz import (
    CandidateSelector,
    Hint,
    Session,
    SessionStore,
    create_session,
    derive_hint,
    give_up,
    submit_guess,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50


@dataclass(frozen=True)
class GuessResult:
    correct: bool
    solved: bool
    retry_after: int = 0


@dataclass(frozen=True)
class RevealResult:
    pokemon_id: int
    name: str
    types: tuple[str, ...]
    region: str


@dataclass
class QuizService:
    """
    Main service for the quiz frontend.

    Usage:
        service = QuizService()

        session = service.start(["kanto"], allow_mega=False, allow_primal=False)
        result = service.guess(session.session_id, "bulbasaur")
        png = service.silhouette_png(session.session_id)
    """
    client: CatalogClient = field(default_factory=CatalogClient)
    store: SessionStore = field(default_factory=SessionStore)
    selector: CandidateSelector | None = None
    clock: Callable[[], float] = time.monotonic
    search_max_id: int = MAX_ENTITY_ID

    def __post_init__(self):
        if self.selector is None:
            self.selector = CandidateSelector(self.client)

    # =========================================================================
    # Rounds
    # =========================================================================

    def start(
        self,
        regions: Iterable[str],
        allow_mega: bool = False,
        allow_primal: bool = False,
    ) -> Session:
        """
        Start a new round.

        Raises:
            NoCandidatesError: selection produced an empty pool
            UpstreamError: the catalog is unavailable
        """
        pool = self.selector.build_pool(regions, allow_mega, allow_primal)
        candidate = self.selector.pick_one(pool)
        session = create_session(
            candidate,
            region_key=self.selector.region_for(candidate.entity_id),
            allow_mega=allow_mega,
            allow_primal=allow_primal,
        )
        self.store.add(session)
        return session

    def get_session(self, session_id: str) -> Session:
        """
        Look up a live session.

        Raises:
            NotFoundError: unknown id
        """
        session = self.store.get(session_id)
        if session is None:
            raise NotFoundError("session not found")
        return session

    def guess(self, session_id: str, answer: str) -> GuessResult:
        """
        Submit a guess.

        Throttled and finished sessions are not errors here: they come back
        as a normal result with retry_after or solved set.
        """
        if not answer.strip():
            raise InvalidRequestError("answer must not be empty")
        session = self.get_session(session_id)

        try:
            correct = submit_guess(session, answer, clock=self.clock)
        except TooSoonError as e:
            return GuessResult(correct=False, solved=False, retry_after=e.retry_after)
        except AlreadyFinishedError:
            return GuessResult(correct=False, solved=True)

        return GuessResult(correct=correct, solved=session.solved)

    def give_up(self, session_id: str) -> RevealResult:
        """End the round and reveal the answer."""
        session = self.get_session(session_id)
        give_up(session)
        return RevealResult(
            pokemon_id=session.pokemon_id,
            name=session.answer_name,
            types=session.types,
            region=session.region_key,
        )

    def hint(self, session_id: str) -> Hint:
        return derive_hint(self.get_session(session_id))

    # =========================================================================
    # Images
    # =========================================================================

    def silhouette_png(self, session_id: str) -> bytes:
        """Silhouette of the session's target as PNG."""
        session = self.get_session(session_id)
        return self.silhouette_png_for_entity(session.pokemon_id)

    def silhouette_png_for_entity(self, entity_id: int) -> bytes:
        """Silhouette of any catalog identity as PNG."""
        return to_silhouette(self._artwork(entity_id))

    def artwork_png(self, session_id: str) -> bytes:
        """
        Full-color artwork, only once the round is over.

        Raises:
            ForbiddenError: session still active
        """
        session = self.get_session(session_id)
        if not session.is_revealable():
            raise ForbiddenError("not revealed yet")
        return encode_png(self._artwork(session.pokemon_id))

    def _artwork(self, entity_id: int):
        # Image endpoints report any artwork failure as missing
        try:
            return self.client.fetch_artwork(entity_id)
        except UpstreamError as e:
            raise NotFoundError(e.message) from e

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, prefix: str, limit: int = SEARCH_LIMIT) -> list[str]:
        """
        Display names starting with prefix (case-insensitive).

        Scans identities in order and stops after limit matches.
        """
        prefix = prefix.lower()
        if not prefix:
            return []

        ids = range(1, self.search_max_id + 1)
        matches = []
        with ThreadPoolExecutor(max_workers=self.selector.max_workers) as executor:
            for name in executor.map(self._display_name, ids):
                if name and name.lower().startswith(prefix):
                    matches.append(name)
                    if len(matches) >= limit:
                        executor.shutdown(wait=False, cancel_futures=True)
                        break
        return matches

    def _display_name(self, entity_id: int) -> str | None:
        try:
            entity = self.client.fetch_entity(entity_id)
        except QuizError:
            return None
        try:
            return self.client.fetch_localized_name(entity_id)
        except QuizError:
            return entity.name

    def close(self):
        self.client.close()
