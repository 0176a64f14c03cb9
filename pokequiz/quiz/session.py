"""
Session Engine - Per-game state machine.

LIFECYCLE:
1. Player starts a game -> session created in ACTIVE state
2. Player guesses:
   - At most one guess per cooldown window (wrong guesses count too)
   - A match against any accepted answer moves to SOLVED
3. Player may give up at any time -> GIVEN_UP
4. SOLVED and GIVEN_UP are terminal; artwork and answer are revealed
5. Sessions live until the process exits (no persistence)

All mutation goes through submit_guess() and give_up(), which hold the
session's own lock so two concurrent guesses can never both pass the
cooldown check.
"""

from __future__ import annotations
import logging
import math
import secrets
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..errors import AlreadyFinishedError, TooSoonError
from .selector import Candidate

logger = logging.getLogger(__name__)

# Minimum seconds between two guesses on one session
GUESS_COOLDOWN = 5.0

# Name segments marking a battle form; the part before them is the species
FORM_MARKERS = ("mega", "primal", "gmax")

SESSION_ID_BYTES = 8


class SessionState(Enum):
    """State of a quiz session."""
    ACTIVE = "active"  # Waiting for guesses
    SOLVED = "solved"  # Correct answer given
    GIVEN_UP = "given_up"  # Player revealed the answer


@dataclass
class Session:
    """
    One quiz round.

    Target fields are fixed at creation. Only last_guess_at, solved and
    given_up change afterwards.
    """
    session_id: str
    pokemon_id: int
    pokemon_name: str
    created_at: float

    display_name: str = ""
    accept_answers: tuple[str, ...] = ()
    region_key: str = ""
    types: tuple[str, ...] = ()
    allow_mega: bool = False
    allow_primal: bool = False

    # Mutable state
    last_guess_at: float | None = None
    solved: bool = False
    given_up: bool = False

    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def state(self) -> SessionState:
        if self.solved:
            return SessionState.SOLVED
        if self.given_up:
            return SessionState.GIVEN_UP
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def is_revealable(self) -> bool:
        """Artwork and answer may be shown only once the round is over."""
        return not self.is_active()

    @property
    def answer_name(self) -> str:
        """Name shown to the player: display name if known, else canonical."""
        return self.display_name or self.pokemon_name


def new_session_id() -> str:
    """Unguessable session token (16 hex characters)."""
    return secrets.token_hex(SESSION_ID_BYTES)


def normalize(text: str) -> str:
    """
    Fold a name for comparison.

    Drops hyphens and spaces and lower-cases ASCII letters. Non-ASCII
    characters are kept as they are, so kana names compare exactly.
    """
    out = []
    for ch in text:
        if ch in "- ":
            continue
        if "A" <= ch <= "Z":
            ch = ch.lower()
        out.append(ch)
    return "".join(out)


def base_species_name(name: str) -> str | None:
    """
    Species name with a battle-form suffix removed.

    "charizard-mega-x" -> "charizard", "groudon-primal" -> "groudon".
    Returns None when the name has no form marker.
    """
    parts = name.split("-")
    for i, part in enumerate(parts):
        if i > 0 and part.lower() in FORM_MARKERS:
            return "-".join(parts[:i])
    return None


def create_session(
    candidate: Candidate,
    region_key: str,
    allow_mega: bool = False,
    allow_primal: bool = False,
    clock: Callable[[], float] = time.time,
) -> Session:
    """
    Create an ACTIVE session for a picked candidate.

    Accepted answers are the localized name (if any) and, for battle
    forms, the base species name.
    """
    accept = []
    if candidate.localized_name:
        accept.append(candidate.localized_name)
    base = base_species_name(candidate.name)
    if base:
        accept.append(base)

    session = Session(
        session_id=new_session_id(),
        pokemon_id=candidate.entity_id,
        pokemon_name=candidate.name,
        created_at=clock(),
        display_name=candidate.localized_name,
        accept_answers=tuple(accept),
        region_key=region_key,
        types=tuple(candidate.types),
        allow_mega=allow_mega,
        allow_primal=allow_primal,
    )
    logger.info("Session %s created (target %s)", session.session_id, session.pokemon_id)
    return session


def submit_guess(
    session: Session,
    answer: str,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """
    Check a guess and update the session.

    Returns:
        True if the guess matched and the session is now SOLVED

    Raises:
        AlreadyFinishedError: session is SOLVED or GIVEN_UP
        TooSoonError: previous guess was less than GUESS_COOLDOWN ago
    """
    with session.lock:
        if not session.is_active():
            raise AlreadyFinishedError()

        now = clock()
        if session.last_guess_at is not None:
            elapsed = now - session.last_guess_at
            if elapsed < GUESS_COOLDOWN:
                remaining = math.ceil(GUESS_COOLDOWN - elapsed)
                raise TooSoonError(retry_after=min(max(remaining, 0), int(GUESS_COOLDOWN)))

        # Every accepted guess starts a new cooldown, right or wrong
        if session.last_guess_at is None or now > session.last_guess_at:
            session.last_guess_at = now

        guess = normalize(answer)
        candidates = [session.pokemon_name, *session.accept_answers]
        if session.display_name:
            candidates.append(session.display_name)

        if any(guess == normalize(c) for c in candidates):
            session.solved = True
            logger.info("Session %s solved", session.session_id)
            return True
        return False


def give_up(session: Session):
    """Mark the session as given up. Safe to call more than once."""
    with session.lock:
        session.given_up = True
    logger.info("Session %s given up", session.session_id)
