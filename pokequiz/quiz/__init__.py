"""
Quiz Module - Game rounds.

A session represents one round:
- Created when the player starts a game
- Holds the hidden target and the accepted answers
- Throttles guesses and records the outcome
- Kept in memory until the process exits

Sessions are EPHEMERAL:
- No persistence to database
- No explicit eviction
"""

from .selector import (
    Candidate,
    CandidateSelector,
    VariantClass,
    classify_variant,
    variant_allowed,
)
from .session import (
    Session,
    SessionState,
    GUESS_COOLDOWN,
    create_session,
    submit_guess,
    give_up,
    normalize,
    base_species_name,
)
from .hints import Hint, derive_hint, first_character
from .store import SessionStore

__all__ = [
    "Candidate",
    "CandidateSelector",
    "VariantClass",
    "classify_variant",
    "variant_allowed",
    "Session",
    "SessionState",
    "GUESS_COOLDOWN",
    "create_session",
    "submit_guess",
    "give_up",
    "normalize",
    "base_species_name",
    "Hint",
    "derive_hint",
    "first_character",
    "SessionStore",
]
