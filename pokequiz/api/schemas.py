"""
Pydantic Schemas for API - Request/response models for the web frontend.

Field names on the wire are camelCase (sessionId, allowMega, retryAfter);
Python attributes are snake_case. Models accept either form on input.

Every non-2xx JSON response has the shape {"error": "..."}.
"""

from pydantic import BaseModel, ConfigDict, Field


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class CamelModel(BaseModel):
    """Base model serializing to camelCase."""
    model_config = ConfigDict(alias_generator=_camel, populate_by_name=True)


# =============================================================================
# Requests
# =============================================================================

class StartRequest(CamelModel):
    """Start a new round."""
    regions: list[str] = Field(default_factory=list, description="Region keys; empty means all")
    allow_mega: bool = False
    allow_primal: bool = False


class GuessRequest(CamelModel):
    """Submit a guess for a session."""
    session_id: str = Field(min_length=1)
    answer: str


class GiveUpRequest(CamelModel):
    """Give up a session and reveal the answer."""
    session_id: str = Field(min_length=1)


# =============================================================================
# Responses
# =============================================================================

class StartResponse(CamelModel):
    session_id: str


class GuessResponse(CamelModel):
    """
    Outcome of a guess.

    retry_after is non-zero only when the guess was throttled.
    """
    correct: bool
    solved: bool
    retry_after: int = 0


class RevealResponse(CamelModel):
    """The hidden answer, returned on give-up."""
    pokemon_id: int
    name: str
    types: list[str] = Field(default_factory=list)
    region: str = ""


class HintResponse(CamelModel):
    types: list[str] = Field(default_factory=list)
    region: str = ""
    first_letter: str = ""


class ErrorResponse(BaseModel):
    """Error envelope for every non-2xx JSON response."""
    error: str
