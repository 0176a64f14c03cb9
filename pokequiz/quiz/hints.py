"""
Hints - Partial reveals for an active session.
"""

from __future__ import annotations
import unicodedata
from dataclasses import dataclass

from ..catalog.regions import region_label
from .session import Session

TYPE_LABELS = {
    "normal": "ノーマル",
    "fire": "ほのお",
    "water": "みず",
    "grass": "くさ",
    "electric": "でんき",
    "ice": "こおり",
    "fighting": "かくとう",
    "poison": "どく",
    "ground": "じめん",
    "flying": "ひこう",
    "psychic": "エスパー",
    "bug": "むし",
    "rock": "いわ",
    "ghost": "ゴースト",
    "dragon": "ドラゴン",
    "dark": "あく",
    "steel": "はがね",
    "fairy": "フェアリー",
}


@dataclass(frozen=True)
class Hint:
    types: tuple[str, ...]
    region: str
    first_letter: str


def first_character(text: str) -> str:
    """
    First user-perceived character of text.

    A base character plus any combining marks that follow it
    (e.g. a decomposed dakuten), never a partial code unit.
    """
    if not text:
        return ""
    end = 1
    while end < len(text) and unicodedata.category(text[end]).startswith("M"):
        end += 1
    return text[:end]


def derive_hint(session: Session) -> Hint:
    """Translated types, region label and the answer's first character."""
    return Hint(
        types=tuple(TYPE_LABELS.get(t, t) for t in session.types),
        region=region_label(session.region_key),
        first_letter=first_character(session.answer_name),
    )
