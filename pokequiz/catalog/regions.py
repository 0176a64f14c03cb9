"""
Regions - Static partitions of the national dex.

Each region covers an inclusive range of identities. The table is
process-wide configuration and never changes at runtime.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """A selectable region of the national dex."""
    key: str
    label: str  # Japanese display label
    generation: int
    first: int
    last: int

    def contains(self, entity_id: int) -> bool:
        return self.first <= entity_id <= self.last

    def ids(self) -> range:
        return range(self.first, self.last + 1)


REGIONS: tuple[Region, ...] = (
    Region(key="kanto", label="カントー", generation=1, first=1, last=151),
    Region(key="johto", label="ジョウト", generation=2, first=152, last=251),
    Region(key="hoenn", label="ホウエン", generation=3, first=252, last=386),
    Region(key="sinnoh", label="シンオウ", generation=4, first=387, last=493),
    Region(key="unova", label="イッシュ", generation=5, first=494, last=649),
    Region(key="kalos", label="カロス", generation=6, first=650, last=721),
    Region(key="alola", label="アローラ", generation=7, first=722, last=809),
    Region(key="galar", label="ガラル", generation=8, first=810, last=905),
    Region(key="paldea", label="パルデア", generation=9, first=906, last=1010),
)

# Highest identity covered by any region; used by name search.
MAX_ENTITY_ID = max(r.last for r in REGIONS)


def region_for_id(entity_id: int, regions: tuple[Region, ...] = REGIONS) -> str:
    """
    Key of the region containing entity_id.

    Form identities live outside every range and get an empty key.
    """
    for region in regions:
        if region.contains(entity_id):
            return region.key
    return ""


def region_label(key: str, regions: tuple[Region, ...] = REGIONS) -> str:
    """Display label for a region key, or the key itself if unknown."""
    for region in regions:
        if region.key == key:
            return region.label
    return key
