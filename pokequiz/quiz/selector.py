"""
Candidate Selector - Builds the pool of possible answers and picks one.

The pool is built from:
1. Every identity in the selected regions (all regions if none selected)
2. Optionally, alternate forms of those species (mega / primal / regional),
   filtered by the player's flags and region selection

Catalog failures for individual identities are skipped, not fatal.
"""

from __future__ import annotations
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable

from ..catalog.client import CatalogClient, Variant
from ..catalog.regions import REGIONS, Region, region_for_id
from ..errors import NoCandidatesError, QuizError, UpstreamError

logger = logging.getLogger(__name__)

# Name fragments identifying a regional form and its home region
REGIONAL_MARKERS = ("alola", "galar", "hisui", "paldea")

DEFAULT_POOL_WORKERS = 8


@dataclass(frozen=True)
class Candidate:
    """A possible quiz target."""
    entity_id: int
    name: str
    localized_name: str = ""
    types: tuple[str, ...] = ()


@dataclass(frozen=True)
class VariantClass:
    """Classification of a form name."""
    mega: bool = False
    primal: bool = False
    regional_tag: str = ""


def classify_variant(name: str) -> VariantClass:
    """
    Classify a form by scanning its name.

    "charizard-mega-x" -> mega, "kyogre-primal" -> primal,
    "vulpix-alola" -> regional_tag "alola".
    """
    lowered = name.lower()
    regional_tag = ""
    for marker in REGIONAL_MARKERS:
        if marker in lowered:
            regional_tag = marker
            break
    return VariantClass(
        mega="mega" in lowered,
        primal="primal" in lowered,
        regional_tag=regional_tag,
    )


def variant_allowed(
    variant: VariantClass,
    selected: frozenset[str],
    allow_mega: bool,
    allow_primal: bool,
) -> bool:
    """
    Whether a classified form belongs in the pool.

    An empty selection means every region, so regional forms always pass.
    """
    if variant.mega and not allow_mega:
        return False
    if variant.primal and not allow_primal:
        return False
    if variant.regional_tag and selected and variant.regional_tag not in selected:
        return False
    return True


class CandidateSelector:
    """
    Builds candidate pools from the catalog.

    Usage:
        selector = CandidateSelector(client)
        pool = selector.build_pool({"kanto"}, allow_mega=True, allow_primal=False)
        target = selector.pick_one(pool)

    rng defaults to random.SystemRandom(); pass a seeded random.Random
    for deterministic tests.
    """

    def __init__(
        self,
        client: CatalogClient,
        regions: tuple[Region, ...] = REGIONS,
        rng: random.Random | None = None,
        max_workers: int = DEFAULT_POOL_WORKERS,
    ):
        self.client = client
        self.regions = regions
        self.rng = rng or random.SystemRandom()
        self.max_workers = max_workers

    def build_pool(
        self,
        selected_regions: Iterable[str],
        allow_mega: bool = False,
        allow_primal: bool = False,
    ) -> list[Candidate]:
        """
        Collect every candidate allowed by the selection.

        Raises:
            NoCandidatesError: if nothing survives the filters
            UpstreamError: if no identity could be fetched because the
                catalog is failing
        """
        selected = frozenset(selected_regions)
        ids = [
            entity_id
            for region in self.regions
            if not selected or region.key in selected
            for entity_id in region.ids()
        ]
        if not ids:
            raise NoCandidatesError("no pokemon range selected")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = list(executor.map(self._base_candidate, ids))
            base = [c for c in results if isinstance(c, Candidate)]
            if not base:
                upstream = [e for e in results if isinstance(e, UpstreamError)]
                if upstream:
                    raise upstream[0]
                raise NoCandidatesError("no candidates available for the selection")

            pool = list(base)
            if allow_mega or allow_primal:
                for forms in executor.map(
                    lambda c: self._variant_candidates(c, selected, allow_mega, allow_primal),
                    base,
                ):
                    pool.extend(forms)

        logger.debug("Built pool of %d candidates (%d base)", len(pool), len(base))
        return pool

    def pick_one(self, pool: list[Candidate]) -> Candidate:
        """Uniform random choice from the pool."""
        if not pool:
            raise NoCandidatesError("candidate pool is empty")
        return self.rng.choice(pool)

    def region_for(self, entity_id: int) -> str:
        """Region key of an identity; empty for forms outside every range."""
        return region_for_id(entity_id, self.regions)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _base_candidate(self, entity_id: int) -> Candidate | QuizError:
        """Candidate for an identity, or the error that prevented it."""
        try:
            entity = self.client.fetch_entity(entity_id)
        except QuizError as e:
            logger.debug("Skipping %s: %s", entity_id, e)
            return e

        try:
            localized = self.client.fetch_localized_name(entity_id)
        except QuizError:
            localized = ""

        return Candidate(
            entity_id=entity.entity_id,
            name=entity.name,
            localized_name=localized,
            types=entity.types,
        )

    def _variant_candidates(
        self,
        base: Candidate,
        selected: frozenset[str],
        allow_mega: bool,
        allow_primal: bool,
    ) -> list[Candidate]:
        try:
            variants = self.client.fetch_variants(base.entity_id)
        except QuizError as e:
            logger.debug("No forms for %s: %s", base.entity_id, e)
            return []

        forms = []
        for variant in variants:
            if variant.is_default:
                continue
            if not variant_allowed(classify_variant(variant.name), selected, allow_mega, allow_primal):
                continue
            candidate = self._form_candidate(base, variant)
            if candidate is not None:
                forms.append(candidate)
        return forms

    def _form_candidate(self, base: Candidate, variant: Variant) -> Candidate | None:
        try:
            entity = self.client.fetch_entity(variant.entity_id)
        except QuizError as e:
            logger.debug("Skipping form %s: %s", variant.name, e)
            return None
        # Forms share the species' localized name
        return Candidate(
            entity_id=entity.entity_id,
            name=entity.name,
            localized_name=base.localized_name,
            types=entity.types,
        )
