"""
Catalog Client - Read-through access to the PokeAPI catalog.

The client:
1. Fetches entity records, species records and official artwork
2. Caches each kind in its own TTL cache, keyed by identity
3. Raises typed errors for every upstream failure

No retries are made here; callers decide what to do with a failure.
Failed lookups are never cached.
"""

from __future__ import annotations
import io
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError, NotFoundError, UpstreamError
from .cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_TIMEOUT_SECONDS = 15.0

# Locale preference for display names: kana first, then general Japanese
LOCALE_PREFERENCE = ("ja-Hrkt", "ja")

_TRAILING_ID = re.compile(r"/(\d+)/?$")


@dataclass(frozen=True)
class CatalogEntity:
    """A catalog entry (species default form or alternate form)."""
    entity_id: int
    name: str
    types: tuple[str, ...] = ()
    artwork_url: str = ""


@dataclass(frozen=True)
class LocalizedName:
    language: str
    name: str


@dataclass(frozen=True)
class Variant:
    """An alternate form of a species with its own identity."""
    name: str
    entity_id: int
    is_default: bool = False


@dataclass(frozen=True)
class SpeciesRecord:
    """Species data used for localization and form lookup."""
    species_id: int
    names: tuple[LocalizedName, ...] = ()
    varieties: tuple[Variant, ...] = ()

    def localized_name(self, preference: tuple[str, ...] = LOCALE_PREFERENCE) -> str | None:
        """Best display name for the preferred locales, or None."""
        by_language = {}
        for entry in self.names:
            by_language.setdefault(entry.language, entry.name)
        for language in preference:
            if by_language.get(language):
                return by_language[language]
        return None


def parse_entity_id(url: str) -> int:
    """Extract the trailing numeric identity from a catalog reference URL."""
    match = _TRAILING_ID.search(url)
    if not match:
        raise ValueError(f"No identity in reference: {url!r}")
    return int(match.group(1))


@dataclass
class CatalogClient:
    """
    Cached client for the remote catalog.

    Usage:
        client = CatalogClient(ttl=1800)

        entity = client.fetch_entity(25)
        name = client.fetch_localized_name(25)
        image = client.fetch_artwork(25)

    Pass http_client to reuse a configured httpx.Client (tests pass one
    backed by httpx.MockTransport).
    """
    base_url: str = DEFAULT_BASE_URL
    ttl: float = DEFAULT_TTL_SECONDS
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    http_client: httpx.Client | None = None
    clock: Callable[[], float] = time.monotonic

    _entities: TTLCache[CatalogEntity] = field(init=False, repr=False)
    _species: TTLCache[SpeciesRecord] = field(init=False, repr=False)
    _artwork: TTLCache[Image.Image] = field(init=False, repr=False)
    _owns_http: bool = field(init=False, default=False, repr=False)

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        if self.http_client is None:
            self.http_client = httpx.Client(timeout=self.timeout, follow_redirects=True)
            self._owns_http = True
        self._entities = TTLCache(self.ttl, clock=self.clock, name="entity")
        self._species = TTLCache(self.ttl, clock=self.clock, name="species")
        self._artwork = TTLCache(self.ttl, clock=self.clock, name="artwork")

    # =========================================================================
    # Lookups
    # =========================================================================

    def fetch_entity(self, entity_id: int) -> CatalogEntity:
        """Entity record for an identity."""
        return self._entities.get_or_fetch(
            entity_id, lambda: self._download_entity(entity_id)
        )

    def fetch_species(self, species_id: int) -> SpeciesRecord:
        """Species record (localized names and forms)."""
        return self._species.get_or_fetch(
            species_id, lambda: self._download_species(species_id)
        )

    def fetch_localized_name(self, species_id: int) -> str:
        """
        Japanese display name for a species.

        Prefers the kana representation, then general Japanese.

        Raises:
            NotFoundError: if the species has neither
        """
        name = self.fetch_species(species_id).localized_name()
        if not name:
            raise NotFoundError(f"No localized name for species {species_id}")
        return name

    def fetch_variants(self, species_id: int) -> list[Variant]:
        """All forms of a species, the default form included."""
        return list(self.fetch_species(species_id).varieties)

    def fetch_artwork(self, entity_id: int) -> Image.Image:
        """Decoded official artwork for an identity."""
        return self._artwork.get_or_fetch(
            entity_id, lambda: self._download_artwork(entity_id)
        )

    def close(self):
        if self._owns_http and self.http_client is not None:
            self.http_client.close()

    def __enter__(self) -> CatalogClient:
        return self

    def __exit__(self, *exc_info):
        self.close()

    # =========================================================================
    # Upstream
    # =========================================================================

    def _download_entity(self, entity_id: int) -> CatalogEntity:
        data = self._get_json(f"{self.base_url}/pokemon/{entity_id}")
        try:
            slots = sorted(data.get("types", []), key=lambda t: t.get("slot", 0))
            artwork = (
                data.get("sprites", {})
                .get("other", {})
                .get("official-artwork", {})
                .get("front_default")
            )
            return CatalogEntity(
                entity_id=int(data["id"]),
                name=data["name"],
                types=tuple(t["type"]["name"] for t in slots),
                artwork_url=artwork or "",
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise UpstreamError(f"Malformed entity record {entity_id}: {e}") from e

    def _download_species(self, species_id: int) -> SpeciesRecord:
        data = self._get_json(f"{self.base_url}/pokemon-species/{species_id}")
        try:
            names = tuple(
                LocalizedName(language=n["language"]["name"], name=n["name"])
                for n in data.get("names", [])
            )
            varieties = tuple(
                Variant(
                    name=v["pokemon"]["name"],
                    entity_id=parse_entity_id(v["pokemon"]["url"]),
                    is_default=bool(v.get("is_default", False)),
                )
                for v in data.get("varieties", [])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed species record {species_id}: {e}") from e
        return SpeciesRecord(species_id=species_id, names=names, varieties=varieties)

    def _download_artwork(self, entity_id: int) -> Image.Image:
        entity = self.fetch_entity(entity_id)
        if not entity.artwork_url:
            raise NotFoundError(f"No artwork for {entity_id}")

        response = self._get(entity.artwork_url)
        try:
            image = Image.open(io.BytesIO(response.content))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise DecodeError(f"Could not decode artwork for {entity_id}: {e}") from e
        return image

    def _get(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            response = self.http_client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Catalog request failed for %s: %s", url, e)
            raise UpstreamError(f"Catalog request failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Not found upstream: {url}")
        if response.status_code != 200:
            logger.warning("Catalog returned status %s for %s", response.status_code, url)
            raise UpstreamError(f"Catalog status {response.status_code}")
        return response

    def _get_json(self, url: str) -> dict[str, Any]:
        response = self._get(url)
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from catalog: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamError("Unexpected catalog payload")
        return data
