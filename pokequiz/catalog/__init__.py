"""
Catalog Module - Access to the external creature catalog.

Everything that talks to PokeAPI lives here:
- CatalogClient: cached lookups of entities, species and artwork
- TTLCache: the expiring read-through cache behind the client
- REGIONS: static national dex partitions
- to_silhouette: artwork rendering
"""

from .cache import TTLCache, CacheEntry
from .client import (
    CatalogClient,
    CatalogEntity,
    SpeciesRecord,
    LocalizedName,
    Variant,
    parse_entity_id,
)
from .regions import Region, REGIONS, MAX_ENTITY_ID, region_for_id, region_label
from .artwork import to_silhouette, encode_png

__all__ = [
    "TTLCache",
    "CacheEntry",
    "CatalogClient",
    "CatalogEntity",
    "SpeciesRecord",
    "LocalizedName",
    "Variant",
    "parse_entity_id",
    "Region",
    "REGIONS",
    "MAX_ENTITY_ID",
    "region_for_id",
    "region_label",
    "to_silhouette",
    "encode_png",
]
