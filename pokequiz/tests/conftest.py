"""
Pytest fixtures for Pokequiz tests.

The remote catalog is replaced by FakeCatalog, served through
httpx.MockTransport, so no test touches the network.
"""

import io
import random

import httpx
import pytest
from PIL import Image

from ..catalog import CatalogClient, Region
from ..quiz import CandidateSelector
from ..api.service import QuizService

BASE_URL = "https://catalog.test/api/v2"
ART_URL = "https://art.test/official-artwork"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_png(size=(4, 4)) -> bytes:
    """RGBA PNG whose left half is opaque red and right half transparent."""
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    for x in range(size[0] // 2):
        for y in range(size[1]):
            image.putpixel((x, y), (255, 0, 0, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def pokemon_record(entity_id, name, types, artwork=True):
    return {
        "id": entity_id,
        "name": name,
        "types": [
            {"slot": i + 1, "type": {"name": t}} for i, t in enumerate(types)
        ],
        "sprites": {
            "other": {
                "official-artwork": {
                    "front_default": f"{ART_URL}/{entity_id}.png" if artwork else None,
                }
            }
        },
    }


def species_record(names=None, varieties=()):
    names = names or {}
    return {
        "names": [
            {"language": {"name": lang}, "name": name} for lang, name in names.items()
        ],
        "varieties": [
            {
                "is_default": is_default,
                "pokemon": {"name": name, "url": f"{BASE_URL}/pokemon/{vid}/"},
            }
            for name, vid, is_default in varieties
        ],
    }


class FakeCatalog:
    """
    In-memory PokeAPI stand-in.

    Unknown identities answer 404. Every request is recorded in
    self.requests so tests can count upstream calls.
    """

    def __init__(self):
        self.pokemon: dict[int, dict] = {}
        self.species: dict[int, dict] = {}
        self.images: dict[str, bytes] = {}
        self.requests: list[str] = []
        self.fail_with: int | None = None

    def add(self, entity_id, name, types, ja=None, ja_hrkt=None, varieties=(), artwork=True):
        self.pokemon[entity_id] = pokemon_record(entity_id, name, types, artwork=artwork)
        names = {"en": name.capitalize()}
        if ja:
            names["ja"] = ja
        if ja_hrkt:
            names["ja-Hrkt"] = ja_hrkt
        self.species[entity_id] = species_record(
            names, [(name, entity_id, True), *varieties]
        )
        if artwork:
            self.images[f"{ART_URL}/{entity_id}.png"] = make_png()

    def add_form(self, entity_id, name, types):
        self.pokemon[entity_id] = pokemon_record(entity_id, name, types)
        self.images[f"{ART_URL}/{entity_id}.png"] = make_png()

    def count(self, fragment: str) -> int:
        return sum(1 for url in self.requests if url.endswith(fragment))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with)

        if url in self.images:
            return httpx.Response(200, content=self.images[url])

        path = request.url.path.rstrip("/").split("/")
        kind, key = path[-2], path[-1]
        if not key.isdigit():
            return httpx.Response(404)
        table = {"pokemon": self.pokemon, "pokemon-species": self.species}.get(kind, {})
        record = table.get(int(key))
        if record is None:
            return httpx.Response(404, json={"detail": "Not found."})
        return httpx.Response(200, json=record)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    """Catalog with a handful of kanto/johto/hoenn entries and their forms."""
    catalog = FakeCatalog()
    catalog.add(1, "bulbasaur", ["grass", "poison"], ja="フシギダネ", ja_hrkt="フシギダネ")
    catalog.add(
        6,
        "charizard",
        ["fire", "flying"],
        ja_hrkt="リザードン",
        varieties=[
            ("charizard-mega-x", 10034, False),
            ("charizard-mega-y", 10035, False),
            ("charizard-gmax", 10196, False),
        ],
    )
    catalog.add_form(10034, "charizard-mega-x", ["fire", "dragon"])
    catalog.add_form(10035, "charizard-mega-y", ["fire", "flying"])
    catalog.add_form(10196, "charizard-gmax", ["fire", "flying"])
    catalog.add(
        37,
        "vulpix",
        ["fire"],
        ja_hrkt="ロコン",
        varieties=[("vulpix-alola", 10103, False)],
    )
    catalog.add_form(10103, "vulpix-alola", ["ice"])
    catalog.add(250, "ho-oh", ["fire", "flying"], ja="ホウオウ")
    catalog.add(
        383,
        "groudon",
        ["ground"],
        ja_hrkt="グラードン",
        varieties=[("groudon-primal", 10078, False)],
    )
    catalog.add_form(10078, "groudon-primal", ["ground", "fire"])
    return catalog


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(fake_catalog, clock) -> CatalogClient:
    """Catalog client backed by the fake catalog."""
    http = httpx.Client(transport=fake_catalog.transport())
    yield CatalogClient(base_url=BASE_URL, ttl=60, http_client=http, clock=clock)
    http.close()


@pytest.fixture
def small_regions() -> tuple:
    """Two tiny regions covering ids 1-6 and 37-40."""
    return (
        Region(key="north", label="北", generation=1, first=1, last=6),
        Region(key="south", label="南", generation=2, first=37, last=40),
    )


@pytest.fixture
def selector(client) -> CandidateSelector:
    return CandidateSelector(client, rng=random.Random(42), max_workers=4)


@pytest.fixture
def service(client, selector, clock) -> QuizService:
    """Quiz service over the fake catalog with a controllable clock."""
    return QuizService(client=client, selector=selector, clock=clock)
