"""Read-only reference tables used by the gacha commands.

Loaded once at startup and shared by every handler; nothing here is mutated
after loading.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

WEATHER_TYPES = ("clear", "normal", "extreme")


@dataclass(frozen=True)
class CarModel:
    name: str
    trims: Tuple[str, ...]


@dataclass(frozen=True)
class CarBrand:
    brand: str
    models: Tuple[CarModel, ...]


@dataclass(frozen=True)
class Biome:
    key: str
    prefixes: Tuple[str, ...]
    # weather type -> choices; a plain list in the data file counts as "normal"
    weather: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    exclusive_plants: Tuple[str, ...] = ()
    exclusive_resources: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlanetData:
    biomes: Dict[str, Biome]
    star_systems: Dict[str, Tuple[str, ...]]


@dataclass(frozen=True)
class ReferenceData:
    cars: Tuple[CarBrand, ...] = ()
    planets: Optional[PlanetData] = None


def parse_cars(raw: list) -> Tuple[CarBrand, ...]:
    brands = []
    for entry in raw:
        models = tuple(
            CarModel(name=m["name"], trims=tuple(m.get("trims") or ()))
            for m in entry.get("models") or ()
            if m.get("name")
        )
        if models:
            brands.append(CarBrand(brand=entry["brand"], models=models))
    return tuple(brands)


def _parse_weather(raw) -> Dict[str, Tuple[str, ...]]:
    if isinstance(raw, list):
        return {"normal": tuple(raw)} if raw else {}
    if isinstance(raw, dict):
        return {k: tuple(raw[k]) for k in WEATHER_TYPES if raw.get(k)}
    return {}


def parse_planets(raw: dict) -> Optional[PlanetData]:
    biomes = {}
    for key, entry in (raw.get("biomes") or {}).items():
        biomes[key] = Biome(
            key=key,
            prefixes=tuple(entry.get("prefixes") or ()),
            weather=_parse_weather(entry.get("weather")),
            exclusive_plants=tuple(entry.get("exclusive_plants") or ()),
            exclusive_resources=tuple(entry.get("exclusive_resources") or ()),
        )
    if not biomes:
        return None
    star_systems = {
        key: tuple(entry.get("exclusive_resources") or ())
        for key, entry in (raw.get("star_systems") or {}).items()
    }
    return PlanetData(biomes=biomes, star_systems=star_systems)


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Reference data not found at %s", path)
        return None


@lru_cache(maxsize=None)
def load_reference_data(data_dir: Optional[str] = None) -> ReferenceData:
    base = Path(data_dir) if data_dir else DATA_DIR
    raw_cars = _read_json(base / "cars.json")
    raw_planets = _read_json(base / "nms.json")
    cars = parse_cars(raw_cars) if raw_cars else ()
    planets = parse_planets(raw_planets) if raw_planets else None
    logger.info(
        "Loaded %s car brands and %s biomes from %s",
        len(cars), len(planets.biomes) if planets else 0, base,
    )
    return ReferenceData(cars=cars, planets=planets)
