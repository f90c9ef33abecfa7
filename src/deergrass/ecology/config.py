"""
Species parameters and world configuration.

Defaults follow the classic deer and tree model; every value can be
overridden from JSON or directly on the dataclasses.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Tuple
import json


@dataclass
class DeerParams:
    # The age to which a deer can live.
    max_age: int = 150
    # The age at which a deer can start to breed.
    breeding_age: int = 15
    max_health: int = 8
    # Minimum health to breed.
    breeding_health: int = 5
    breeding_probability: float = 0.08
    max_litter_size: int = 2
    # Health gained from a single plant.
    food_value: int = 1
    diet: Tuple[str, ...] = ("grass", "tree")


@dataclass
class TreeParams:
    # Turns between two rounds of saplings.
    reproduction_interval: int = 5
    max_seeds: int = 2
    fire_survival_probability: float = 0.60
    max_age: Optional[int] = None


@dataclass
class GrassParams:
    reproduction_interval: int = 3
    max_seeds: int = 1
    fire_survival_probability: float = 0.20
    max_age: Optional[int] = None


@dataclass
class WildfireParams:
    # Ticks a fire burns before going out.
    burn_time: int = 3


SPECIES_SECTIONS = {
    "deer": DeerParams,
    "tree": TreeParams,
    "grass": GrassParams,
    "wildfire": WildfireParams,
}


@dataclass
class WorldConfig:
    width: int = 60
    height: int = 40
    # Per-cell creation probabilities used by Simulator.populate(), checked in this order.
    deer_creation_probability: float = 0.04
    tree_creation_probability: float = 0.10
    grass_creation_probability: float = 0.20
    wildfire_creation_probability: float = 0.002
    # Burning trees and grass turn into fire in their own cell.
    ignite_on_burn: bool = True
    check_invariants: bool = False
    deer: DeerParams = field(default_factory=DeerParams)
    tree: TreeParams = field(default_factory=TreeParams)
    grass: GrassParams = field(default_factory=GrassParams)
    wildfire: WildfireParams = field(default_factory=WildfireParams)

    def params_for(self, kind: str):
        return getattr(self, kind)

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Field dimensions must be positive, got {self.width}x{self.height}")
        probabilities = {
            "deer_creation_probability": self.deer_creation_probability,
            "tree_creation_probability": self.tree_creation_probability,
            "grass_creation_probability": self.grass_creation_probability,
            "wildfire_creation_probability": self.wildfire_creation_probability,
            "deer.breeding_probability": self.deer.breeding_probability,
            "tree.fire_survival_probability": self.tree.fire_survival_probability,
            "grass.fire_survival_probability": self.grass.fire_survival_probability,
        }
        for name, value in probabilities.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.deer.max_litter_size < 1 or self.tree.max_seeds < 1 or self.grass.max_seeds < 1:
            raise ValueError("Litter and seed sizes must be at least 1")
        if self.tree.reproduction_interval < 1 or self.grass.reproduction_interval < 1:
            raise ValueError("Reproduction intervals must be at least 1")
        if self.deer.max_age < 1 or self.deer.max_health < 1:
            raise ValueError("deer.max_age and deer.max_health must be at least 1")
        if self.wildfire.burn_time < 1:
            raise ValueError("wildfire.burn_time must be at least 1")
        for kind in ("tree", "grass"):
            max_age = self.params_for(kind).max_age
            if max_age is not None and max_age < 1:
                raise ValueError(f"{kind}.max_age must be at least 1, got {max_age}")


# Optional config file (JSON). If present, it seeds WorldConfig before overrides.
CONFIG_PATH = Path(__file__).with_name("ecology_config.json")


def _species_params(name: str, data: Dict[str, object]):
    params_cls = SPECIES_SECTIONS[name]
    if not isinstance(data, dict):
        raise ValueError(f"Section {name} must be an object, got {data!r}")
    known = {f.name for f in fields(params_cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {params_cls.__name__} field(s): {sorted(unknown)}")
    values = dict(data)
    if "diet" in values:
        values["diet"] = tuple(values["diet"])
    return params_cls(**values)


def load_config(path: str | Path) -> WorldConfig:
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    cfg = WorldConfig()
    known = {f.name for f in fields(WorldConfig)}
    for name, value in data.items():
        if name not in known:
            raise ValueError(f"Unknown WorldConfig field: {name}")
        if name in SPECIES_SECTIONS:
            value = _species_params(name, value)
        setattr(cfg, name, value)
    cfg.validate()
    return cfg


def build_config(overrides: Optional[Dict[str, object]] = None) -> WorldConfig:
    if CONFIG_PATH.exists():
        cfg = load_config(CONFIG_PATH)
    else:
        cfg = WorldConfig()
    if overrides:
        for key, value in overrides.items():
            if not hasattr(cfg, key):
                raise ValueError(f"Unknown WorldConfig field: {key}")
            if key in SPECIES_SECTIONS and isinstance(value, dict):
                value = _species_params(key, value)
            setattr(cfg, key, value)
    cfg.validate()
    return cfg
