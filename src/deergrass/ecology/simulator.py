"""
Step controller for the deer/tree/grass/wildfire ecology.
Pure-Python, grid-based, discrete ticks.

One tick is a two-phase protocol:
  1. sweep: every organism alive in a snapshot of the master list acts, in
     insertion order, against the live field. Births are only reserved.
  2. reconcile: newborns are placed and appended, then dead organisms are
     purged from the master list and the field.
"""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

import numpy as np

from deergrass.ecology.config import WorldConfig, build_config
from deergrass.ecology.field import Field, Location
from deergrass.ecology.organism import DEER, GRASS, KINDS, SPECIES_CODES, TREE, WILDFIRE, Organism
from deergrass.ecology.species import act, create_organism

logger = logging.getLogger(__name__)

# Edit these for quick runs without CLI arguments.
RUN_SETTINGS = {
    "steps": 500,
    "log_every": 10,
    "seed": 1,
}

# Optional config overrides (leave empty to use WorldConfig defaults).
CONFIG_OVERRIDES: Dict[str, object] = {
    # "width": 80,
    # "height": 60,
    # "ignite_on_burn": False,
}


class Simulator:
    def __init__(self, config: Optional[WorldConfig] = None, seed: Optional[int] = None):
        self.config = config or WorldConfig()
        self.config.validate()
        self.seed = seed
        self.rng = random.Random(seed)
        self.field = Field(self.config.height, self.config.width)
        self.organisms: List[Organism] = []
        self.tick = 0

    def add(self, organism: Organism) -> Organism:
        self.field.place(organism, organism.location)
        self.organisms.append(organism)
        return organism

    def populate(self) -> None:
        """Randomly fill the field; at most one species is created per cell."""
        cfg = self.config
        creation = [
            (DEER, cfg.deer_creation_probability),
            (TREE, cfg.tree_creation_probability),
            (GRASS, cfg.grass_creation_probability),
            (WILDFIRE, cfg.wildfire_creation_probability),
        ]
        for loc in self.field.locations():
            for kind, probability in creation:
                if self.rng.random() < probability:
                    self.add(create_organism(kind, loc, self.rng, cfg, random_age=True))
                    break

    def reset(self) -> None:
        self.rng = random.Random(self.seed)
        self.field.clear_all()
        self.organisms = []
        self.tick = 0
        self.populate()

    def step(self) -> Dict[str, int]:
        self.tick += 1
        newborns: List[Organism] = []
        for organism in list(self.organisms):
            if organism.is_alive():
                act(organism, self.field, newborns, self.rng, self.config)

        for young in newborns:
            self.field.place(young, young.location)
        self.organisms.extend(newborns)

        survivors = []
        deaths = 0
        for organism in self.organisms:
            if organism.is_alive():
                survivors.append(organism)
            else:
                self.field.remove(organism)
                deaths += 1
        self.organisms = survivors

        if self.config.check_invariants:
            self.field.validate(self.organisms)
        logger.debug("tick %d: births=%d deaths=%d alive=%d", self.tick, len(newborns), deaths, len(survivors))
        if not survivors:
            logger.info("tick %d: every organism has died", self.tick)
        return {"births": len(newborns), "deaths": deaths}

    def run(self, steps: int) -> None:
        for _ in range(steps):
            self.step()

    def is_viable(self) -> bool:
        return any(organism.is_alive() for organism in self.organisms)

    def snapshot(self) -> np.ndarray:
        return self.field.as_array()

    def population_counts(self) -> Dict[str, int]:
        counts = np.bincount(self.snapshot().ravel(), minlength=len(KINDS) + 1)
        return {kind: int(counts[SPECIES_CODES[kind]]) for kind in KINDS}

    def organism_at(self, row: int, col: int) -> Optional[Organism]:
        return self.field.occupant_at(Location(row, col))


def run_simulation(
    steps: int = 200,
    log_every: int = 10,
    seed: Optional[int] = 1,
    config: Optional[WorldConfig] = None,
    collect_history: bool = False,
) -> Dict[str, List[int]]:
    sim = Simulator(config or WorldConfig(), seed=seed)
    sim.populate()
    history: Dict[str, List[int]] = {"tick": [], "births": [], "deaths": []}
    for kind in KINDS:
        history[f"{kind}_count"] = []

    for step_idx in range(steps):
        events = sim.step()
        counts = sim.population_counts()
        if collect_history:
            history["tick"].append(sim.tick)
            history["births"].append(events["births"])
            history["deaths"].append(events["deaths"])
            for kind in KINDS:
                history[f"{kind}_count"].append(counts[kind])
        if log_every > 0 and (step_idx % log_every == 0 or step_idx == steps - 1):
            print(
                f"t={sim.tick:04d} deer={counts['deer']:4d} tree={counts['tree']:4d} "
                f"grass={counts['grass']:4d} fire={counts['wildfire']:3d} "
                f"births={events['births']:3d} deaths={events['deaths']:3d}"
            )
        if not sim.is_viable():
            break
    return history if collect_history else {}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    cfg = build_config(CONFIG_OVERRIDES)
    run_simulation(
        steps=int(RUN_SETTINGS["steps"]),
        log_every=int(RUN_SETTINGS["log_every"]),
        seed=int(RUN_SETTINGS["seed"]),
        config=cfg,
    )


if __name__ == "__main__":
    main()
