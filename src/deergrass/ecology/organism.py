"""
Organism record shared by every species.

Species are a closed set of tagged variants: one record shape, a ``kind`` tag,
and a behaviour function per tag (see ``species.py``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from deergrass.ecology.field import Location


DEER = "deer"
TREE = "tree"
GRASS = "grass"
WILDFIRE = "wildfire"

KINDS: Tuple[str, ...] = (DEER, TREE, GRASS, WILDFIRE)

# 0 is reserved for empty (or dead) cells in Field.as_array()
SPECIES_CODES: Dict[str, int] = {kind: i + 1 for i, kind in enumerate(KINDS)}


@dataclass(eq=False)
class Organism:
    kind: str
    location: Location
    age: int = 0
    health: int = 0
    turns_since_reproduction: int = 0
    alive: bool = True

    def is_alive(self) -> bool:
        return self.alive

    def set_dead(self) -> None:
        """Mark dead. Removal from the field happens at reconciliation."""
        self.alive = False

    def __repr__(self) -> str:
        state = "alive" if self.alive else "dead"
        return f"{self.kind}@({self.location.row},{self.location.col}) age={self.age} {state}"
