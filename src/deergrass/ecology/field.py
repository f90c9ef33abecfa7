"""
Bounded 2-D field of organism occupancy.

Each cell holds at most one occupant. During a sweep, cells can additionally
be reserved for newborns that are placed only after the sweep completes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional

import numpy as np

if TYPE_CHECKING:
    from deergrass.ecology.organism import Organism


class FieldError(RuntimeError):
    """Field and organisms disagree about who is where."""


class InvalidPlacement(FieldError):
    pass


class OutOfBounds(FieldError, IndexError):
    pass


@dataclass(frozen=True)
class Location:
    row: int
    col: int


# Neighbour offsets in the fixed order used for every adjacency scan.
_OFFSETS = [(dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)]


class Field:
    def __init__(self, height: int, width: int):
        if height <= 0 or width <= 0:
            raise ValueError(f"Field dimensions must be positive, got {height}x{width}")
        self.height = int(height)
        self.width = int(width)
        self._grid: List[List[Optional[Organism]]] = [
            [None for _ in range(self.width)] for _ in range(self.height)
        ]
        self._reserved: Dict[Location, Organism] = {}

    def in_bounds(self, loc: Location) -> bool:
        return 0 <= loc.row < self.height and 0 <= loc.col < self.width

    def _check(self, loc: Location) -> None:
        if not self.in_bounds(loc):
            raise OutOfBounds(f"{loc} outside {self.height}x{self.width} field")

    def occupant_at(self, loc: Location) -> Optional[Organism]:
        self._check(loc)
        return self._grid[loc.row][loc.col]

    def is_free(self, loc: Location) -> bool:
        """A cell is free when unreserved and empty or holding a dead organism."""
        if loc in self._reserved:
            return False
        occupant = self.occupant_at(loc)
        return occupant is None or not occupant.is_alive()

    def adjacent_locations(self, loc: Location) -> List[Location]:
        self._check(loc)
        adjacent = []
        for dr, dc in _OFFSETS:
            nxt = Location(loc.row + dr, loc.col + dc)
            if self.in_bounds(nxt):
                adjacent.append(nxt)
        return adjacent

    def free_adjacent_locations(self, loc: Location) -> List[Location]:
        return [nxt for nxt in self.adjacent_locations(loc) if self.is_free(nxt)]

    def free_adjacent_location(self, loc: Location) -> Optional[Location]:
        free = self.free_adjacent_locations(loc)
        return free[0] if free else None

    def place(self, organism: Organism, loc: Location) -> None:
        if not self.in_bounds(loc):
            raise InvalidPlacement(f"cannot place {organism.kind} at {loc}: out of bounds")
        claimant = self._reserved.get(loc)
        if claimant is not None and claimant is not organism:
            raise InvalidPlacement(f"cannot place {organism.kind} at {loc}: reserved for {claimant!r}")
        occupant = self._grid[loc.row][loc.col]
        if occupant is not None and occupant is not organism and occupant.is_alive():
            raise InvalidPlacement(f"cannot place {organism.kind} at {loc}: occupied by {occupant!r}")
        if claimant is not None:
            del self._reserved[loc]
        self._grid[loc.row][loc.col] = organism
        organism.location = loc

    def clear(self, loc: Location) -> None:
        self._check(loc)
        self._grid[loc.row][loc.col] = None

    def remove(self, organism: Organism) -> None:
        """Clear the organism's cell unless something else has taken it over."""
        loc = organism.location
        if self.in_bounds(loc) and self._grid[loc.row][loc.col] is organism:
            self._grid[loc.row][loc.col] = None

    def move(self, organism: Organism, loc: Location) -> None:
        if not self.is_free(loc):
            raise InvalidPlacement(f"cannot move {organism!r} to occupied {loc}")
        self.remove(organism)
        self.place(organism, loc)

    def reserve(self, organism: Organism, loc: Location) -> None:
        """Claim a free cell for a newborn placed after the sweep."""
        if not self.is_free(loc):
            raise InvalidPlacement(f"cannot reserve {loc} for {organism.kind}: not free")
        self._reserved[loc] = organism
        organism.location = loc

    @property
    def pending_reservations(self) -> int:
        return len(self._reserved)

    def clear_all(self) -> None:
        for row in self._grid:
            for col in range(self.width):
                row[col] = None
        self._reserved.clear()

    def locations(self) -> Iterator[Location]:
        for row in range(self.height):
            for col in range(self.width):
                yield Location(row, col)

    def as_array(self) -> np.ndarray:
        """Species code per cell; 0 for empty cells and dead occupants."""
        from deergrass.ecology.organism import SPECIES_CODES

        grid = np.zeros((self.height, self.width), dtype=np.int8)
        for row in range(self.height):
            for col in range(self.width):
                occupant = self._grid[row][col]
                if occupant is not None and occupant.is_alive():
                    grid[row, col] = SPECIES_CODES[occupant.kind]
        return grid

    def validate(self, organisms: Iterable[Organism]) -> None:
        """Raise FieldError if the field and the master list are out of sync."""
        if self._reserved:
            raise FieldError(f"{len(self._reserved)} reservations were never placed")
        listed = set()
        for organism in organisms:
            listed.add(id(organism))
            if not organism.is_alive():
                raise FieldError(f"dead organism still listed: {organism!r}")
            if self.occupant_at(organism.location) is not organism:
                raise FieldError(f"{organism!r} not recorded at its location")
        for loc in self.locations():
            occupant = self._grid[loc.row][loc.col]
            if occupant is None:
                continue
            if id(occupant) not in listed:
                raise FieldError(f"{occupant!r} at {loc} is missing from the organism list")
