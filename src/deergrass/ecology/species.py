"""
Per-species behaviour.

Every species composes its turn from the same primitive steps (aging,
metabolic decay, hazard check, feeding, reproduction, movement); the
behaviour table maps each organism kind to its turn function.

Newborns are reserved on the field and appended to the caller's newborn
list; the simulator places them once the sweep is over.
"""
from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional

from deergrass.ecology.config import WorldConfig
from deergrass.ecology.field import Field, Location
from deergrass.ecology.organism import DEER, GRASS, TREE, WILDFIRE, Organism


Behavior = Callable[[Organism, Field, List[Organism], random.Random, WorldConfig], None]


def create_organism(
    kind: str,
    location: Location,
    rng: random.Random,
    config: WorldConfig,
    random_age: bool = False,
) -> Organism:
    """
    Newborns start at age 0 with full health. Organisms created for the
    initial population get a random age, health and reproduction counter.
    """
    organism = Organism(kind=kind, location=location)
    if kind == DEER:
        params = config.deer
        if random_age:
            organism.age = rng.randrange(params.max_age)
            organism.health = rng.randrange(params.max_health) + 1
        else:
            organism.health = params.max_health
    elif kind in (TREE, GRASS):
        if random_age:
            organism.turns_since_reproduction = rng.randrange(
                config.params_for(kind).reproduction_interval
            )
    elif kind == WILDFIRE:
        if random_age:
            organism.age = rng.randrange(config.wildfire.burn_time)
    else:
        raise ValueError(f"Unknown organism kind: {kind}")
    return organism


def _increment_age(organism: Organism, max_age: Optional[int]) -> None:
    # Ageless species keep age 0.
    if max_age is None:
        return
    organism.age += 1
    if organism.age >= max_age:
        organism.set_dead()


def _burns(organism: Organism, field: Field, rng: random.Random, survival_probability: float) -> bool:
    # Only the first live fire in neighbour order gets a draw.
    for where in field.adjacent_locations(organism.location):
        occupant = field.occupant_at(where)
        if occupant is not None and occupant.kind == WILDFIRE and occupant.is_alive():
            return rng.random() >= survival_probability
    return False


def _find_food(deer: Organism, field: Field, diet) -> Optional[Location]:
    """Eat the first live plant next to the deer and return its cell."""
    for where in field.adjacent_locations(deer.location):
        plant = field.occupant_at(where)
        if plant is not None and plant.kind in diet and plant.is_alive():
            plant.set_dead()
            field.clear(where)
            return where
    return None


def _place_newborns(
    free: List[Location],
    births: int,
    field: Field,
    newborns: List[Organism],
    make: Callable[[Location], Organism],
) -> int:
    placed = 0
    while placed < births and free:
        loc = free.pop(0)
        young = make(loc)
        field.reserve(young, loc)
        newborns.append(young)
        placed += 1
    return placed


def _ignite(plant: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    fire = create_organism(WILDFIRE, plant.location, rng, config)
    field.reserve(fire, plant.location)
    newborns.append(fire)


def _litter_size(deer: Organism, config: WorldConfig, rng: random.Random) -> int:
    params = config.deer
    can_breed = deer.age >= params.breeding_age and deer.health >= params.breeding_health
    if can_breed and rng.random() < params.breeding_probability:
        return rng.randrange(params.max_litter_size) + 1
    return 0


def act_deer(deer: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    """
    Age, get hungrier, eat the first adjacent plant, maybe breed, then move.

    Starvation is checked after the chance to eat, so a deer on its last
    health point survives if food is adjacent.
    """
    params = config.deer
    _increment_age(deer, params.max_age)
    if not deer.is_alive():
        return
    deer.health -= 1

    destination = _find_food(deer, field, params.diet)
    if destination is not None:
        deer.health += params.food_value
    if deer.health <= 0:
        deer.set_dead()
        return

    births = _litter_size(deer, config, rng)
    if births:
        free = [loc for loc in field.free_adjacent_locations(deer.location) if loc != destination]
        _place_newborns(free, births, field, newborns, lambda loc: create_organism(DEER, loc, rng, config))

    if destination is None:
        free = field.free_adjacent_locations(deer.location)
        if free:
            destination = rng.choice(free)
    if destination is not None:
        field.move(deer, destination)
    else:
        # Overcrowding.
        deer.set_dead()


def _act_plant(plant: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    params = config.params_for(plant.kind)
    plant.turns_since_reproduction += 1
    _increment_age(plant, params.max_age)
    if not plant.is_alive():
        return

    if _burns(plant, field, rng, params.fire_survival_probability):
        plant.set_dead()
        if config.ignite_on_burn:
            _ignite(plant, field, newborns, rng, config)
        return

    if plant.turns_since_reproduction >= params.reproduction_interval:
        seeds = rng.randrange(params.max_seeds) + 1
        free = field.free_adjacent_locations(plant.location)
        _place_newborns(free, seeds, field, newborns, lambda loc: create_organism(plant.kind, loc, rng, config))
        plant.turns_since_reproduction = 0


def act_tree(tree: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    """Trees may burn next to a fire and drop saplings every few turns."""
    _act_plant(tree, field, newborns, rng, config)


def act_grass(grass: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    _act_plant(grass, field, newborns, rng, config)


def act_wildfire(fire: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    # Fires spread only by igniting the vegetation they burn.
    _increment_age(fire, config.wildfire.burn_time)


BEHAVIORS: Dict[str, Behavior] = {
    DEER: act_deer,
    TREE: act_tree,
    GRASS: act_grass,
    WILDFIRE: act_wildfire,
}


def act(organism: Organism, field: Field, newborns: List[Organism], rng: random.Random, config: WorldConfig) -> None:
    """Advance one organism by one tick. Dead organisms do nothing."""
    try:
        behavior = BEHAVIORS[organism.kind]
    except KeyError:
        raise ValueError(f"No behaviour registered for kind {organism.kind!r}") from None
    if organism.is_alive():
        behavior(organism, field, newborns, rng, config)
