import numpy as np
import pytest

from deergrass.ecology.config import DeerParams, TreeParams, WorldConfig
from deergrass.ecology.field import Location
from deergrass.ecology.organism import DEER, GRASS, KINDS, TREE, WILDFIRE, Organism
from deergrass.ecology.simulator import Simulator, run_simulation


def _small_config(**overrides):
    config = WorldConfig(width=20, height=15, check_invariants=True)
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


def _populated(seed, **overrides):
    sim = Simulator(_small_config(**overrides), seed=seed)
    sim.populate()
    return sim


def test_populate_places_every_organism_once():
    sim = _populated(seed=3)
    assert sim.organisms, "populate should create organisms on a 20x15 field"
    sim.field.validate(sim.organisms)
    assert len({id(o) for o in sim.organisms}) == len(sim.organisms)


def test_occupancy_and_locations_consistent_every_tick():
    sim = _populated(seed=7)
    for _ in range(60):
        sim.step()
        cells = [organism.location for organism in sim.organisms]
        assert len(cells) == len(set(cells)), "two live organisms share a cell"
        for organism in sim.organisms:
            assert organism.is_alive()
            assert sim.field.occupant_at(organism.location) is organism
        assert int(np.count_nonzero(sim.snapshot())) == len(sim.organisms)


def test_dead_organisms_never_return():
    sim = _populated(seed=21)
    buried = []
    for _ in range(40):
        before = list(sim.organisms)
        sim.step()
        alive_ids = {id(o) for o in sim.organisms}
        for organism in before:
            if not organism.is_alive():
                buried.append(organism)
                assert id(organism) not in alive_ids
        for organism in buried:
            assert not organism.is_alive()
            assert sim.field.occupant_at(organism.location) is not organism


def test_deterministic_replay():
    first = _populated(seed=11)
    second = _populated(seed=11)
    np.testing.assert_array_equal(first.snapshot(), second.snapshot())
    for _ in range(40):
        assert first.step() == second.step()
        np.testing.assert_array_equal(first.snapshot(), second.snapshot())


def test_reset_restores_initial_state():
    sim = _populated(seed=5)
    initial = sim.snapshot()
    sim.run(10)
    sim.reset()
    assert sim.tick == 0
    np.testing.assert_array_equal(sim.snapshot(), initial)


def test_newborns_join_after_sweep_without_acting():
    config = _small_config(width=3, height=3)
    sim = Simulator(config, seed=0)
    parent = sim.add(Organism(kind=TREE, location=Location(1, 1),
                              turns_since_reproduction=config.tree.reproduction_interval - 1))

    events = sim.step()

    assert 1 <= events["births"] <= config.tree.max_seeds
    assert events["deaths"] == 0
    assert sim.organisms[0] is parent
    saplings = sim.organisms[1:]
    assert len(saplings) == events["births"]
    for sapling in saplings:
        assert sapling.kind == TREE
        assert sapling.age == 0
        assert sapling.turns_since_reproduction == 0
        assert sim.field.occupant_at(sapling.location) is sapling
    assert sim.field.pending_reservations == 0


def test_eaten_grass_purged_and_deer_keeps_cell():
    config = _small_config(width=2, height=1)
    sim = Simulator(config, seed=0)
    deer = sim.add(Organism(kind=DEER, location=Location(0, 0), health=1))
    grass = sim.add(Organism(kind=GRASS, location=Location(0, 1)))

    events = sim.step()

    assert events == {"births": 0, "deaths": 1}
    assert sim.organisms == [deer]
    assert not grass.is_alive()
    assert sim.organism_at(0, 1) is deer
    assert sim.organism_at(0, 0) is None


def test_burned_tree_replaced_by_fire():
    config = _small_config(width=2, height=1)
    config.tree = TreeParams(fire_survival_probability=0.0)
    sim = Simulator(config, seed=0)
    tree = sim.add(Organism(kind=TREE, location=Location(0, 0)))
    sim.add(Organism(kind=WILDFIRE, location=Location(0, 1)))

    events = sim.step()

    assert events == {"births": 1, "deaths": 1}
    assert tree not in sim.organisms
    fire = sim.organism_at(0, 0)
    assert fire is not None and fire.kind == WILDFIRE
    assert [o.kind for o in sim.organisms] == [WILDFIRE, WILDFIRE]


def test_fire_burns_out_and_leaves_empty_field():
    config = _small_config(width=1, height=1)
    sim = Simulator(config, seed=0)
    sim.add(Organism(kind=WILDFIRE, location=Location(0, 0)))
    sim.run(config.wildfire.burn_time)
    assert sim.organisms == []
    assert not sim.is_viable()
    assert sim.organism_at(0, 0) is None


def test_lone_deer_dies_at_max_age():
    config = _small_config(width=5, height=5)
    config.deer = DeerParams(max_age=10, max_health=1000, breeding_probability=0.0)
    sim = Simulator(config, seed=0)
    deer = sim.add(Organism(kind=DEER, location=Location(2, 2), health=1000))

    sim.run(9)
    assert sim.organisms == [deer]
    assert deer.age == 9

    sim.step()
    assert not deer.is_alive()
    assert sim.organisms == []
    assert not np.any(sim.snapshot())


def test_population_counts_match_master_list():
    sim = _populated(seed=2)
    sim.run(5)
    counts = sim.population_counts()
    assert set(counts) == set(KINDS)
    for kind in KINDS:
        assert counts[kind] == sum(1 for o in sim.organisms if o.kind == kind)


def test_invalid_config_rejected():
    config = WorldConfig(width=0)
    with pytest.raises(ValueError):
        Simulator(config)


def test_run_simulation_history():
    config = WorldConfig(width=15, height=10)
    history = run_simulation(steps=12, log_every=0, seed=4, config=config, collect_history=True)
    ticks = history["tick"]
    assert ticks == list(range(1, len(ticks) + 1))
    for key in ["births", "deaths"] + [f"{kind}_count" for kind in KINDS]:
        assert len(history[key]) == len(ticks)


def test_run_simulation_prints_progress(capsys):
    config = WorldConfig(width=10, height=10)
    result = run_simulation(steps=3, log_every=1, seed=1, config=config)
    out = capsys.readouterr().out
    assert result == {}
    assert "t=0001" in out


@pytest.mark.parametrize("kind", [TREE, GRASS])
def test_ageless_plant_age_stays_bounded(kind):
    config = _small_config(width=1, height=1)
    sim = Simulator(config, seed=0)
    plant = sim.add(Organism(kind=kind, location=Location(0, 0)))
    sim.run(5000)
    assert sim.organisms == [plant]
    assert plant.age == 0


def test_plant_with_max_age_dies_of_old_age():
    config = _small_config(width=1, height=1)
    config.tree = TreeParams(max_age=20)
    sim = Simulator(config, seed=0)
    tree = sim.add(Organism(kind=TREE, location=Location(0, 0)))
    sim.run(19)
    assert tree.is_alive()
    sim.step()
    assert not tree.is_alive()
    assert sim.organisms == []
