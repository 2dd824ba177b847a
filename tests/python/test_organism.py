from __future__ import annotations

import math
import random
from collections import Counter

import pytest
from pytest import approx

from vibelife.config import OrganismConfig
from vibelife.rng import DeterministicRng
from vibelife.sim.core.organism import ActionHistory, Organism
from vibelife.sim.core.traits import OrganismTraits
from vibelife.sim.utils.math3d import Position, distance


def _make_organism(
    *,
    motility: float = 0.0,
    photosynthesis: float = 0.0,
    reproduction: float = 0.5,
    metabolism: float = 0.5,
    size: float = 1.0,
    energy: float = 100.0,
) -> Organism:
    return Organism(
        id="organism-0",
        position=Position(0.0, 0.0, 0.0),
        size=size,
        traits=OrganismTraits(
            motility=motility,
            photosynthesis=photosynthesis,
            predation=0.1,
            defense=0.1,
            sensory=0.1,
            reproduction=reproduction,
            metabolism=metabolism,
        ),
        energy=energy,
    )


def test_size_is_floored_at_construction():
    organism = _make_organism(size=0.01)
    assert organism.size == approx(0.1)


def test_history_weights_track_window_after_eviction():
    organism = _make_organism()
    organism.record_action("photosynthesis")
    for _ in range(20):
        organism.record_action("moved")

    assert len(organism.actions()) == 20
    assert organism.actions()[0] == "moved"
    assert "photosynthesis" not in organism.action_weights()
    assert organism.action_weights() == {"moved": 20.0}


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_history_weights_match_multiset_for_random_sequences(seed):
    chooser = random.Random(seed)
    history = ActionHistory(limit=20)
    recorded = []
    for _ in range(chooser.randint(0, 120)):
        label = chooser.choice(["moved", "photosynthesis", "reproduced", "rested"])
        history.record(label)
        recorded.append(label)
        window = recorded[-20:]
        assert history.labels() == window
        assert history.counts() == {k: float(v) for k, v in Counter(window).items()}


def test_normalized_weights_are_frequencies_of_window():
    history = ActionHistory(limit=4)
    for label in ["moved", "moved", "photosynthesis", "reproduced", "moved"]:
        history.record(label)

    assert history.labels() == ["moved", "photosynthesis", "reproduced", "moved"]
    assert history.frequencies() == {"moved": 0.5, "photosynthesis": 0.25, "reproduced": 0.25}
    assert ActionHistory().frequencies() == {}


def test_history_limit_must_be_positive():
    with pytest.raises(ValueError):
        ActionHistory(limit=0)


def test_accessors_return_copies():
    organism = _make_organism()
    organism.record_action("moved")
    organism.actions().append("tampered")
    organism.action_weights()["moved"] = 99.0

    assert organism.actions() == ["moved"]
    assert organism.action_weights() == {"moved": 1.0}


def test_low_motility_does_not_move_or_spend(scripted_rng):
    organism = _make_organism(motility=0.049)
    rng = scripted_rng()

    organism.move_organism(rng)

    assert rng.consumed == 0
    assert organism.position == Position(0.0, 0.0, 0.0)
    assert organism.energy == approx(100.0)
    assert organism.actions() == []


def test_movement_stays_on_ground_plane_and_costs_energy():
    organism = _make_organism(motility=0.5, size=1.0)
    organism.position.y = 3.0

    organism.move_organism(DeterministicRng(21))

    moved = organism.position.distance(Position(0.0, 3.0, 0.0))
    assert moved == approx(0.25)
    assert organism.position.y == 3.0
    assert organism.energy == approx(100.0 - 0.25 * 1.0 * 2.0)
    assert organism.actions() == ["moved"]


def test_smaller_organisms_travel_farther(scripted_rng):
    small = _make_organism(motility=0.8, size=0.5)
    large = _make_organism(motility=0.8, size=2.0)

    small.move_organism(scripted_rng(0.0))
    large.move_organism(scripted_rng(0.0))

    # Angle 0 points straight along +x.
    assert small.position.x == approx(0.8 * 2.0 * 0.5)
    assert large.position.x == approx(0.8 * 0.5 * 0.5)
    assert small.position.z == approx(0.0)
    # Cost is distance * size, so both pay motility * scale * 2.
    assert small.energy == approx(large.energy)


def test_movement_can_drive_energy_negative():
    organism = _make_organism(motility=1.0, size=1.0, energy=0.2)
    organism.move_organism(DeterministicRng(1))
    assert organism.energy < 0.0
    assert not organism.is_alive


def test_photosynthesis_threshold_and_gain():
    dim = _make_organism(photosynthesis=0.04)
    dim.process_photosynthesis(1.0)
    assert dim.energy == approx(100.0)
    assert dim.actions() == []

    leafy = _make_organism(photosynthesis=0.6, size=2.0)
    leafy.process_photosynthesis(0.5)
    assert leafy.energy == approx(100.0 + 0.6 * 0.5 * 2.0 * 5.0)
    assert leafy.actions() == ["photosynthesis"]


def test_photosynthesis_is_recorded_even_in_darkness():
    organism = _make_organism(photosynthesis=0.5)
    organism.process_photosynthesis(0.0)
    assert organism.energy == approx(100.0)
    assert organism.actions() == ["photosynthesis"]


@pytest.mark.parametrize(
    "energy, reproduction, expected",
    [
        (50.0, 0.2, True),
        (49.999, 1.0, False),
        (500.0, 0.199, False),
        (120.0, 0.9, True),
    ],
)
def test_can_reproduce_thresholds(energy, reproduction, expected):
    organism = _make_organism(energy=energy, reproduction=reproduction)
    assert organism.can_reproduce() is expected


def test_reproduction_chance_is_not_capped():
    organism = _make_organism(energy=600.0, reproduction=1.0)
    assert organism.reproduction_chance() == approx(3.0)


def test_custom_organism_config_changes_thresholds():
    config = OrganismConfig(reproduction_energy_threshold=10.0, history_limit=2)
    organism = Organism(
        id="organism-7",
        position=Position(),
        size=1.0,
        traits=OrganismTraits(reproduction=0.5),
        energy=12.0,
        config=config,
    )
    for label in ["a", "b", "c"]:
        organism.record_action(label)

    assert organism.can_reproduce()
    assert organism.actions() == ["b", "c"]


def test_position_distance_is_euclidean():
    assert Position(1.0, 2.0, 2.0).distance(Position()) == approx(3.0)
    assert Position(0.0, 0.0, 0.0).distance(Position(0.0, 0.0, 0.0)) == 0.0
    assert math.isclose(distance(Position(-1.0, 0.0, 0.0), Position(1.0, 0.0, 0.0)), 2.0)
