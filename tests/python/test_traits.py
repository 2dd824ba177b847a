from __future__ import annotations

from pytest import approx

from vibelife.config import MutationConfig
from vibelife.rng import DeterministicRng
from vibelife.sim.core.traits import GENE_NAMES, OrganismTraits


def test_construction_saturates_out_of_range_genes():
    traits = OrganismTraits(
        motility=1.7,
        photosynthesis=-0.4,
        predation=0.3,
        defense=2.0,
        sensory=-10.0,
        reproduction=0.5,
        metabolism=1.0,
    )

    assert traits.motility == 1.0
    assert traits.photosynthesis == 0.0
    assert traits.predation == approx(0.3)
    assert traits.defense == 1.0
    assert traits.sensory == 0.0
    assert traits.metabolism == 1.0


def test_mutation_stays_in_unit_interval_under_heavy_bias():
    rng = DeterministicRng(11)
    heavy = {name: 50.0 for name in GENE_NAMES}
    traits = OrganismTraits(*([1.0] * 7))
    for _ in range(200):
        traits = traits.mutate(rng, heavy)
        assert all(0.0 <= value <= 1.0 for value in traits.to_dict().values())

    traits = OrganismTraits(*([0.0] * 7))
    for _ in range(200):
        traits = traits.mutate(rng, {})
        assert all(0.0 <= value <= 1.0 for value in traits.to_dict().values())


def test_mutation_is_pure_and_returns_new_vector():
    rng = DeterministicRng(3)
    parent = OrganismTraits(0.5, 0.5, 0.1, 0.1, 0.1, 0.5, 0.5)
    before = parent.to_dict()

    child = parent.mutate(rng, {"photosynthesis": 1.0})

    assert child is not parent
    assert parent.to_dict() == before


def test_mutation_applies_bias_only_to_matching_gene(scripted_rng):
    # Every draw is 0.5, so the random component is exactly zero.
    rng = scripted_rng(*([0.5] * 14))
    parent = OrganismTraits(0.5, 0.5, 0.5, 0.5, 0.5, 0.5, 0.5)

    child = parent.mutate(rng, {"photosynthesis": 1.0, "moved": 1.0})

    assert rng.consumed == 14
    assert child.photosynthesis == approx(0.5 + 1.0 * 0.05 * 0.5)
    for name in GENE_NAMES:
        if name != "photosynthesis":
            assert getattr(child, name) == approx(0.5)


def test_mutation_draws_base_before_bias_per_gene(scripted_rng):
    draws = []
    for _ in GENE_NAMES:
        draws.extend([1.0, 1.0])
    rng = scripted_rng(*draws)
    parent = OrganismTraits(*([0.2] * 7))

    child = parent.mutate(rng, {"motility": 0.5}, MutationConfig(step=0.1, bias=0.05))

    assert child.motility == approx(0.2 + 0.05 + 0.5 * 0.05)
    assert child.metabolism == approx(0.25)


def test_mutation_random_walk_is_bounded_per_step():
    rng = DeterministicRng(5)
    parent = OrganismTraits(*([0.5] * 7))
    child = parent.mutate(rng, {})
    for name in GENE_NAMES:
        assert abs(getattr(child, name) - 0.5) <= 0.05 + 1e-12
